"""
对局管理类

管理一局人机对弈：棋谱（只追加）、轮到谁走、终局判定
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence
from uuid import uuid4

import arrow

from xiangqi_practice.board import Board, glyph
from xiangqi_practice.replay import board_at, practice_prefix, turn_after
from xiangqi_practice.rules import has_legal_move, is_in_check, is_legal, legal_destinations
from xiangqi_practice.types import Color, GameResult, Move, MoveRecord, PieceType, Position


class EndReason(Enum):
    """终局原因"""

    GENERAL_CAPTURED = "general_captured"
    NO_LEGAL_MOVES = "no_legal_moves"
    RESIGNATION = "resignation"


@dataclass(frozen=True)
class GameRecord:
    """终局记录，供等级分计算和复盘分析使用"""

    result: GameResult
    winner: Color
    reason: EndReason
    history: tuple[MoveRecord, ...]
    finished_at: arrow.Arrow = field(default_factory=arrow.utcnow)

    def to_dict(self) -> dict:
        return {
            "result": self.result.value,
            "winner": self.winner.value,
            "reason": self.reason.value,
            "history": [record.to_dict() for record in self.history],
            "finished_at": self.finished_at.isoformat(),
        }


def describe_move(board: Board, move: Move) -> str:
    """生成走棋描述，例如 "红车0->0" """
    piece = board.get_piece(move.from_pos)
    if piece is None:
        return move.to_notation()
    return f"{piece.color.label}{glyph(piece)}{move.from_pos.x}->{move.to_pos.x}"


class GameSession:
    """象棋对局

    棋盘始终由起始局面加棋谱推导而来；只能通过 make_move 一步一步追加合法走法。
    start 默认为标准开局，也可以是残局练习的局面（红方先走）。
    """

    def __init__(
        self,
        history: Sequence[MoveRecord] = (),
        session_id: str | None = None,
        player_color: Color = Color.RED,
        start: Board | None = None,
    ):
        self.session_id = session_id or str(uuid4())
        self.player_color = player_color
        self.start = start if start is not None else Board.initial()
        self._history: list[MoveRecord] = list(history)
        self._board = board_at(self._history, start=self.start)
        self.turn = turn_after(len(self._history))
        self.winner: Color | None = None
        self.end_reason: EndReason | None = None
        self._finished_at: arrow.Arrow | None = None
        self._check_terminal(captured_general=self._board.find_general(self.turn) is None)

    @classmethod
    def from_practice(
        cls, history: Sequence[MoveRecord], critical_index: int, player_color: Color = Color.RED
    ) -> "GameSession":
        """从关键失误之前的局面开始一局新对局"""
        return cls(practice_prefix(history, critical_index), player_color=player_color)

    @property
    def board(self) -> Board:
        return self._board

    @property
    def history(self) -> tuple[MoveRecord, ...]:
        return tuple(self._history)

    @property
    def is_over(self) -> bool:
        return self.winner is not None

    @property
    def result(self) -> GameResult | None:
        """玩家视角的结果，未结束为 None"""
        if self.winner is None:
            return None
        return GameResult.WIN if self.winner == self.player_color else GameResult.LOSS

    @property
    def last_move(self) -> MoveRecord | None:
        return self._history[-1] if self._history else None

    def is_legal(self, from_pos: Position, to_pos: Position) -> bool:
        if self.is_over:
            return False
        return is_legal(self._board, from_pos, to_pos, self.turn)

    def legal_destinations(self, from_pos: Position) -> list[Position]:
        """选中棋子可以走到的位置"""
        if self.is_over:
            return []
        return legal_destinations(self._board, from_pos, self.turn)

    def is_in_check(self) -> bool:
        """当前方是否被将军"""
        return is_in_check(self._board, self.turn)

    def make_move(self, from_pos: Position, to_pos: Position) -> MoveRecord | None:
        """执行走棋

        返回：追加的走棋记录；走法不合法或对局已结束时返回 None
        """
        if not self.is_legal(from_pos, to_pos):
            return None

        move = Move(from_pos, to_pos)
        target = self._board.get_piece(to_pos)
        record = MoveRecord(from_pos, to_pos, self.turn, describe_move(self._board, move))

        self._board = self._board.apply(move)
        self._history.append(record)

        captured_general = target is not None and target.piece_type == PieceType.GENERAL
        # 切换回合
        self.turn = self.turn.opposite
        self._check_terminal(captured_general)
        return record

    def resign(self, color: Color | None = None) -> bool:
        """认输（默认玩家认输）"""
        if self.is_over:
            return False
        loser = color or self.player_color
        self._finish(loser.opposite, EndReason.RESIGNATION)
        return True

    def _check_terminal(self, captured_general: bool) -> None:
        """判断游戏是否结束：将被吃，或轮到的一方无子可走（判负，无逼和）"""
        if self.is_over:
            return
        if captured_general:
            self._finish(self.turn.opposite, EndReason.GENERAL_CAPTURED)
        elif not has_legal_move(self._board, self.turn):
            self._finish(self.turn.opposite, EndReason.NO_LEGAL_MOVES)

    def _finish(self, winner: Color, reason: EndReason) -> None:
        self.winner = winner
        self.end_reason = reason
        self._finished_at = arrow.utcnow()

    def outcome(self) -> GameRecord | None:
        """终局记录，未结束为 None"""
        if self.winner is None or self.end_reason is None:
            return None
        return GameRecord(
            result=self.result,
            winner=self.winner,
            reason=self.end_reason,
            history=self.history,
            finished_at=self._finished_at or arrow.utcnow(),
        )

    def to_dict(self) -> dict:
        """序列化为字典"""
        return {
            "session_id": self.session_id,
            "board": self._board.to_fen(),
            "turn": self.turn.value,
            "result": self.result.value if self.result else None,
            "end_reason": self.end_reason.value if self.end_reason else None,
            "move_count": len(self._history),
            "is_in_check": self.is_in_check(),
            "history": [record.to_dict() for record in self._history],
        }

    def __repr__(self) -> str:
        return (
            f"GameSession({self.session_id}, turn={self.turn.value}, moves={len(self._history)})"
        )
