"""
棋谱回放

每次都从初始局面重新推演，不依赖任何缓存或增量修改过的棋盘。
"""

from dataclasses import dataclass
from typing import Sequence

from xiangqi_practice.board import Board
from xiangqi_practice.types import Color, MoveRecord


@dataclass(frozen=True)
class ReplayFrame:
    """某一手的前后局面"""

    index: int
    before: Board
    after: Board
    move: MoveRecord

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "before": self.before.to_fen(),
            "after": self.after.to_fen(),
            "move": self.move.to_dict(),
        }


def board_at(
    history: Sequence[MoveRecord], count: int | None = None, start: Board | None = None
) -> Board:
    """从起始局面（默认标准开局）依次走完前 count 手（默认全部）"""
    board = start if start is not None else Board.initial()
    moves = history if count is None else history[:count]
    for record in moves:
        board = board.apply(record.move)
    return board


def turn_after(move_count: int) -> Color:
    """走了 move_count 手之后轮到谁：偶数红方，奇数黑方"""
    return Color.RED if move_count % 2 == 0 else Color.BLACK


def reconstruct(
    history: Sequence[MoveRecord], index: int | None = None, start: Board | None = None
) -> ReplayFrame:
    """重建第 index 手（从 0 开始）走之前和走之后的局面

    index 为 None 时取最后一手；start 为棋谱的起始局面，默认标准开局。
    """
    if index is None:
        index = len(history) - 1
    if not 0 <= index < len(history):
        raise IndexError(f"Move index {index} out of range for history of {len(history)}")

    before = board_at(history, index, start)
    move = history[index]
    return ReplayFrame(index=index, before=before, after=before.apply(move.move), move=move)


def practice_prefix(history: Sequence[MoveRecord], critical_index: int) -> tuple[MoveRecord, ...]:
    """从失误处重练：截取关键手之前的棋谱"""
    if not 0 <= critical_index < len(history):
        raise IndexError(
            f"Critical index {critical_index} out of range for history of {len(history)}"
        )
    return tuple(history[:critical_index])
