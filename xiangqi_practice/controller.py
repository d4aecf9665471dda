"""
人机对弈控制器

显式状态机：
    AWAITING_PLAYER_MOVE -> PIECE_SELECTED -> AI_THINKING -> (AWAITING_PLAYER_MOVE | GAME_OVER)

重来/认输需要二次确认：第一次点击进入确认状态，确认窗口（默认 3 秒）内再次点击才生效。
引擎搜索可以放到线程池里执行，结果带着对局版本号回来，版本过期的结果直接丢弃。
"""

import random
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from xiangqi_practice.ai import MinimaxAI, config_for_rating
from xiangqi_practice.board import Board
from xiangqi_practice.commentary import (
    OPENING_COMMENT,
    YOUR_TURN_COMMENT,
    CoachFeedback,
    CommentaryClient,
    CommentaryRequest,
    ReviewMode,
)
from xiangqi_practice.config import PracticeConfig
from xiangqi_practice.game import GameRecord, GameSession
from xiangqi_practice.logging import logger
from xiangqi_practice.rating import apply_result, rank_title
from xiangqi_practice.rating_store import InMemoryRatingStore, RatingStore
from xiangqi_practice.replay import ReplayFrame, practice_prefix, reconstruct
from xiangqi_practice.types import Color, GameResult, Move, MoveRecord, Position


class ControllerState(Enum):
    """控制器状态"""

    AWAITING_PLAYER_MOVE = "awaiting_player_move"
    PIECE_SELECTED = "piece_selected"
    AI_THINKING = "ai_thinking"
    GAME_OVER = "game_over"


class PendingConfirmation(Enum):
    """等待二次确认的操作"""

    NONE = "none"
    RESTART = "restart"
    RESIGN = "resign"


class ClickOutcome(Enum):
    """一次点击的处理结果"""

    IGNORED = "ignored"
    SELECTED = "selected"
    DESELECTED = "deselected"
    MOVED = "moved"
    # 不合法的目标，保留原选择
    REJECTED = "rejected"


@dataclass(frozen=True)
class AiTicket:
    """一次引擎思考任务"""

    version: int
    board: Board
    color: Color


@dataclass(frozen=True)
class AiReply:
    """引擎思考结果"""

    version: int
    move: Move | None


@dataclass(frozen=True)
class GameSummary:
    """一局结束后的汇总"""

    record: GameRecord
    rating_before: int
    rating_after: int
    rating_change: int
    rank_title: str

    @property
    def result(self) -> GameResult:
        return self.record.result

    @property
    def history(self) -> tuple[MoveRecord, ...]:
        return self.record.history


class GameController:
    """人机对弈控制器（玩家执红，引擎执黑）"""

    def __init__(
        self,
        rating_store: RatingStore | None = None,
        config: PracticeConfig | None = None,
        commentary: CommentaryClient | None = None,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ):
        self.config = config or PracticeConfig()
        self.rating_store = rating_store or InMemoryRatingStore(self.config.default_rating)
        self.commentary = commentary
        self._clock = clock
        self.rng = rng or random.Random(self.config.seed)

        self.version = 0
        self.rating = self.config.default_rating
        self.state = ControllerState.AWAITING_PLAYER_MOVE
        self.selected: Position | None = None
        self.comment = OPENING_COMMENT
        self.summary: GameSummary | None = None
        self._pending = PendingConfirmation.NONE
        self._armed_at: float | None = None
        self._comment_request: CommentaryRequest | None = None
        self._start(())

    # ------------------------------------------------------------------
    # 对局生命周期
    # ------------------------------------------------------------------

    def _start(self, history: tuple[MoveRecord, ...]) -> None:
        """开始新对局：读取等级分、按等级分配置引擎、版本号加一"""
        self.version += 1
        self.rating = self.rating_store.load()
        ai_config = config_for_rating(self.rating)
        ai_config.candidate_pool = self.config.candidate_pool
        self.ai = MinimaxAI(ai_config, rng=self.rng)

        self.session = GameSession(history)
        self.selected = None
        self.summary = None
        self._disarm()
        self._cancel_comment()
        self.comment = OPENING_COMMENT

        logger.info(
            "Session v{} started: rating={} engine={} prefix={} moves",
            self.version,
            self.rating,
            ai_config.name,
            len(history),
        )
        if self.session.is_over:
            self._finish()
        else:
            self._advance_turn()

    def new_game(self) -> GameSession:
        """开启新对局（再来一局）"""
        self._start(())
        return self.session

    def practice_from_mistake(self, critical_index: int) -> GameSession:
        """从上一局的关键失误之前重新开始"""
        if self.summary is None:
            raise ValueError("No finished game to practice from")
        self._start(practice_prefix(self.summary.history, critical_index))
        return self.session

    def _advance_turn(self) -> None:
        if self.session.turn == self.session.player_color:
            self.state = ControllerState.AWAITING_PLAYER_MOVE
        else:
            self.state = ControllerState.AI_THINKING

    def _finish(self) -> None:
        """终局：计算等级分变化并写回存档"""
        record = self.session.outcome()
        if record is None:
            return
        rating_before = self.rating
        rating_after, change = apply_result(
            rating_before,
            record.result,
            k=self.config.elo_k,
            offset=self.config.engine_rating_offset,
        )
        self.rating_store.save(rating_after)
        self.rating = rating_after
        self.summary = GameSummary(
            record=record,
            rating_before=rating_before,
            rating_after=rating_after,
            rating_change=change,
            rank_title=rank_title(rating_after),
        )
        self.state = ControllerState.GAME_OVER
        self.selected = None
        self._disarm()
        logger.info(
            "Session v{} over: {} by {} after {} moves, rating {} -> {}",
            self.version,
            record.result.value,
            record.reason.value,
            len(record.history),
            rating_before,
            rating_after,
        )

    # ------------------------------------------------------------------
    # 玩家操作
    # ------------------------------------------------------------------

    @property
    def board(self) -> Board:
        return self.session.board

    @property
    def legal_targets(self) -> list[Position]:
        """当前选中棋子的可走位置（用于高亮）"""
        if self.selected is None:
            return []
        return self.session.legal_destinations(self.selected)

    def click(self, pos: Position) -> ClickOutcome:
        """处理一次棋盘点击"""
        self._expire_confirmation()
        if self.state not in (ControllerState.AWAITING_PLAYER_MOVE, ControllerState.PIECE_SELECTED):
            return ClickOutcome.IGNORED
        if not pos.is_valid():
            return ClickOutcome.IGNORED

        piece = self.board.get_piece(pos)
        if piece is not None and piece.color == self.session.turn:
            self.selected = pos
            self.state = ControllerState.PIECE_SELECTED
            return ClickOutcome.SELECTED

        if self.selected is None:
            return ClickOutcome.IGNORED

        if self.session.is_legal(self.selected, pos):
            self._play(self.selected, pos, by_ai=False)
            return ClickOutcome.MOVED

        if piece is None:
            self.selected = None
            self.state = ControllerState.AWAITING_PLAYER_MOVE
            return ClickOutcome.DESELECTED
        return ClickOutcome.REJECTED

    def play_move(self, from_pos: Position, to_pos: Position) -> MoveRecord | None:
        """直接走一步（不经过选子），不合法返回 None"""
        self._expire_confirmation()
        if self.state not in (ControllerState.AWAITING_PLAYER_MOVE, ControllerState.PIECE_SELECTED):
            return None
        if not self.session.is_legal(from_pos, to_pos):
            return None
        return self._play(from_pos, to_pos, by_ai=False)

    def _play(self, from_pos: Position, to_pos: Position, by_ai: bool) -> MoveRecord | None:
        record = self.session.make_move(from_pos, to_pos)
        if record is None:
            return None
        self.selected = None

        if by_ai:
            self._cancel_comment()
            self.comment = YOUR_TURN_COMMENT
        else:
            self._request_comment(record)

        if self.session.is_over:
            self._finish()
        else:
            self._advance_turn()
        return record

    # ------------------------------------------------------------------
    # 引擎回合
    # ------------------------------------------------------------------

    def start_ai_turn(self) -> AiTicket | None:
        """取出引擎思考任务，不是引擎回合时返回 None"""
        if self.state != ControllerState.AI_THINKING:
            return None
        return AiTicket(self.version, self.session.board, self.session.turn)

    def compute_ai_reply(self, ticket: AiTicket) -> AiReply:
        """执行搜索（纯计算，可以在线程池里跑）"""
        return AiReply(ticket.version, self.ai.select_move(ticket.board, ticket.color))

    def apply_ai_reply(self, reply: AiReply) -> bool:
        """应用引擎走法；版本过期（期间重来/认输/新对局）则丢弃"""
        if reply.version != self.version or self.state != ControllerState.AI_THINKING:
            logger.debug("Discarding stale AI reply v{} (current v{})", reply.version, self.version)
            return False
        if reply.move is None:
            logger.warning("AI reply without move in session v{}", self.version)
            return False
        return self._play(reply.move.from_pos, reply.move.to_pos, by_ai=True) is not None

    def submit_ai_turn(self, executor: Executor) -> "Future[AiReply] | None":
        """把引擎搜索提交到线程池；调用方拿到结果后交给 apply_ai_reply"""
        ticket = self.start_ai_turn()
        if ticket is None:
            return None
        return executor.submit(self.compute_ai_reply, ticket)

    def run_ai_turn(self) -> MoveRecord | None:
        """同步执行一次引擎回合"""
        ticket = self.start_ai_turn()
        if ticket is None:
            return None
        if self.apply_ai_reply(self.compute_ai_reply(ticket)):
            return self.session.last_move
        return None

    # ------------------------------------------------------------------
    # 重来 / 认输（二次确认）
    # ------------------------------------------------------------------

    @property
    def pending_confirmation(self) -> PendingConfirmation:
        self._expire_confirmation()
        return self._pending

    def request_restart(self) -> bool:
        """第一次调用进入确认状态，确认窗口内再次调用才重开，返回是否已重开"""
        if self.state == ControllerState.GAME_OVER:
            return False
        if self._confirm(PendingConfirmation.RESTART):
            self._start(())
            return True
        return False

    def request_resign(self) -> bool:
        """第一次调用进入确认状态，确认窗口内再次调用才认输，返回是否已认输"""
        if self.state == ControllerState.GAME_OVER:
            return False
        if self._confirm(PendingConfirmation.RESIGN):
            # 正在进行的引擎搜索结果作废
            self.version += 1
            self.session.resign(self.session.player_color)
            self._finish()
            return True
        return False

    def _confirm(self, kind: PendingConfirmation) -> bool:
        self._expire_confirmation()
        if self._pending == kind:
            self._disarm()
            return True
        self._pending = kind
        self._armed_at = self._clock()
        return False

    def _expire_confirmation(self) -> None:
        if self._pending == PendingConfirmation.NONE or self._armed_at is None:
            return
        if self._clock() - self._armed_at >= self.config.confirm_window_seconds:
            self._disarm()

    def _disarm(self) -> None:
        self._pending = PendingConfirmation.NONE
        self._armed_at = None

    # ------------------------------------------------------------------
    # 点评 / 复盘
    # ------------------------------------------------------------------

    def _request_comment(self, record: MoveRecord) -> None:
        if self.commentary is None:
            return
        self._cancel_comment()
        self._comment_request = self.commentary.request_commentary(
            self.board.to_fen(), record.description
        )

    def _cancel_comment(self) -> None:
        if self._comment_request is not None:
            self._comment_request.cancel()
            self._comment_request = None

    def latest_comment(self) -> str:
        """最新点评；请求还没返回时返回上一条"""
        request = self._comment_request
        if request is not None and request.done():
            self.comment = request.result(timeout=0)
            self._comment_request = None
        return self.comment

    def review_last_game(self) -> CoachFeedback:
        """请求对上一局的复盘反馈"""
        if self.summary is None:
            raise ValueError("No finished game to review")
        if self.commentary is None:
            return CoachFeedback()
        mode = (
            ReviewMode.ANALYSIS_WIN
            if self.summary.result == GameResult.WIN
            else ReviewMode.ANALYSIS_LOSS
        )
        return self.commentary.review(mode, self.summary.history)

    def replay_frame(self, index: int | None = None) -> ReplayFrame:
        """上一局（或当前对局）第 index 手的前后局面"""
        history = self.summary.history if self.summary else self.session.history
        return reconstruct(history, index)
