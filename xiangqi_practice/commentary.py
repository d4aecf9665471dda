"""
点评服务适配

点评服务是外部协作方（通常是大模型），这里只负责：
- 在线程池里调用，不阻塞走棋和回合推进
- 任何失败（超时、网络错误、返回格式不对）都降级为占位文案
- 解析复盘反馈里的 JSON
"""

import json
import re
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from enum import Enum
from typing import Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from xiangqi_practice.logging import logger
from xiangqi_practice.types import MoveRecord

# 开局时的默认点评
OPENING_COMMENT = "来吧，让我看看你的实力。"
# 引擎走完后的提示
YOUR_TURN_COMMENT = "轮到你了。"
# 点评服务失败时的占位文案
COMMENTARY_PLACEHOLDER = "Thinking... (Net Error)"
# 复盘失败时的文案
ANALYSIS_FAILED = "分析失败: 网络连接异常或请求超时。"

_JSON_FENCE = re.compile(r"```(?:json)?")


class ReviewMode(str, Enum):
    """复盘模式"""

    ANALYSIS_WIN = "analysis_win"
    ANALYSIS_LOSS = "analysis_loss"


class AdvisoryService(Protocol):
    """外部点评服务接口"""

    def move_commentary(self, snapshot: str, last_move: str) -> str:
        """点评刚走的一步，snapshot 为 Board.to_fen() 局面"""
        ...

    def game_review(self, mode: ReviewMode, moves: str) -> str:
        """整盘复盘，返回包含 criticalMoveIndex/analysis 的 JSON 文本"""
        ...


class CoachFeedback(BaseModel):
    """复盘反馈"""

    model_config = ConfigDict(populate_by_name=True)

    analysis: str = ""
    # 关键一手（从 0 开始），-1 表示没有
    critical_move_index: int = Field(default=-1, alias="criticalMoveIndex")

    @property
    def has_critical_move(self) -> bool:
        return self.critical_move_index >= 0


def format_move_list(history: Sequence[MoveRecord]) -> str:
    """棋谱文本，每行 "序号. 描述" """
    return "\n".join(f"{i}. {record.description}" for i, record in enumerate(history))


def parse_coach_feedback(text: str) -> CoachFeedback:
    """从服务返回的文本中提取 JSON 反馈

    会去掉 ```json 代码块标记，并截取第一个 { 到最后一个 } 之间的内容。
    """
    cleaned = _JSON_FENCE.sub("", text).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end != -1:
        cleaned = cleaned[start : end + 1]

    try:
        return CoachFeedback.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.warning("Malformed coach feedback: {}", e)
        return CoachFeedback(analysis=ANALYSIS_FAILED, critical_move_index=-1)


class CommentaryRequest:
    """一次点评请求，可以等待结果，也可以取消"""

    def __init__(self, future: "Future[str]", timeout: float, fallback: str):
        self._future = future
        self._timeout = timeout
        self._fallback = fallback

    def done(self) -> bool:
        return self._future.done()

    def cancel(self) -> bool:
        return self._future.cancel()

    def result(self, timeout: float | None = None) -> str:
        """等待结果；失败、超时或已取消都返回占位文案"""
        if self._future.cancelled():
            return self._fallback
        try:
            return self._future.result(timeout=self._timeout if timeout is None else timeout)
        except FutureTimeoutError:
            logger.warning("Advisory service timed out")
        except Exception as e:
            logger.warning("Advisory service failed: {!r}", e)
        return self._fallback


class CommentaryClient:
    """点评服务客户端

    所有调用都在后台线程执行，调用方拿到 CommentaryRequest 后自行决定何时读取。
    自建的线程池在 close() 或退出 with 语句时释放。
    """

    def __init__(
        self,
        service: AdvisoryService,
        timeout: float = 15.0,
        executor: ThreadPoolExecutor | None = None,
    ):
        self.service = service
        self.timeout = timeout
        self._executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="advisory"
        )
        self._owns_executor = executor is None

    def request_commentary(self, snapshot: str, last_move: str) -> CommentaryRequest:
        future = self._executor.submit(self._commentary, snapshot, last_move)
        return CommentaryRequest(future, self.timeout, COMMENTARY_PLACEHOLDER)

    def request_review(self, mode: ReviewMode, history: Sequence[MoveRecord]) -> CommentaryRequest:
        future = self._executor.submit(self.service.game_review, mode, format_move_list(history))
        return CommentaryRequest(future, self.timeout, "")

    def review(self, mode: ReviewMode, history: Sequence[MoveRecord]) -> CoachFeedback:
        """同步复盘（带超时），失败时返回无关键手的反馈"""
        text = self.request_review(mode, history).result()
        if not text:
            return CoachFeedback(analysis=ANALYSIS_FAILED, critical_move_index=-1)
        return parse_coach_feedback(text)

    def _commentary(self, snapshot: str, last_move: str) -> str:
        text = self.service.move_commentary(snapshot, last_move)
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"Empty commentary: {text!r}")
        return text.strip()

    def close(self) -> None:
        """释放自建的线程池；外部传入的线程池由调用方管理"""
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "CommentaryClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
