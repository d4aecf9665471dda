"""
Minimax AI 策略

带 Alpha-Beta 剪枝的固定深度 Minimax 搜索 AI
"""

import random
import time
from typing import ClassVar

from xiangqi_practice.ai.base import AIConfig, AIStrategy
from xiangqi_practice.ai.evaluator import Evaluator
from xiangqi_practice.board import Board
from xiangqi_practice.logging import logger
from xiangqi_practice.rules import generate_moves
from xiangqi_practice.types import Color, Move

# 无子可走时的分数（远大于任何局面评估）
WIN_SCORE = 100000


class MinimaxAI(AIStrategy):
    """Minimax AI

    评估分数以黑方为正：maximizing=True 表示轮到黑方走。
    """

    name: ClassVar[str] = "minimax"

    def __init__(
        self,
        config: AIConfig | None = None,
        rng: random.Random | None = None,
        evaluator: Evaluator | None = None,
    ):
        super().__init__(config, rng)
        self.evaluator = evaluator or Evaluator()
        self._nodes_searched = 0

    def minimax(
        self, board: Board, depth: int, alpha: float, beta: float, maximizing: bool
    ) -> float:
        """Minimax 搜索，带 Alpha-Beta 剪枝"""
        self._nodes_searched += 1

        # 达到搜索深度，返回评估值
        if depth <= 0:
            return self.evaluator.evaluate(board)

        turn = Color.BLACK if maximizing else Color.RED
        moves = generate_moves(board, turn)
        if not moves:
            # 无子可走即判负（象棋没有逼和）
            return -WIN_SCORE if maximizing else WIN_SCORE

        if maximizing:
            best_score = float("-inf")
            for move in moves:
                score = self.minimax(board.apply(move), depth - 1, alpha, beta, False)
                best_score = max(best_score, score)
                alpha = max(alpha, score)
                # Alpha-Beta 剪枝
                if beta <= alpha:
                    break
            return best_score

        best_score = float("inf")
        for move in moves:
            score = self.minimax(board.apply(move), depth - 1, alpha, beta, True)
            best_score = min(best_score, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return best_score

    def score_moves(self, board: Board, color: Color = Color.BLACK) -> list[tuple[Move, float]]:
        """为每个合法走法打分，按分数从高到低排序

        分数是 color 视角：越高越好。每个根走法都用完整窗口单独搜索，保证分数可比。
        """
        self._nodes_searched = 0
        started = time.perf_counter()

        maximizing_next = color == Color.RED
        sign = 1 if color == Color.BLACK else -1
        depth = self.config.depth

        scored: list[tuple[Move, float]] = []
        for move in generate_moves(board, color):
            score = self.minimax(
                board.apply(move), depth - 1, float("-inf"), float("inf"), maximizing_next
            )
            scored.append((move, sign * score))

        scored.sort(key=lambda item: item[1], reverse=True)
        logger.debug(
            "{} scored {} moves at depth {} ({} nodes, {:.1f} ms)",
            self.config.name,
            len(scored),
            depth,
            self._nodes_searched,
            (time.perf_counter() - started) * 1000,
        )
        return scored

    def select_move(self, board: Board, color: Color = Color.BLACK) -> Move | None:
        scored = self.score_moves(board, color)
        if not scored:
            return None

        # 如果配置了随机性，按概率从前几名中随机选择
        roll = self.rng.random()
        if roll < self.config.randomness and len(scored) > 1:
            pool = scored[: min(self.config.candidate_pool, len(scored))]
            return self.rng.choice(pool)[0]

        return scored[0][0]

    @property
    def nodes_searched(self) -> int:
        """返回上次搜索的节点数"""
        return self._nodes_searched
