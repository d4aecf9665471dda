"""
AI 基类和配置

定义 AI 策略接口以及按玩家等级分选择难度的技能表
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar

from xiangqi_practice.board import Board
from xiangqi_practice.types import Color, Move


@dataclass
class AIConfig:
    """AI 配置"""

    name: str = "AI"
    # 搜索深度（根节点算一层）
    depth: int = 2
    # 以该概率从前几名候选走法中随机挑一个，模拟"失误"
    randomness: float = 0.0
    # 随机挑选时的候选池大小
    candidate_pool: int = 5
    # 随机种子，None 表示不固定
    seed: int | None = None


@dataclass(frozen=True)
class SkillLevel:
    """难度档位"""

    min_rating: int
    depth: int
    randomness: float


# 按玩家等级分从低到高；等级分越低，搜索越浅、随机性越大
SKILL_TABLE: tuple[SkillLevel, ...] = (
    SkillLevel(min_rating=0, depth=2, randomness=0.3),
    SkillLevel(min_rating=1000, depth=2, randomness=0.1),
    SkillLevel(min_rating=1200, depth=3, randomness=0.05),
    SkillLevel(min_rating=1400, depth=3, randomness=0.0),
)


def skill_for_rating(rating: int) -> SkillLevel:
    """根据玩家等级分选择引擎难度"""
    chosen = SKILL_TABLE[0]
    for level in SKILL_TABLE:
        if rating >= level.min_rating:
            chosen = level
    return chosen


def config_for_rating(rating: int, seed: int | None = None) -> AIConfig:
    level = skill_for_rating(rating)
    return AIConfig(
        name=f"minimax-d{level.depth}",
        depth=level.depth,
        randomness=level.randomness,
        seed=seed,
    )


class AIStrategy(ABC):
    """AI 策略接口"""

    # 策略名称
    name: ClassVar[str] = "base"

    def __init__(self, config: AIConfig | None = None, rng: random.Random | None = None):
        self.config = config or AIConfig()
        self.rng = rng or random.Random(self.config.seed)

    @abstractmethod
    def select_move(self, board: Board, color: Color = Color.BLACK) -> Move | None:
        """选择一步走法

        Args:
            board: 当前棋盘
            color: AI 执子颜色

        Returns:
            选择的走法，如果没有合法走法则返回 None
        """
        pass
