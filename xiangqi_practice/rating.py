"""
Elo 等级分

纯函数：期望得分、等级分变化、段位称号。
"""

import math

from xiangqi_practice.types import GameResult

# K 值：调整幅度（偏大，便于快速收敛）
ELO_K_FACTOR = 40
# 引擎等级分始终比玩家高 50，模拟一个略强的对手
ENGINE_RATING_OFFSET = 50
DEFAULT_RATING = 1200

ACTUAL_SCORES = {
    GameResult.WIN: 1.0,
    GameResult.LOSS: 0.0,
    GameResult.DRAW: 0.5,
}

# (上限, 称号)，等级分小于上限即为该称号
RANK_TITLES: tuple[tuple[int, str], ...] = (
    (1000, "初学乍练"),
    (1100, "业余九级"),
    (1200, "业余八级"),
    (1300, "业余七级"),
    (1400, "业余五级"),
    (1500, "业余三级"),
    (1600, "业余一级"),
    (1800, "地方大师"),
)
TOP_RANK_TITLE = "特级大师"


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def expected_score(player_rating: int, opponent_rating: int) -> float:
    """玩家对对手的期望得分"""
    return 1 / (1 + 10 ** ((opponent_rating - player_rating) / 400))


def elo_change(
    player_rating: int, opponent_rating: int, result: GameResult, k: int = ELO_K_FACTOR
) -> int:
    """计算一局之后玩家等级分的变化

    >>> elo_change(1200, 1250, GameResult.WIN)
    23
    >>> elo_change(1200, 1250, GameResult.LOSS)
    -17
    """
    expected = expected_score(player_rating, opponent_rating)
    return _round_half_up(k * (ACTUAL_SCORES[result] - expected))


def engine_rating(player_rating: int, offset: int = ENGINE_RATING_OFFSET) -> int:
    """引擎的有效等级分"""
    return player_rating + offset


def apply_result(
    player_rating: int,
    result: GameResult,
    k: int = ELO_K_FACTOR,
    offset: int = ENGINE_RATING_OFFSET,
) -> tuple[int, int]:
    """对引擎打完一局后的新等级分，返回 (新等级分, 变化量)"""
    change = elo_change(player_rating, engine_rating(player_rating, offset), result, k)
    return player_rating + change, change


def rank_title(rating: int) -> str:
    """等级分对应的段位称号"""
    for upper, title in RANK_TITLES:
        if rating < upper:
            return title
    return TOP_RANK_TITLE
