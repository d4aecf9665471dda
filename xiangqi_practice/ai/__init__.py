"""
AI Engine Module

Fixed-depth minimax opponent with skill-scaled depth and randomness.
"""

from xiangqi_practice.ai.base import (
    SKILL_TABLE,
    AIConfig,
    AIStrategy,
    SkillLevel,
    config_for_rating,
    skill_for_rating,
)
from xiangqi_practice.ai.evaluator import Evaluator
from xiangqi_practice.ai.minimax_ai import WIN_SCORE, MinimaxAI

__all__ = [
    "AIConfig",
    "AIStrategy",
    "Evaluator",
    "MinimaxAI",
    "SKILL_TABLE",
    "SkillLevel",
    "WIN_SCORE",
    "config_for_rating",
    "skill_for_rating",
]
