"""
练习模式配置

所有可调参数集中在 PracticeConfig，可从环境变量 XIANGQI_* 覆盖。
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from xiangqi_practice.logging import RUNTIME_LOGS_DIR

ENV_PREFIX = "XIANGQI_"


@dataclass
class PracticeConfig:
    """练习模式配置"""

    # 没有存档时的初始等级分
    default_rating: int = 1200
    # Elo K 值（调整幅度）
    elo_k: int = 40
    # 引擎等级分 = 玩家等级分 + offset
    engine_rating_offset: int = 50
    # 重来/认输需要在该时间内再次点击确认（秒）
    confirm_window_seconds: float = 3.0
    # 引擎随机挑选时的候选池大小
    candidate_pool: int = 5
    # 等级分存档文件
    rating_file: Path = field(default_factory=lambda: Path("data") / "rating.json")
    # 运行日志目录
    log_dir: Path = RUNTIME_LOGS_DIR
    # 引擎随机种子，None 表示不固定
    seed: int | None = None

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "PracticeConfig":
        """从环境变量读取配置，未设置的项使用默认值"""
        env = os.environ if environ is None else environ
        config = cls()
        for attr, convert in _ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + attr.upper())
            if value:
                setattr(config, attr, convert(value))
        return config


# 字段名 -> 类型转换；环境变量名为 XIANGQI_ + 字段名大写
_ENV_FIELDS = {
    "default_rating": int,
    "elo_k": int,
    "engine_rating_offset": int,
    "confirm_window_seconds": float,
    "candidate_pool": int,
    "rating_file": Path,
    "log_dir": Path,
    "seed": int,
}
