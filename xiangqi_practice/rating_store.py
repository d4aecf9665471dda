"""
等级分存档

宿主应用持有的键值存储：开局时读取一次，每局结束后写入一次。
"""

import json
from pathlib import Path
from typing import Protocol

import arrow

from xiangqi_practice.logging import logger
from xiangqi_practice.rating import DEFAULT_RATING

RATING_KEY = "chess_user_elo"


class RatingStore(Protocol):
    """等级分存储接口"""

    def load(self) -> int: ...

    def save(self, rating: int) -> None: ...


class InMemoryRatingStore:
    """内存存储，用于测试和一次性会话"""

    def __init__(self, rating: int = DEFAULT_RATING):
        self.rating = rating
        self.saves: list[int] = []

    def load(self) -> int:
        return self.rating

    def save(self, rating: int) -> None:
        self.rating = rating
        self.saves.append(rating)


class JsonRatingStore:
    """JSON 文件存储

    文件内容: {"chess_user_elo": 1223, "updated_at": "..."}
    """

    def __init__(self, path: Path, key: str = RATING_KEY, default: int = DEFAULT_RATING):
        self.path = Path(path)
        self.key = key
        self.default = default

    def load(self) -> int:
        """读取等级分，文件不存在或损坏时返回默认值"""
        if not self.path.exists():
            return self.default
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return int(data[self.key])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Corrupt rating store {}: {!r}, using {}", self.path, e, self.default)
            return self.default

    def save(self, rating: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {self.key: int(rating), "updated_at": arrow.utcnow().isoformat()}
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.debug("Saved rating {} to {}", rating, self.path)
