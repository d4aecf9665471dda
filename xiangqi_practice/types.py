"""
核心类型定义

定义象棋中所有基础数据类型

坐标系统 (x, y)：
- x: 0-8 (从左到右，对应路)
- y: 0-9 (0 是黑方底线，9 是红方底线)

红方永远在下方（玩家），黑方永远在上方（引擎）。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple


class Color(Enum):
    """棋子颜色/阵营"""

    RED = "red"
    BLACK = "black"

    @property
    def opposite(self) -> "Color":
        """获取对方阵营"""
        return Color.BLACK if self == Color.RED else Color.RED

    @property
    def label(self) -> str:
        return "红" if self == Color.RED else "黑"


class PieceType(Enum):
    """棋子类型"""

    # 将/帅
    GENERAL = "general"
    # 士/仕
    ADVISOR = "advisor"
    # 象/相
    ELEPHANT = "elephant"
    # 马
    HORSE = "horse"
    # 车
    CHARIOT = "chariot"
    # 炮
    CANNON = "cannon"
    # 卒/兵
    SOLDIER = "soldier"


class Position(NamedTuple):
    """棋盘位置 (x, y)"""

    x: int
    y: int

    def is_valid(self) -> bool:
        """检查位置是否在棋盘范围内"""
        return 0 <= self.x <= 8 and 0 <= self.y <= 9

    def is_in_palace(self, color: Color) -> bool:
        """检查位置是否在九宫格内"""
        if not (3 <= self.x <= 5):
            return False
        if color == Color.RED:
            return 7 <= self.y <= 9
        else:
            return 0 <= self.y <= 2

    def is_on_own_side(self, color: Color) -> bool:
        """检查位置是否在己方半场（未过河）"""
        if color == Color.RED:
            return 5 <= self.y <= 9
        else:
            return 0 <= self.y <= 4

    def __add__(self, other: tuple[int, int]) -> "Position":
        """位置加偏移量"""
        return Position(self.x + other[0], self.y + other[1])


@dataclass(frozen=True)
class Piece:
    """棋子

    tag 只用于展示层追踪同一个棋子（例如动画），不参与规则判断与比较。
    """

    piece_type: PieceType
    color: Color
    tag: str = field(default="", compare=False)

    def to_dict(self) -> dict:
        """序列化为字典"""
        return {"type": self.piece_type.value, "color": self.color.value}


class Move(NamedTuple):
    """走棋动作"""

    from_pos: Position
    to_pos: Position

    def to_notation(self) -> str:
        """转换为记谱法 "fxfy-txty"，例如 "09-07" """
        return f"{self.from_pos.x}{self.from_pos.y}-{self.to_pos.x}{self.to_pos.y}"

    @classmethod
    def from_notation(cls, notation: str) -> "Move":
        """从记谱法解析"""
        parts = notation.strip().split("-")
        if len(parts) != 2 or any(len(p) != 2 or not p.isdigit() for p in parts):
            raise ValueError(f"Invalid move notation: {notation!r}")
        from_pos = Position(int(parts[0][0]), int(parts[0][1]))
        to_pos = Position(int(parts[1][0]), int(parts[1][1]))
        if not (from_pos.is_valid() and to_pos.is_valid()):
            raise ValueError(f"Move out of board: {notation!r}")
        return cls(from_pos, to_pos)


@dataclass(frozen=True)
class MoveRecord:
    """走棋记录

    历史只追加不修改，description 是给人看的描述，例如 "红车0->0"。
    """

    from_pos: Position
    to_pos: Position
    color: Color
    description: str = ""

    @property
    def move(self) -> Move:
        return Move(self.from_pos, self.to_pos)

    def to_dict(self) -> dict:
        return {
            "from": {"x": self.from_pos.x, "y": self.from_pos.y},
            "to": {"x": self.to_pos.x, "y": self.to_pos.y},
            "color": self.color.value,
            "desc": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MoveRecord":
        return cls(
            Position(data["from"]["x"], data["from"]["y"]),
            Position(data["to"]["x"], data["to"]["y"]),
            Color(data["color"]),
            data.get("desc", ""),
        )


class GameResult(Enum):
    """对局结果（玩家视角）"""

    WIN = "win"
    LOSS = "loss"
    # 引擎不会产生和棋，只用于 Elo 计算
    DRAW = "draw"
