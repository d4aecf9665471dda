"""
棋子走法规则

每种棋子有独立的几何规则类。规则只判断"这个棋子能不能从 from 走到 to"，
不考虑走完后己方是否被将军（见 rules.py）。
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from xiangqi_practice.types import Color, Piece, PieceType, Position

if TYPE_CHECKING:
    from xiangqi_practice.board import Board


# 棋子基础价值，同时用于吃子排序和局面评估
PIECE_VALUES = {
    PieceType.GENERAL: 10000,
    PieceType.CHARIOT: 90,
    PieceType.CANNON: 45,
    PieceType.HORSE: 40,
    PieceType.ELEPHANT: 20,
    PieceType.ADVISOR: 20,
    PieceType.SOLDIER: 10,
}

ORTHOGONAL = ((0, -1), (0, 1), (-1, 0), (1, 0))
DIAGONAL = ((-1, -1), (1, -1), (-1, 1), (1, 1))


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def count_obstacles(board: "Board", from_pos: Position, to_pos: Position) -> int:
    """统计直线上两点之间（不含两端）的棋子数"""
    dx = _sign(to_pos.x - from_pos.x)
    dy = _sign(to_pos.y - from_pos.y)
    count = 0
    pos = from_pos + (dx, dy)
    while pos != to_pos:
        if board.get_piece(pos) is not None:
            count += 1
        pos = pos + (dx, dy)
    return count


class PieceRule(ABC):
    """棋子规则基类"""

    piece_type: ClassVar[PieceType]

    @abstractmethod
    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        """几何走法是否成立（调用方已保证 from != to，且目标不是己方棋子）"""

    @abstractmethod
    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        """可能的目标格（超集），用于加速走法生成"""


class GeneralRule(PieceRule):
    """将/帅：九宫内直走一步"""

    piece_type = PieceType.GENERAL

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        if not to_pos.is_in_palace(piece.color):
            return False
        return abs(to_pos.x - from_pos.x) + abs(to_pos.y - from_pos.y) == 1

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        return [from_pos + d for d in ORTHOGONAL]


class AdvisorRule(PieceRule):
    """士/仕：九宫内斜走一步"""

    piece_type = PieceType.ADVISOR

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        if not to_pos.is_in_palace(piece.color):
            return False
        return abs(to_pos.x - from_pos.x) == 1 and abs(to_pos.y - from_pos.y) == 1

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        return [from_pos + d for d in DIAGONAL]


class ElephantRule(PieceRule):
    """象/相：走田字，不能过河，象眼被塞不能走"""

    piece_type = PieceType.ELEPHANT

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        if not to_pos.is_on_own_side(piece.color):
            return False
        dx = to_pos.x - from_pos.x
        dy = to_pos.y - from_pos.y
        if abs(dx) != 2 or abs(dy) != 2:
            return False
        eye = from_pos + (dx // 2, dy // 2)
        return board.get_piece(eye) is None

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        return [from_pos + (2 * dx, 2 * dy) for dx, dy in DIAGONAL]


class HorseRule(PieceRule):
    """马：走日字，蹩马腿不能走"""

    piece_type = PieceType.HORSE

    OFFSETS = ((1, 2), (2, 1), (-1, 2), (-2, 1), (1, -2), (2, -1), (-1, -2), (-2, -1))

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        dx = to_pos.x - from_pos.x
        dy = to_pos.y - from_pos.y
        if (abs(dx), abs(dy)) not in ((1, 2), (2, 1)):
            return False
        # 马腿在长边方向的中点
        if abs(dx) == 2:
            leg = from_pos + (dx // 2, 0)
        else:
            leg = from_pos + (0, dy // 2)
        return board.get_piece(leg) is None

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        return [from_pos + offset for offset in self.OFFSETS]


class ChariotRule(PieceRule):
    """车：直线走，中间不能有子"""

    piece_type = PieceType.CHARIOT

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        if from_pos.x != to_pos.x and from_pos.y != to_pos.y:
            return False
        return count_obstacles(board, from_pos, to_pos) == 0

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        return _lines_from(from_pos)


class CannonRule(PieceRule):
    """炮：直线走，不吃子时中间无子，吃子时中间恰好一个炮架"""

    piece_type = PieceType.CANNON

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        if from_pos.x != to_pos.x and from_pos.y != to_pos.y:
            return False
        obstacles = count_obstacles(board, from_pos, to_pos)
        if board.get_piece(to_pos) is not None:
            return obstacles == 1
        return obstacles == 0

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        return _lines_from(from_pos)


class SoldierRule(PieceRule):
    """兵/卒：过河前只能前进一步，过河后可以横走，永远不能后退"""

    piece_type = PieceType.SOLDIER

    def is_valid_geometry(
        self, board: "Board", piece: Piece, from_pos: Position, to_pos: Position
    ) -> bool:
        forward = -1 if piece.color == Color.RED else 1
        dx = to_pos.x - from_pos.x
        dy = to_pos.y - from_pos.y
        if dx == 0 and dy == forward:
            return True
        crossed = not from_pos.is_on_own_side(piece.color)
        return crossed and dy == 0 and abs(dx) == 1

    def candidate_targets(
        self, board: "Board", piece: Piece, from_pos: Position
    ) -> list[Position]:
        forward = -1 if piece.color == Color.RED else 1
        return [from_pos + (0, forward), from_pos + (-1, 0), from_pos + (1, 0)]


def _lines_from(from_pos: Position) -> list[Position]:
    """同一行列上的所有其他格子"""
    targets = [Position(x, from_pos.y) for x in range(9) if x != from_pos.x]
    targets += [Position(from_pos.x, y) for y in range(10) if y != from_pos.y]
    return targets


RULES: dict[PieceType, PieceRule] = {
    rule.piece_type: rule
    for rule in (
        GeneralRule(),
        AdvisorRule(),
        ElephantRule(),
        HorseRule(),
        ChariotRule(),
        CannonRule(),
        SoldierRule(),
    )
}


def get_rule(piece_type: PieceType) -> PieceRule:
    """按棋子类型获取规则"""
    return RULES[piece_type]
