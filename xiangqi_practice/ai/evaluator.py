"""
棋局评估器

提供棋局状态的评分函数，用于 AI 决策。
分数以黑方（引擎）为正、红方为负。
"""

from xiangqi_practice.board import Board
from xiangqi_practice.piece import PIECE_VALUES
from xiangqi_practice.types import Color, Piece, PieceType, Position

CENTRAL_FILE = 4


class Evaluator:
    """棋局评估器

    基于棋子价值和少量位置加分
    """

    PIECE_VALUES = PIECE_VALUES

    # 兵/卒过河加分
    SOLDIER_CROSSED_BONUS = 10
    # 兵/卒深入敌阵（接近对方九宫）再加分
    SOLDIER_DEEP_BONUS = 10
    # 车、炮占中路加分
    CENTRAL_FILE_BONUS = 10

    def position_bonus(self, piece: Piece, pos: Position) -> int:
        """获取棋子在特定位置的加分"""
        bonus = 0
        if piece.piece_type == PieceType.SOLDIER:
            if not pos.is_on_own_side(piece.color):
                bonus += self.SOLDIER_CROSSED_BONUS
            if self._is_deep(piece.color, pos):
                bonus += self.SOLDIER_DEEP_BONUS
        elif piece.piece_type in (PieceType.CHARIOT, PieceType.CANNON):
            if pos.x == CENTRAL_FILE:
                bonus += self.CENTRAL_FILE_BONUS
        return bonus

    @staticmethod
    def _is_deep(color: Color, pos: Position) -> bool:
        # 双方对称加分：黑卒到 y>6、红兵到 y<3（红兵也加，不只黑卒）
        if color == Color.BLACK:
            return pos.y > 6
        return pos.y < 3

    def evaluate(self, board: Board) -> int:
        """评估棋局，正值有利于黑方，负值有利于红方"""
        score = 0
        for pos, piece in board.pieces():
            value = self.PIECE_VALUES[piece.piece_type] + self.position_bonus(piece, pos)
            score += value if piece.color == Color.BLACK else -value
        return score
