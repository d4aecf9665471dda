"""
走法校验与生成

- is_basic_legal: 棋子几何规则（不考虑将军）
- is_in_check: 将军检测，含"飞将"（将帅对面）
- is_legal: 几何合法且走完后己方不被将军
- generate_moves: 生成全部合法走法，吃子优先
"""

from xiangqi_practice.board import Board
from xiangqi_practice.piece import PIECE_VALUES, count_obstacles, get_rule
from xiangqi_practice.types import Color, Move, Position


def is_basic_legal(board: Board, from_pos: Position, to_pos: Position, turn: Color) -> bool:
    """检查走法是否符合棋子几何规则（不检查走完后是否被将军）"""
    if not (from_pos.is_valid() and to_pos.is_valid()):
        return False
    if from_pos == to_pos:
        return False

    piece = board.get_piece(from_pos)
    if piece is None or piece.color != turn:
        return False

    target = board.get_piece(to_pos)
    if target is not None and target.color == turn:
        return False

    return get_rule(piece.piece_type).is_valid_geometry(board, piece, from_pos, to_pos)


def generals_facing(board: Board) -> bool:
    """两将是否在同一路上且中间无子（飞将）"""
    red = board.find_general(Color.RED)
    black = board.find_general(Color.BLACK)
    if red is None or black is None or red.x != black.x:
        return False
    return count_obstacles(board, red, black) == 0


def is_in_check(board: Board, color: Color) -> bool:
    """检查指定颜色的将/帅是否被将军"""
    general_pos = board.find_general(color)
    if general_pos is None:
        return True  # 没有将，认为被将军（已被吃）

    if generals_facing(board):
        return True

    # 检查对方所有棋子是否能攻击到将
    enemy = color.opposite
    for pos, _ in board.pieces(enemy):
        if is_basic_legal(board, pos, general_pos, enemy):
            return True
    return False


def is_legal(board: Board, from_pos: Position, to_pos: Position, turn: Color) -> bool:
    """完整合法性：几何合法，且走完后己方不被将军"""
    if not is_basic_legal(board, from_pos, to_pos, turn):
        return False
    return not is_in_check(board.apply(Move(from_pos, to_pos)), turn)


def legal_destinations(board: Board, from_pos: Position, turn: Color) -> list[Position]:
    """选中棋子后可以走到的所有位置（用于高亮）"""
    piece = board.get_piece(from_pos)
    if piece is None or piece.color != turn:
        return []
    targets = get_rule(piece.piece_type).candidate_targets(board, piece, from_pos)
    return [
        to_pos
        for to_pos in targets
        if to_pos.is_valid() and is_legal(board, from_pos, to_pos, turn)
    ]


def capture_value(board: Board, move: Move) -> int:
    """走法吃掉的棋子价值，不吃子为 0"""
    target = board.get_piece(move.to_pos)
    return PIECE_VALUES[target.piece_type] if target is not None else 0


def generate_moves(board: Board, color: Color) -> list[Move]:
    """获取指定颜色的所有合法走法

    按被吃棋子价值从高到低排序（不吃子的排最后），提高 alpha-beta 剪枝效率。
    """
    moves = []
    for from_pos, _ in board.pieces(color):
        for to_pos in legal_destinations(board, from_pos, color):
            moves.append(Move(from_pos, to_pos))
    # sorted 是稳定排序，同价值的走法保持生成顺序
    return sorted(moves, key=lambda move: capture_value(board, move), reverse=True)


def has_legal_move(board: Board, color: Color) -> bool:
    """是否还有任意合法走法"""
    for from_pos, _ in board.pieces(color):
        if legal_destinations(board, from_pos, color):
            return True
    return False
