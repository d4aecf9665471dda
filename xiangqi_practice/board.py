"""
棋盘类定义

不可变的 10x9 棋盘。任何"修改"都返回新的 Board，历史棋盘与当前棋盘之间不共享可变状态。
"""

from typing import Iterator, Mapping

from xiangqi_practice.types import Color, Move, Piece, PieceType, Position

BOARD_WIDTH = 9
BOARD_HEIGHT = 10

Grid = tuple[tuple[Piece | None, ...], ...]

# 后排棋子（从左到右）
BACK_RANK = (
    PieceType.CHARIOT,
    PieceType.HORSE,
    PieceType.ELEPHANT,
    PieceType.ADVISOR,
    PieceType.GENERAL,
    PieceType.ADVISOR,
    PieceType.ELEPHANT,
    PieceType.HORSE,
    PieceType.CHARIOT,
)

FEN_CHARS = {
    PieceType.GENERAL: "k",
    PieceType.ADVISOR: "a",
    PieceType.ELEPHANT: "e",
    PieceType.HORSE: "h",
    PieceType.CHARIOT: "r",
    PieceType.CANNON: "c",
    PieceType.SOLDIER: "p",
}
FEN_TYPES = {char: piece_type for piece_type, char in FEN_CHARS.items()}

GLYPHS = {
    (PieceType.GENERAL, Color.RED): "帅",
    (PieceType.GENERAL, Color.BLACK): "将",
    (PieceType.ADVISOR, Color.RED): "仕",
    (PieceType.ADVISOR, Color.BLACK): "士",
    (PieceType.ELEPHANT, Color.RED): "相",
    (PieceType.ELEPHANT, Color.BLACK): "象",
    (PieceType.HORSE, Color.RED): "马",
    (PieceType.HORSE, Color.BLACK): "马",
    (PieceType.CHARIOT, Color.RED): "车",
    (PieceType.CHARIOT, Color.BLACK): "车",
    (PieceType.CANNON, Color.RED): "炮",
    (PieceType.CANNON, Color.BLACK): "炮",
    (PieceType.SOLDIER, Color.RED): "兵",
    (PieceType.SOLDIER, Color.BLACK): "卒",
}


def glyph(piece: Piece) -> str:
    """棋子的中文字"""
    return GLYPHS[(piece.piece_type, piece.color)]


class Board:
    """象棋棋盘

    坐标系统：
    - x 0-8: 从左到右
    - y 0-9: 0 是黑方底线，9 是红方底线
    """

    __slots__ = ("_grid",)

    def __init__(self, grid: Grid):
        self._grid = grid

    @classmethod
    def empty(cls) -> "Board":
        return cls(tuple((None,) * BOARD_WIDTH for _ in range(BOARD_HEIGHT)))

    @classmethod
    def initial(cls) -> "Board":
        """标准开局布局"""
        pieces: dict[Position, Piece] = {}
        # 黑方（上方，y 0-4）
        cls._place_pieces_for_color(pieces, Color.BLACK, base_y=0, cannon_y=2, soldier_y=3)
        # 红方（下方，y 5-9）
        cls._place_pieces_for_color(pieces, Color.RED, base_y=9, cannon_y=7, soldier_y=6)
        return cls.from_pieces(pieces)

    @staticmethod
    def _place_pieces_for_color(
        pieces: dict[Position, Piece], color: Color, base_y: int, cannon_y: int, soldier_y: int
    ) -> None:
        """为一方放置所有棋子"""
        prefix = "r" if color == Color.RED else "b"

        def place(piece_type: PieceType, x: int, y: int) -> None:
            tag = f"{prefix}-{FEN_CHARS[piece_type]}-{x}-{y}"
            pieces[Position(x, y)] = Piece(piece_type, color, tag)

        for x, piece_type in enumerate(BACK_RANK):
            place(piece_type, x, base_y)
        for x in (1, 7):
            place(PieceType.CANNON, x, cannon_y)
        for x in (0, 2, 4, 6, 8):
            place(PieceType.SOLDIER, x, soldier_y)

    @classmethod
    def from_pieces(cls, pieces: Mapping[Position, Piece]) -> "Board":
        """从 {位置: 棋子} 构造棋盘"""
        rows = [[None] * BOARD_WIDTH for _ in range(BOARD_HEIGHT)]
        for pos, piece in pieces.items():
            if not pos.is_valid():
                raise ValueError(f"Position off board: {pos}")
            rows[pos.y][pos.x] = piece
        return cls(tuple(tuple(row) for row in rows))

    def get_piece(self, pos: Position) -> Piece | None:
        """获取指定位置的棋子"""
        return self._grid[pos.y][pos.x]

    def __getitem__(self, pos: Position) -> Piece | None:
        return self._grid[pos.y][pos.x]

    def apply(self, move: Move) -> "Board":
        """走子，返回新棋盘

        目标格上的棋子被覆盖（吃子）。这里不做任何合法性检查。
        """
        from_pos, to_pos = move
        piece = self.get_piece(from_pos)
        if piece is None:
            raise ValueError(f"No piece at position {from_pos}")

        rows = list(self._grid)
        from_row = list(rows[from_pos.y])
        from_row[from_pos.x] = None
        rows[from_pos.y] = tuple(from_row)

        to_row = list(rows[to_pos.y])
        to_row[to_pos.x] = piece
        rows[to_pos.y] = tuple(to_row)
        return Board(tuple(rows))

    def pieces(self, color: Color | None = None) -> Iterator[tuple[Position, Piece]]:
        """遍历所有棋子，可按颜色过滤"""
        for y, row in enumerate(self._grid):
            for x, piece in enumerate(row):
                if piece is not None and (color is None or piece.color == color):
                    yield Position(x, y), piece

    def find_general(self, color: Color) -> Position | None:
        """找到指定颜色的将/帅位置"""
        for pos, piece in self.pieces(color):
            if piece.piece_type == PieceType.GENERAL:
                return pos
        return None

    def count(self, piece_type: PieceType, color: Color) -> int:
        return sum(1 for _, piece in self.pieces(color) if piece.piece_type == piece_type)

    def to_fen(self) -> str:
        """转换为 FEN 格式（简化版，只有棋子部分，从上到下）"""
        rows = []
        for row in self._grid:
            row_str = ""
            empty_count = 0
            for piece in row:
                if piece is None:
                    empty_count += 1
                    continue
                if empty_count > 0:
                    row_str += str(empty_count)
                    empty_count = 0
                char = FEN_CHARS[piece.piece_type]
                row_str += char.upper() if piece.color == Color.RED else char
            if empty_count > 0:
                row_str += str(empty_count)
            rows.append(row_str)
        return "/".join(rows)

    @classmethod
    def from_fen(cls, fen: str) -> "Board":
        """从 FEN 解析棋盘"""
        row_strs = fen.strip().split(" ")[0].split("/")
        if len(row_strs) != BOARD_HEIGHT:
            raise ValueError(f"FEN must have {BOARD_HEIGHT} rows: {fen!r}")

        pieces: dict[Position, Piece] = {}
        for y, row_str in enumerate(row_strs):
            x = 0
            for char in row_str:
                if char.isdigit():
                    x += int(char)
                    continue
                piece_type = FEN_TYPES.get(char.lower())
                if piece_type is None:
                    raise ValueError(f"Unknown piece {char!r} in FEN: {fen!r}")
                if x >= BOARD_WIDTH:
                    raise ValueError(f"Row {y} too long in FEN: {fen!r}")
                color = Color.RED if char.isupper() else Color.BLACK
                pieces[Position(x, y)] = Piece(piece_type, color)
                x += 1
            if x != BOARD_WIDTH:
                raise ValueError(f"Row {y} has {x} columns in FEN: {fen!r}")
        return cls.from_pieces(pieces)

    def to_dict(self) -> dict:
        """序列化为字典"""
        return {
            "pieces": [
                {**piece.to_dict(), "position": {"x": pos.x, "y": pos.y}}
                for pos, piece in self.pieces()
            ]
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __hash__(self) -> int:
        return hash(self._grid)

    def __repr__(self) -> str:
        return f"Board({sum(1 for _ in self.pieces())} pieces)"

    def display(self) -> str:
        """返回棋盘的文本表示"""
        lines = []
        for y, row in enumerate(self._grid):
            line = f"{y} "
            for piece in row:
                line += ("十" if piece is None else glyph(piece)) + " "
            lines.append(line)
        lines.append("  0  1  2  3  4  5  6  7  8")
        return "\n".join(lines)
