"""
核心类型单元测试
"""

import pytest

from xiangqi_practice.types import Color, Move, MoveRecord, Piece, PieceType, Position


class TestColor:
    """颜色测试"""

    def test_opposite(self):
        """测试获取对方阵营"""
        assert Color.RED.opposite == Color.BLACK
        assert Color.BLACK.opposite == Color.RED

    def test_label(self):
        assert Color.RED.label == "红"
        assert Color.BLACK.label == "黑"


class TestPosition:
    """位置测试"""

    def test_is_valid(self):
        """测试棋盘范围"""
        assert Position(0, 0).is_valid()
        assert Position(8, 9).is_valid()
        assert not Position(9, 0).is_valid()
        assert not Position(0, 10).is_valid()
        assert not Position(-1, 5).is_valid()

    def test_palace(self):
        """测试九宫格：红方在下 (y 7-9)，黑方在上 (y 0-2)"""
        assert Position(4, 9).is_in_palace(Color.RED)
        assert Position(3, 7).is_in_palace(Color.RED)
        assert not Position(4, 6).is_in_palace(Color.RED)
        assert not Position(2, 9).is_in_palace(Color.RED)

        assert Position(4, 0).is_in_palace(Color.BLACK)
        assert Position(5, 2).is_in_palace(Color.BLACK)
        assert not Position(4, 3).is_in_palace(Color.BLACK)
        assert not Position(4, 9).is_in_palace(Color.BLACK)

    def test_own_side(self):
        """测试河界"""
        assert Position(0, 5).is_on_own_side(Color.RED)
        assert not Position(0, 4).is_on_own_side(Color.RED)
        assert Position(0, 4).is_on_own_side(Color.BLACK)
        assert not Position(0, 5).is_on_own_side(Color.BLACK)

    def test_add_offset(self):
        assert Position(4, 9) + (0, -1) == Position(4, 8)


class TestMove:
    """走法记谱测试"""

    def test_to_notation(self):
        move = Move(Position(0, 9), Position(0, 7))
        assert move.to_notation() == "09-07"

    def test_from_notation(self):
        move = Move.from_notation("17-14")
        assert move.from_pos == Position(1, 7)
        assert move.to_pos == Position(1, 4)

    @pytest.mark.parametrize("notation", ["", "0907", "09-7", "a9-07", "09-07-11"])
    def test_from_notation_malformed(self, notation):
        with pytest.raises(ValueError):
            Move.from_notation(notation)


class TestPiece:
    """棋子数据测试"""

    def test_tag_does_not_affect_equality(self):
        """tag 只用于展示，不参与比较"""
        a = Piece(PieceType.CHARIOT, Color.RED, tag="r-r-0-9")
        b = Piece(PieceType.CHARIOT, Color.RED)
        assert a == b
        assert hash(a) == hash(b)

    def test_to_dict(self):
        piece = Piece(PieceType.CANNON, Color.BLACK)
        assert piece.to_dict() == {"type": "cannon", "color": "black"}


class TestMoveRecord:
    """走棋记录测试"""

    def test_dict_round_trip(self):
        record = MoveRecord(Position(0, 9), Position(0, 7), Color.RED, "红车0->0")
        data = record.to_dict()
        assert data["from"] == {"x": 0, "y": 9}
        assert data["desc"] == "红车0->0"
        assert MoveRecord.from_dict(data) == record

    def test_move_property(self):
        record = MoveRecord(Position(7, 7), Position(4, 7), Color.RED)
        assert record.move == Move(Position(7, 7), Position(4, 7))
