"""
等级分存档单元测试
"""

import json

from xiangqi_practice.rating_store import RATING_KEY, InMemoryRatingStore, JsonRatingStore


class TestInMemoryRatingStore:
    """内存存储测试"""

    def test_load_and_save(self):
        store = InMemoryRatingStore(1100)
        assert store.load() == 1100
        store.save(1123)
        assert store.load() == 1123
        assert store.saves == [1123]


class TestJsonRatingStore:
    """JSON 文件存储测试"""

    def test_missing_file_uses_default(self, tmp_path):
        store = JsonRatingStore(tmp_path / "rating.json")
        assert store.load() == 1200

    def test_custom_default(self, tmp_path):
        store = JsonRatingStore(tmp_path / "rating.json", default=1000)
        assert store.load() == 1000

    def test_round_trip(self, tmp_path):
        path = tmp_path / "nested" / "rating.json"
        store = JsonRatingStore(path)
        store.save(1223)
        assert path.exists()
        assert JsonRatingStore(path).load() == 1223

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data[RATING_KEY] == 1223
        assert "updated_at" in data

    def test_corrupt_file_uses_default(self, tmp_path):
        """测试存档损坏时回退到默认值"""
        path = tmp_path / "rating.json"
        path.write_text("not json", encoding="utf-8")
        assert JsonRatingStore(path).load() == 1200

        path.write_text(json.dumps({"other": 1}), encoding="utf-8")
        assert JsonRatingStore(path).load() == 1200

    def test_custom_key(self, tmp_path):
        path = tmp_path / "rating.json"
        JsonRatingStore(path, key="elo").save(1300)
        assert JsonRatingStore(path, key="elo").load() == 1300
        assert JsonRatingStore(path).load() == 1200
