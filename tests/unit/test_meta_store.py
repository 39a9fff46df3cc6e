# -*- coding: utf-8 -*-
"""
MetaStore 单元测试

测试元数据的向上查找、解析校验和写回
"""

import json
import sys
from pathlib import Path

# 添加src到路径
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

import pytest
from core.exceptions import MissingMetaError
from services.language import LanguageId
from services.meta_store import META_FILENAME, ExerciseMetadata, MetaStore


def _write_meta(directory: Path, data) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / META_FILENAME
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path


VALID_META = {
    "name": "fizzbuzz",
    "language": "rust",
    "difficulty": 2,
    "topics": ["loops"],
    "hints": ["Use modulo", "Check 15 first"],
    "hints_seen": 1,
    "submission_token": "tok-123",
}


class TestExerciseMetadata:
    """ExerciseMetadata 测试类"""

    def test_from_dict_full(self):
        meta = ExerciseMetadata.from_dict(VALID_META)
        assert meta.name == "fizzbuzz"
        assert meta.language == LanguageId("rust")
        assert meta.hints == ["Use modulo", "Check 15 first"]
        assert meta.submission_token == "tok-123"

    def test_optional_fields_omitted(self):
        meta = ExerciseMetadata(name="hello", language=LanguageId("python"), difficulty=1)
        assert meta.to_dict() == {"name": "hello", "language": "python", "difficulty": 1}
        assert "null" not in meta.to_json()

    def test_unrecognized_language_is_accepted(self):
        meta = ExerciseMetadata.from_dict({"name": "x", "language": "zig", "difficulty": 3})
        assert meta.language.raw == "zig"
        assert meta.language.known is None

    def test_hints_seen_clamped_to_hint_count(self):
        data = dict(VALID_META, hints_seen=5)
        assert ExerciseMetadata.from_dict(data).hints_seen == 2

    def test_hints_seen_without_hints_clamped_to_zero(self):
        meta = ExerciseMetadata.from_dict({"name": "x", "language": "rust", "difficulty": 1, "hints_seen": 3})
        assert meta.hints_seen == 0

    @pytest.mark.parametrize("data", [
        [],
        {"language": "rust", "difficulty": 1},
        {"name": "x", "difficulty": 1},
        {"name": "x", "language": "rust"},
        {"name": "x", "language": "rust", "difficulty": "hard"},
        {"name": "x", "language": "rust", "difficulty": True},
        {"name": "x", "language": "rust", "difficulty": 1, "hints": "not a list"},
        {"name": "x", "language": "rust", "difficulty": 1, "hints_seen": -1},
        {"name": "x", "language": "rust", "difficulty": 1, "submission_token": 42},
    ])
    def test_invalid_records(self, data):
        with pytest.raises(ValueError):
            ExerciseMetadata.from_dict(data)


class TestMetaStoreLocate:
    """MetaStore.locate 测试类"""

    def test_finds_meta_in_start_dir(self, tmp_path):
        path = _write_meta(tmp_path / "fizzbuzz", VALID_META)
        meta, found = MetaStore().locate(tmp_path / "fizzbuzz")
        assert found == path.resolve()
        assert meta.name == "fizzbuzz"

    def test_walks_up_past_invalid_and_missing(self, tmp_path):
        """更近的层级文件无效或缺失时，继续向上查找"""
        root = tmp_path / "fizzbuzz"
        path = _write_meta(root, VALID_META)
        _write_meta(root / "src", "{not json")
        _write_meta(root / "src" / "nested", {"name": "missing fields"})
        deep = root / "src" / "nested" / "deeper"
        deep.mkdir(parents=True)

        meta, found = MetaStore().locate(deep)
        assert found == path.resolve()
        assert meta.submission_token == "tok-123"

    def test_missing_everywhere(self, tmp_path):
        start = tmp_path / "a" / "b"
        start.mkdir(parents=True)
        with pytest.raises(MissingMetaError):
            MetaStore(filename=".meta-test-never-exists.json").locate(start)

    def test_defaults_to_cwd(self, tmp_path, monkeypatch):
        _write_meta(tmp_path, VALID_META)
        (tmp_path / "tests").mkdir()
        monkeypatch.chdir(tmp_path / "tests")
        _, found = MetaStore().locate()
        assert found == (tmp_path / META_FILENAME).resolve()


class TestMetaStorePersist:
    """MetaStore.persist 测试类"""

    def test_round_trip_keeps_absent_fields_absent(self, tmp_path):
        store = MetaStore()
        original = ExerciseMetadata(name="hello", language=LanguageId("python"), difficulty=1, hints=["a"])
        path = tmp_path / META_FILENAME
        store.persist(original, path)

        loaded, found = store.locate(tmp_path)
        assert found == path.resolve()
        assert loaded == original
        assert loaded.submission_token is None
        raw = json.loads(path.read_text(encoding="utf-8"))
        assert "submission_token" not in raw
        assert "hints_seen" not in raw
        assert "topics" not in raw

    def test_truncates_longer_content(self, tmp_path):
        path = _write_meta(tmp_path, dict(VALID_META, topics=["x" * 500]))
        store = MetaStore()
        meta, _ = store.locate(tmp_path)
        meta.topics = None
        store.persist(meta, path)

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert "topics" not in raw
        assert raw["name"] == "fizzbuzz"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
