"""
JSON document store: loading, atomic writes and read/modify/write mutation.
"""

import json
import os
from unittest.mock import patch

import pytest

from fancms.core.errors import MalformedDocumentError
from fancms.core.store import JsonStore

from conftest import read_document, write_document


class TestLoad:
    def test_missing_document_is_empty(self, store):
        assert store.load("data/posts.json") == []

    def test_loads_top_level_array(self, store, tmp_path):
        write_document(tmp_path, "data/tags.json", [{"id": "t1", "name": "Tour", "slug": "tour"}])
        assert store.load("data/tags.json") == [{"id": "t1", "name": "Tour", "slug": "tour"}]

    def test_invalid_json_is_malformed(self, store, tmp_path):
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "posts.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(MalformedDocumentError) as exc_info:
            store.load("data/posts.json")
        assert exc_info.value.path == "data/posts.json"
        assert exc_info.value.status_code == 500

    def test_non_array_top_level_is_malformed(self, store, tmp_path):
        write_document(tmp_path, "data/posts.json", {"posts": []})

        with pytest.raises(MalformedDocumentError) as exc_info:
            store.load("data/posts.json")
        assert "top-level array" in exc_info.value.reason

    def test_repeated_loads_are_equal(self, store, tmp_path):
        write_document(tmp_path, "data/posts.json", [
            {"id": "p1", "title": "Comeback", "tags": ["live"]},
            {"id": "p2", "title": "미나", "heroImage": None},
        ])
        before = (tmp_path / "data" / "posts.json").read_bytes()

        first = store.load("data/posts.json")
        second = store.load("data/posts.json")

        assert first == second
        assert first is not second
        assert (tmp_path / "data" / "posts.json").read_bytes() == before

    def test_resolve_is_under_root(self, store, tmp_path):
        assert store.resolve("cms-data/news.json") == (tmp_path / "cms-data" / "news.json").resolve()


class TestWrite:
    def test_write_creates_parent_directories(self, store, tmp_path):
        store.write("cms-data/members.json", [{"id": "m1", "name": "Mina"}])
        assert read_document(tmp_path, "cms-data/members.json") == [{"id": "m1", "name": "Mina"}]

    def test_write_keeps_non_ascii(self, store, tmp_path):
        store.write("cms-data/members.json", [{"id": "m1", "name": "미나"}])
        assert "미나" in (tmp_path / "cms-data" / "members.json").read_text(encoding="utf-8")

    def test_write_leaves_no_temp_file(self, store, tmp_path):
        store.write("data/tags.json", [])
        assert os.listdir(tmp_path / "data") == ["tags.json"]

    def test_failed_replace_keeps_previous_content(self, store, tmp_path):
        write_document(tmp_path, "data/tags.json", [{"id": "t1"}])

        with patch("fancms.core.store.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                store.write("data/tags.json", [{"id": "t2"}])

        assert read_document(tmp_path, "data/tags.json") == [{"id": "t1"}]
        assert os.listdir(tmp_path / "data") == ["tags.json"]


class TestMutate:
    def test_mutate_applies_transform(self, store, tmp_path):
        write_document(tmp_path, "data/tags.json", [{"id": "t1"}])

        result = store.mutate("data/tags.json", lambda records: records + [{"id": "t2"}])

        assert result == [{"id": "t1"}, {"id": "t2"}]
        assert read_document(tmp_path, "data/tags.json") == result

    def test_mutate_on_missing_document_starts_empty(self, store, tmp_path):
        store.mutate("data/tags.json", lambda records: records + [{"id": "t1"}])
        assert read_document(tmp_path, "data/tags.json") == [{"id": "t1"}]

    def test_transform_error_leaves_document_untouched(self, store, tmp_path):
        write_document(tmp_path, "data/tags.json", [{"id": "t1"}])

        def boom(records):
            raise RuntimeError("nope")

        with pytest.raises(RuntimeError):
            store.mutate("data/tags.json", boom)
        assert read_document(tmp_path, "data/tags.json") == [{"id": "t1"}]

    def test_transform_must_return_list(self, store, tmp_path):
        write_document(tmp_path, "data/tags.json", [])

        with pytest.raises(TypeError):
            store.mutate("data/tags.json", lambda records: {"id": "t1"})

    def test_mutate_on_malformed_document_raises(self, store, tmp_path):
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "tags.json").write_text("[1, 2", encoding="utf-8")

        with pytest.raises(MalformedDocumentError):
            store.mutate("data/tags.json", lambda records: records)


def test_string_root_accepted(tmp_path):
    store = JsonStore(str(tmp_path))
    store.write("data/x.json", [1, 2])
    assert json.loads((tmp_path / "data" / "x.json").read_text()) == [1, 2]
