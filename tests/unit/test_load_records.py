"""Tests for the record loader."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from imagery_index.stages.load_records import (
    RecordParseError,
    find_files,
    load_record,
    load_records,
)
from tests.helpers import write_json


class TestFindFiles:
    def test_recursive_and_sorted(self, tmp_path: Path) -> None:
        write_json(tmp_path, "sources/b/z.json", {})
        write_json(tmp_path, "sources/a.json", {})
        write_json(tmp_path, "sources/b/a.json", {})
        write_json(tmp_path, "sources/notes.txt", {})

        found = find_files("sources/**/*.json", tmp_path)

        assert [p.relative_to(tmp_path).as_posix() for p in found] == [
            "sources/a.json",
            "sources/b/a.json",
            "sources/b/z.json",
        ]

    def test_no_matches(self, tmp_path: Path) -> None:
        assert find_files("features/**/*.geojson", tmp_path) == []


class TestLoadRecord:
    def test_keeps_text_and_data(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, "a.json", None, text='{"id": "a"}\n')
        record = load_record(path)
        assert record.data == {"id": "a"}
        assert record.text == '{"id": "a"}\n'
        assert record.display_path == path.as_posix()

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, "bad.json", None, text='{"id": ')
        with pytest.raises(RecordParseError) as exc_info:
            load_record(path)

        err = exc_info.value
        assert err.path == path.as_posix()
        assert err.code == "RECORD_PARSE_FAILED"
        assert err.category == "parse"
        assert "Expecting value" in err.message

    def test_unreadable_file(self, tmp_path: Path) -> None:
        path = write_json(tmp_path, "a.json", {})
        with (
            patch.object(Path, "read_text", side_effect=PermissionError("denied")),
            pytest.raises(RecordParseError, match="Cannot read file"),
        ):
            load_record(path)

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"name": "\xe9"}')
        with pytest.raises(RecordParseError):
            load_record(path)


class TestLoadRecords:
    def test_loads_in_path_order(self, tmp_path: Path) -> None:
        write_json(tmp_path, "sources/b.json", {"id": "b"})
        write_json(tmp_path, "sources/a.json", {"id": "a"})

        records = load_records("sources/**/*.json", tmp_path)

        assert [r.data["id"] for r in records] == ["a", "b"]

    def test_first_bad_file_raises(self, tmp_path: Path) -> None:
        write_json(tmp_path, "sources/a.json", {"id": "a"})
        write_json(tmp_path, "sources/b.json", None, text="not json")

        with pytest.raises(RecordParseError) as exc_info:
            load_records("sources/**/*.json", tmp_path)

        assert exc_info.value.path.endswith("sources/b.json")
