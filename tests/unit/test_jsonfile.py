# ABOUTME: Unit tests for the shared JSON output writer.
# ABOUTME: Tests readable Arabic output, parent directory creation, and compact mode.

import json
from pathlib import Path

from shamela.formats.jsonfile import write_json


class TestWriteJson:
    """Tests for write_json."""

    def test_arabic_written_unescaped(self, tmp_path: Path) -> None:
        """Arabic text is stored as UTF-8 rather than \\u escapes."""
        out = write_json({"name": "البخاري"}, tmp_path / "a.json")
        text = out.read_text(encoding="utf-8")
        assert "البخاري" in text
        assert "\\u" not in text

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        """Missing parent directories are created."""
        out = write_json([1, 2], tmp_path / "nested" / "dir" / "list.json")
        assert json.loads(out.read_text(encoding="utf-8")) == [1, 2]

    def test_compact_output(self, tmp_path: Path) -> None:
        """indent=None writes everything on one line."""
        out = write_json({"a": [1, 2]}, tmp_path / "c.json", indent=None)
        assert out.read_text(encoding="utf-8") == '{"a": [1, 2]}'
