"""Tests for the file record models."""

import pytest
from pydantic import ValidationError

from repo_unifier.models import (
    FileKind,
    FileRecord,
    OutputFormat,
    ProjectSession,
    count_lines,
    detect_language,
    split_lines,
)


class TestDetectLanguage:
    """Tests for language detection from the extension."""

    def test_lowercases_extension(self):
        """Extension is lowercased without the dot."""
        assert detect_language("src/App.TSX") == "tsx"

    def test_no_extension_is_text(self):
        """Files without an extension are plain text."""
        assert detect_language("Makefile") == "text"

    def test_dotfile_is_text(self):
        """A leading dot is not an extension."""
        assert detect_language(".gitignore") == "text"

    def test_last_extension_wins(self):
        assert detect_language("archive.tar.gz") == "gz"


def test_count_lines_counts_trailing_newline():
    """A trailing newline starts one more (empty) line."""
    assert count_lines("a\nb\n") == 3
    assert count_lines("") == 1


@pytest.mark.parametrize(
    "text, expected",
    [
        ("", []),
        ("a\nb\n", ["a", "b"]),
        ("a\r\nb", ["a", "b"]),
        ("x\x0cy\nz\u2028w\n", ["x\x0cy", "z\u2028w"]),
    ],
)
def test_split_lines_breaks_on_newline_only(text, expected):
    assert split_lines(text) == expected


class TestFileRecord:
    """Tests for FileRecord invariants."""

    def test_from_text_derives_fields(self):
        """from_text fills size, line count, language and hash."""
        record = FileRecord.from_text("src/main.py", "print('é')\n")
        assert record.kind is FileKind.TEXT
        assert record.size_bytes == len("print('é')\n".encode("utf-8"))
        assert record.line_count == 2
        assert record.language == "py"
        assert record.sha256 is not None and len(record.sha256) == 64
        assert record.selected is True
        assert record.name == "main.py"

    def test_binary_cannot_be_selected(self):
        """Non-text records reject selected=True."""
        with pytest.raises(ValidationError, match="cannot be selected"):
            FileRecord(path="img.png", kind=FileKind.BINARY, selected=True)

    def test_oversized_cannot_carry_content(self):
        with pytest.raises(ValidationError, match="cannot carry content"):
            FileRecord(path="big.log", kind=FileKind.OVERSIZED, content="x")

    @pytest.mark.parametrize("path", ["", "/abs/path.ts", "win\\path.ts"])
    def test_invalid_paths_rejected(self, path):
        """Paths must be relative and forward-slash separated."""
        with pytest.raises(ValidationError):
            FileRecord(path=path)


class TestOutputFormat:
    def test_extensions(self):
        """Markdown exports as .md, the others use their own name."""
        assert OutputFormat.MARKDOWN.extension == "md"
        assert OutputFormat.JSON.extension == "json"
        assert OutputFormat.XML.extension == "xml"

    def test_from_string(self):
        assert OutputFormat("xml") is OutputFormat.XML


def test_project_session_round_trips_through_json():
    """Sessions survive a JSON dump and reload unchanged."""
    session = ProjectSession(
        id="abc",
        name="demo",
        files=[FileRecord.from_text("a.ts", "x\n")],
        output_format=OutputFormat.XML,
    )
    restored = ProjectSession.model_validate_json(session.model_dump_json())
    assert restored == session
