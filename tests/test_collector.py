"""Tests for FileCollector."""

import os

import pytest

from repo_unifier.collection import DEFAULT_IGNORE_PATTERNS, FileCollector
from repo_unifier.models import FileKind


def test_collects_sorted_forward_slash_paths(project_dir):
    """Paths are relative, forward-slash separated and walk-sorted."""
    result = FileCollector().collect(project_dir)
    assert [r.path for r in result.records] == [
        "README.md",
        "logo.png",
        "src/app.ts",
        "src/lib/util.py",
    ]
    assert result.errors == []


def test_default_ignore_prunes_node_modules(project_dir):
    result = FileCollector().collect(project_dir)
    assert not any("node_modules" in r.path for r in result.records)


def test_custom_ignore_replaces_defaults(project_dir):
    """Custom patterns replace the default list."""
    result = FileCollector(ignore_patterns=["lib"]).collect(project_dir)
    paths = [r.path for r in result.records]
    assert "src/lib/util.py" not in paths
    assert "node_modules/pkg/index.js" in paths


def test_text_record_fields(project_dir):
    record = next(r for r in FileCollector().collect(project_dir).records if r.path == "src/app.ts")
    assert record.kind is FileKind.TEXT
    assert record.content == "const a = 1;\nconst b = 2;\n"
    assert record.line_count == 3
    assert record.language == "ts"
    assert record.selected is True
    assert record.sha256 is not None


def test_binary_detected_by_nul_byte(project_dir):
    record = next(r for r in FileCollector().collect(project_dir).records if r.path == "logo.png")
    assert record.kind is FileKind.BINARY
    assert record.content is None
    assert record.selected is False


def test_invalid_utf8_is_binary(tmp_path):
    (tmp_path / "latin.txt").write_bytes(b"caf\xe9\n")
    record = FileCollector().collect(tmp_path).records[0]
    assert record.kind is FileKind.BINARY


def test_oversized_omits_content(tmp_path):
    """Files above max_size_kb are oversized with no content."""
    (tmp_path / "big.txt").write_text("x" * 2048)
    (tmp_path / "small.txt").write_text("x" * 1024)
    records = {r.path: r for r in FileCollector(max_size_kb=1).collect(tmp_path).records}
    assert records["big.txt"].kind is FileKind.OVERSIZED
    assert records["big.txt"].content is None
    assert records["big.txt"].size_bytes == 2048
    assert records["small.txt"].kind is FileKind.TEXT


def test_missing_root_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileCollector().collect(tmp_path / "nope")


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinks_skipped(tmp_path):
    (tmp_path / "real.txt").write_text("hi\n")
    os.symlink(tmp_path / "real.txt", tmp_path / "link.txt")
    paths = [r.path for r in FileCollector().collect(tmp_path).records]
    assert paths == ["real.txt"]


def test_unreadable_entry_reported_and_batch_continues(project_dir, monkeypatch):
    """A read failure becomes a CollectionError; other files still load."""
    from pathlib import Path

    original = Path.read_bytes

    def failing_read(self):
        if self.name == "app.ts":
            raise PermissionError("denied")
        return original(self)

    monkeypatch.setattr(Path, "read_bytes", failing_read)
    result = FileCollector().collect(project_dir)
    assert [e.path for e in result.errors] == ["src/app.ts"]
    assert "denied" in result.errors[0].reason
    assert "src/lib/util.py" in [r.path for r in result.records]


def test_is_ignored_substring_match():
    collector = FileCollector()
    assert collector.is_ignored("web/node_modules/x.js")
    assert collector.is_ignored(".git/config")
    assert not collector.is_ignored("src/main.ts")
    assert ".DS_Store" in DEFAULT_IGNORE_PATTERNS


def test_unrepresentable_path_reported_and_batch_continues(tmp_path):
    """A name the catalog cannot hold is a per-entry error, not a failed scan."""
    (tmp_path / "ok.py").write_text("x = 1\n")
    (tmp_path / "odd\\name.py").write_text("y = 2\n")
    result = FileCollector().collect(tmp_path)
    assert [r.path for r in result.records] == ["ok.py"]
    assert [e.path for e in result.errors] == ["odd\\name.py"]
    assert "Invalid catalog path" in result.errors[0].reason
