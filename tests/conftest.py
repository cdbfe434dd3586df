from unittest.mock import MagicMock

import pytest

from repo_unifier.catalog import FileCatalog
from repo_unifier.models import FileKind, FileRecord


def make_text(path: str, content: str = "", selected: bool = True) -> FileRecord:
    return FileRecord.from_text(path, content or f"// {path}\n", selected=selected)


def make_binary(path: str, size: int = 16) -> FileRecord:
    return FileRecord(path=path, size_bytes=size, kind=FileKind.BINARY, language="png")


@pytest.fixture
def mixed_records():
    """a/x.ts selected, a/y.ts unselected, b/z.ts selected."""
    return [
        make_text("a/x.ts", "export const x = 1;\n", selected=True),
        make_text("a/y.ts", "export const y = 2;\n", selected=False),
        make_text("b/z.ts", "export const z = 3;\n", selected=True),
    ]


@pytest.fixture
def catalog(mixed_records):
    return FileCatalog(mixed_records)


@pytest.fixture
def project_dir(tmp_path):
    """Small on-disk project with text, binary and ignored entries."""
    root = tmp_path / "demo"
    (root / "src" / "lib").mkdir(parents=True)
    (root / "node_modules" / "pkg").mkdir(parents=True)
    (root / "src" / "app.ts").write_text("const a = 1;\nconst b = 2;\n")
    (root / "src" / "lib" / "util.py").write_text("def f():\n    return 1\n")
    (root / "README.md").write_text("# Demo\n")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
    (root / "node_modules" / "pkg" / "index.js").write_text("module.exports = 1;\n")
    return root


@pytest.fixture
def rewriter():
    """Rewrite collaborator returning a fixed body."""
    mock = MagicMock()
    mock.rewrite.return_value = "export const x = 42;\n"
    return mock
