"""Directory collector that turns a local source tree into file records."""

import hashlib
import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from repo_unifier.collection.exceptions import CollectionError
from repo_unifier.models import FileKind, FileRecord, count_lines, detect_language

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_PATTERNS = [
    ".git",
    "node_modules",
    "dist",
    "build",
    ".vscode",
    ".idea",
    "vendor",
    "__pycache__",
    ".DS_Store",
    "package-lock.json",
    "yarn.lock",
]
DEFAULT_MAX_SIZE_KB = 500


class CollectionResult(BaseModel):
    """Records read from one scan plus the entries that failed."""

    model_config = ConfigDict(frozen=False, arbitrary_types_allowed=True)

    root: str
    records: list[FileRecord] = Field(default_factory=list)
    errors: list[CollectionError] = Field(default_factory=list)


class FileCollector:
    """Walks a project root and classifies every non-ignored file."""

    def __init__(
        self,
        ignore_patterns: list[str] | None = None,
        max_size_kb: int = DEFAULT_MAX_SIZE_KB,
    ) -> None:
        """Initialize the collector.

        Args:
            ignore_patterns: Substrings matched against each relative path;
                a match skips the entry (and, for directories, everything below).
            max_size_kb: Files larger than this are recorded as oversized
                without content.
        """
        self.ignore_patterns = (
            list(ignore_patterns)
            if ignore_patterns is not None
            else list(DEFAULT_IGNORE_PATTERNS)
        )
        self.max_size_bytes = max_size_kb * 1024

    def is_ignored(self, relative_path: str) -> bool:
        return any(pattern in relative_path for pattern in self.ignore_patterns)

    def collect(self, root: str | Path) -> CollectionResult:
        """Scan ``root`` and return every readable entry as a FileRecord.

        Entries that fail to read are reported on ``errors`` and skipped; the
        rest of the batch continues.

        Raises:
            FileNotFoundError: If ``root`` is not a directory.
        """
        root_path = Path(root).resolve()
        if not root_path.is_dir():
            raise FileNotFoundError(f"Project root not found: {root}")

        result = CollectionResult(root=str(root_path))
        for relative_path in self._discover_files(root_path):
            try:
                result.records.append(self._read_record(root_path, relative_path))
            except CollectionError as e:
                logger.warning("Skipping %s: %s", e.path, e.reason)
                result.errors.append(e)

        logger.info(
            "Collected %d files from %s (%d skipped)",
            len(result.records),
            root_path,
            len(result.errors),
        )
        return result

    def _discover_files(self, root_path: Path) -> list[str]:
        """Walk the tree in sorted order and return forward-slash relative paths."""
        relative_paths: list[str] = []

        for dirpath, dirnames, filenames in os.walk(root_path):
            current = Path(dirpath)
            base = current.relative_to(root_path).as_posix()
            prefix = "" if base == "." else f"{base}/"

            # Prune ignored and symlinked directories in place
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not (current / name).is_symlink()
                and not self.is_ignored(f"{prefix}{name}")
            )

            for name in sorted(filenames):
                relative_path = f"{prefix}{name}"
                # Skip symlinks to keep reads inside the project
                if (current / name).is_symlink():
                    continue
                if self.is_ignored(relative_path):
                    continue
                relative_paths.append(relative_path)

        return relative_paths

    def _read_record(self, root_path: Path, relative_path: str) -> FileRecord:
        file_path = root_path / relative_path
        raw: bytes | None = None
        try:
            size = file_path.stat().st_size
            if size <= self.max_size_bytes:
                raw = file_path.read_bytes()
        except OSError as e:
            raise CollectionError(relative_path, str(e)) from e

        try:
            return _build_record(relative_path, size, raw)
        except ValidationError as e:
            raise CollectionError(relative_path, e.errors()[0]["msg"]) from e


def _build_record(relative_path: str, size: int, raw: bytes | None) -> FileRecord:
    """Classify one file; ``raw`` is None when it is over the size limit."""
    language = detect_language(relative_path)
    if raw is None:
        return FileRecord(
            path=relative_path,
            size_bytes=size,
            kind=FileKind.OVERSIZED,
            language=language,
        )

    content = _decode_text(raw)
    if content is None:
        return FileRecord(
            path=relative_path,
            size_bytes=len(raw),
            kind=FileKind.BINARY,
            language=language,
            sha256=hashlib.sha256(raw).hexdigest(),
        )

    return FileRecord(
        path=relative_path,
        size_bytes=len(raw),
        kind=FileKind.TEXT,
        content=content,
        line_count=count_lines(content),
        language=language,
        sha256=hashlib.sha256(raw).hexdigest(),
        selected=True,
    )


def _decode_text(raw: bytes) -> str | None:
    """Return the UTF-8 text of ``raw`` or None when it looks binary."""
    if b"\x00" in raw:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None
