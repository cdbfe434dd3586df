"""Models for catalog file records and persisted project sessions."""

import hashlib
import posixpath
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FileKind(str, Enum):
    """Outcome of reading a file from the host environment."""

    TEXT = "text"
    BINARY = "binary"
    OVERSIZED = "oversized"


class OutputFormat(str, Enum):
    """Flat encodings the context serializer can produce."""

    MARKDOWN = "markdown"
    JSON = "json"
    XML = "xml"

    @property
    def extension(self) -> str:
        if self is OutputFormat.MARKDOWN:
            return "md"
        return self.value


def detect_language(path: str) -> str:
    """Derive a language tag from the file extension ("text" when none)."""
    name = posixpath.basename(path)
    _, ext = posixpath.splitext(name)
    if not ext or ext == ".":
        return "text"
    return ext[1:].lower()


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def split_lines(content: str) -> list[str]:
    """Split on newlines only, dropping one trailing CR per line.

    Form feeds and other Unicode line boundaries stay inside their line.
    """
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


class FileRecord(BaseModel):
    """A single entry of the file catalog."""

    model_config = ConfigDict(frozen=False)

    path: str  # Forward-slash path relative to the project root
    size_bytes: int = 0
    kind: FileKind = FileKind.TEXT
    content: str | None = None  # Present only for text records
    line_count: int = 0
    language: str = "text"
    sha256: str | None = None
    selected: bool = False

    @model_validator(mode="after")
    def _check_invariants(self) -> "FileRecord":
        if not self.path or self.path.startswith("/") or "\\" in self.path:
            raise ValueError(f"Invalid catalog path: {self.path!r}")
        if self.kind is not FileKind.TEXT:
            if self.selected:
                raise ValueError(
                    f"Non-text record '{self.path}' cannot be selected"
                )
            if self.content is not None:
                raise ValueError(
                    f"Non-text record '{self.path}' cannot carry content"
                )
        return self

    @property
    def is_text(self) -> bool:
        return self.kind is FileKind.TEXT

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @classmethod
    def from_text(cls, path: str, content: str, selected: bool = True) -> "FileRecord":
        """Build a text record, deriving size, line count, language and hash."""
        encoded = content.encode("utf-8")
        return cls(
            path=path,
            size_bytes=len(encoded),
            kind=FileKind.TEXT,
            content=content,
            line_count=count_lines(content),
            language=detect_language(path),
            sha256=hashlib.sha256(encoded).hexdigest(),
            selected=selected,
        )


class CatalogStats(BaseModel):
    """Aggregate counters shown next to the file explorer."""

    model_config = ConfigDict(frozen=True)

    text: int = 0
    binary: int = 0
    oversized: int = 0
    selected: int = 0
    total_bytes: int = 0


class ProjectSession(BaseModel):
    """Persisted session layout. Never carries write handles."""

    model_config = ConfigDict(frozen=False)

    id: str
    name: str
    files: list[FileRecord] = Field(default_factory=list)
    summary: str = ""
    specification: str = ""
    output_format: OutputFormat = OutputFormat.MARKDOWN
    last_updated: datetime = Field(default_factory=datetime.now)


class ExportArtifact(BaseModel):
    """A single downloadable file produced by export or write-back fallback."""

    model_config = ConfigDict(frozen=True)

    file_name: str
    content: str
    media_type: str = "text/plain"
