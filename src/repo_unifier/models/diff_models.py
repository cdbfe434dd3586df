"""Models for representing parsed unified diffs and their rendered rows."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NULL_DEVICE = "/dev/null"


class ChangeType(str, Enum):
    ADD = "add"
    DELETE = "delete"
    MODIFY = "modify"


class LineType(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"

    @property
    def marker(self) -> str:
        if self is LineType.ADDITION:
            return "+"
        if self is LineType.DELETION:
            return "-"
        return " "


class DiffHunk(BaseModel):
    """One contiguous region of change, lines kept with their +/-/space prefix."""

    model_config = ConfigDict(frozen=True)

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: tuple[str, ...] = ()
    additions: int = 0
    deletions: int = 0

    @property
    def header(self) -> str:
        return (
            f"@@ -{self.old_start},{self.old_lines} "
            f"+{self.new_start},{self.new_lines} @@"
        )


class DiffFile(BaseModel):
    """All hunks for one file section of a patch."""

    model_config = ConfigDict(frozen=True)

    old_path: str
    new_path: str
    change_type: ChangeType
    hunks: tuple[DiffHunk, ...] = ()
    additions: int = 0
    deletions: int = 0

    @property
    def display_path(self) -> str:
        if self.new_path == NULL_DEVICE:
            return self.old_path
        return self.new_path


class UnifiedRow(BaseModel):
    """One rendered row of the unified view."""

    model_config = ConfigDict(frozen=True)

    hunk_index: int
    line_type: LineType
    old_number: int | None = None
    new_number: int | None = None
    content: str = ""


class SplitRow(BaseModel):
    """One rendered row of the two-column view. Each source line is one row."""

    model_config = ConfigDict(frozen=True)

    hunk_index: int
    line_type: LineType
    left_number: int | None = None
    left_content: str = ""
    right_number: int | None = None
    right_content: str = ""


class ReviewDiff(BaseModel):
    """Preview of original vs reconstructed content for one pending change."""

    model_config = ConfigDict(frozen=True)

    path: str
    rows: list[UnifiedRow] = Field(default_factory=list)  # Full-file line diff
    diff_file: DiffFile | None = None  # Hunked view for the patch renderers
    diff_text: str = ""  # Unified diff text, empty when unchanged
