"""Data models for the repo unifier."""

from repo_unifier.models.change_models import (
    ChangeOutcome,
    ChangeState,
    CommitMethod,
    CommitResult,
    PendingChange,
)
from repo_unifier.models.diff_models import (
    NULL_DEVICE,
    ChangeType,
    DiffFile,
    DiffHunk,
    LineType,
    ReviewDiff,
    SplitRow,
    UnifiedRow,
)
from repo_unifier.models.file_models import (
    CatalogStats,
    ExportArtifact,
    FileKind,
    FileRecord,
    OutputFormat,
    ProjectSession,
    count_lines,
    detect_language,
    split_lines,
)
from repo_unifier.models.tree_models import NodeKind, SelectionStatus, TreeNode

__all__ = [
    "NULL_DEVICE",
    "CatalogStats",
    "ChangeOutcome",
    "ChangeState",
    "ChangeType",
    "CommitMethod",
    "CommitResult",
    "DiffFile",
    "DiffHunk",
    "ExportArtifact",
    "FileKind",
    "FileRecord",
    "LineType",
    "NodeKind",
    "OutputFormat",
    "PendingChange",
    "ProjectSession",
    "ReviewDiff",
    "SelectionStatus",
    "SplitRow",
    "TreeNode",
    "UnifiedRow",
    "count_lines",
    "detect_language",
    "split_lines",
]
