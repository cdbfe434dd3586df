"""Review-and-commit controller for AI-proposed file rewrites."""

from repo_unifier.controller.change_controller import (
    ChangeController,
    FileRewriter,
    build_review,
    download_name,
)
from repo_unifier.controller.download import DirectoryDownloadSink, DownloadSink
from repo_unifier.controller.exceptions import ChangeError, ChangeStateError, WriteError
from repo_unifier.controller.write_capability import (
    UNAVAILABLE,
    DirectWrite,
    FileSystemWriteHandle,
    WriteCapability,
    WriteCapabilityMap,
    WriteHandle,
    WriteUnavailable,
)

__all__ = [
    "UNAVAILABLE",
    "ChangeController",
    "ChangeError",
    "ChangeStateError",
    "DirectWrite",
    "DirectoryDownloadSink",
    "DownloadSink",
    "FileRewriter",
    "FileSystemWriteHandle",
    "WriteCapability",
    "WriteCapabilityMap",
    "WriteError",
    "WriteHandle",
    "WriteUnavailable",
    "build_review",
    "download_name",
]
