"""Models for the review-and-commit cycle of an AI-proposed file rewrite."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from repo_unifier.models.file_models import ExportArtifact


class ChangeState(str, Enum):
    """States of the change controller."""

    IDLE = "idle"
    RECONSTRUCTING = "reconstructing"
    REVIEWING = "reviewing"
    COMMITTING = "committing"
    WRITE_FAILED = "write_failed"  # Waiting for the user to acknowledge


class ChangeOutcome(str, Enum):
    COMMITTED = "committed"
    CANCELLED = "cancelled"
    RECONSTRUCTION_FAILED = "reconstruction_failed"
    WRITE_FAILED = "write_failed"


class CommitMethod(str, Enum):
    DIRECT = "direct"
    DOWNLOAD = "download"


class PendingChange(BaseModel):
    """Transient original/proposed pair under review."""

    model_config = ConfigDict(frozen=False)

    path: str
    original_content: str
    new_content: str = ""
    is_reconstructing: bool = False


class CommitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    method: CommitMethod
    artifact: ExportArtifact | None = None  # Set for download commits
    location: str | None = None  # Where the download sink placed the artifact
    committed_at: datetime = Field(default_factory=datetime.now)
