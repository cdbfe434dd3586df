"""Review-and-commit state machine for AI-proposed file rewrites.

States::

    IDLE -> RECONSTRUCTING -> REVIEWING -> COMMITTING -> IDLE
                   |              |             |
                   +-> IDLE       +-> IDLE      +-> WRITE_FAILED -> IDLE
                  (failure)      (cancel)          (acknowledged, or
                                                    committed by download)

The catalog is written only when a commit succeeds, so every failure and
cancel path leaves it exactly as it was before the request.
"""

import logging
from typing import Protocol

from repo_unifier.agents.exceptions import ReconstructionError
from repo_unifier.catalog import FileCatalog
from repo_unifier.controller.download import DownloadSink
from repo_unifier.controller.exceptions import ChangeError, ChangeStateError, WriteError
from repo_unifier.controller.write_capability import DirectWrite, WriteCapabilityMap
from repo_unifier.models import (
    ChangeOutcome,
    ChangeState,
    CommitMethod,
    CommitResult,
    ExportArtifact,
    PendingChange,
    ReviewDiff,
)
from repo_unifier.patch.renderer import render_line_diff
from repo_unifier.utils.diff_generator import build_diff_file, generate_unified_diff

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_NAME = "fixed_file.txt"


class FileRewriter(Protocol):
    """The AI collaborator that returns a complete file body."""

    def rewrite(self, original_content: str, proposed_fragment: str, path: str) -> str: ...


def build_review(path: str, original_content: str, new_content: str) -> ReviewDiff:
    """Line-wise preview of a pending change, computed without patch text."""
    return ReviewDiff(
        path=path,
        rows=render_line_diff(original_content, new_content),
        diff_file=build_diff_file(path, original_content, new_content),
        diff_text=generate_unified_diff(path, original_content, new_content),
    )


def download_name(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[-1] or DEFAULT_DOWNLOAD_NAME


class ChangeController:
    """Drives one pending change at a time from request to commit."""

    def __init__(
        self,
        catalog: FileCatalog,
        rewriter: FileRewriter,
        capabilities: WriteCapabilityMap | None = None,
        download_sink: DownloadSink | None = None,
    ) -> None:
        self.catalog = catalog
        self.rewriter = rewriter
        self.capabilities = capabilities if capabilities is not None else WriteCapabilityMap()
        self.download_sink = download_sink
        self._state = ChangeState.IDLE
        self._pending: PendingChange | None = None
        self._review: ReviewDiff | None = None
        self.last_outcome: ChangeOutcome | None = None
        self.last_error: Exception | None = None

    @property
    def state(self) -> ChangeState:
        return self._state

    @property
    def pending(self) -> PendingChange | None:
        return self._pending.model_copy() if self._pending is not None else None

    @property
    def review(self) -> ReviewDiff | None:
        return self._review

    def can_write_directly(self, path: str) -> bool:
        return self.capabilities.can_write(path)

    def _require(self, operation: str, *states: ChangeState) -> None:
        if self._state not in states:
            allowed = ", ".join(s.value for s in states)
            raise ChangeStateError(
                f"Cannot {operation} while {self._state.value} (allowed: {allowed})"
            )

    def _discard(self, outcome: ChangeOutcome, error: Exception | None = None) -> None:
        self._pending = None
        self._review = None
        self._state = ChangeState.IDLE
        self.last_outcome = outcome
        self.last_error = error

    def request_change(self, path: str, proposed_fragment: str) -> PendingChange:
        """Reconstruct the full file for ``proposed_fragment`` and start review.

        Raises:
            ChangeStateError: If another change is still outstanding.
            UnknownFileError: If ``path`` is not in the catalog.
            ChangeError: If the record has no text content.
            ReconstructionError: If the rewrite collaborator fails. The
                controller is back in IDLE and the catalog is unchanged.
        """
        self._require("request a change", ChangeState.IDLE)
        record = self.catalog[path]
        if not record.is_text or record.content is None:
            raise ChangeError(f"'{path}' is a {record.kind.value} file and cannot be rewritten")

        original = record.content
        self._pending = PendingChange(
            path=path,
            original_content=original,
            is_reconstructing=True,
        )
        self._state = ChangeState.RECONSTRUCTING

        try:
            new_content = self.rewriter.rewrite(original, proposed_fragment, path)
        except ReconstructionError as e:
            logger.error("Reconstruction failed for %s: %s", path, e.message)
            self._discard(ChangeOutcome.RECONSTRUCTION_FAILED, e)
            raise
        except Exception as e:
            logger.error("Reconstruction failed for %s: %s", path, e)
            error = ReconstructionError(path, str(e))
            self._discard(ChangeOutcome.RECONSTRUCTION_FAILED, error)
            raise error from e

        self._pending.new_content = new_content
        self._pending.is_reconstructing = False
        self._review = build_review(path, original, new_content)
        self._state = ChangeState.REVIEWING
        return self._pending.model_copy()

    def confirm(self) -> CommitResult:
        """Commit the reviewed content.

        Writes through the granted handle when the path has one, otherwise
        delivers a download named after the last path segment. Either way
        the catalog entry is updated to the new content.

        Raises:
            ChangeStateError: If nothing is under review.
            WriteError: If the direct write or the catalog update fails. The
                controller waits in WRITE_FAILED for
                ``acknowledge_write_failure`` or ``cancel``.
        """
        self._require("confirm", ChangeState.REVIEWING)
        pending = self._require_pending()
        self._state = ChangeState.COMMITTING

        capability = self.capabilities.resolve(pending.path)
        if isinstance(capability, DirectWrite):
            try:
                capability.handle.write(pending.new_content)
            except Exception as e:
                raise self._write_failed(pending.path, str(e)) from e
            return self._finish_commit(CommitMethod.DIRECT)

        return self._commit_download(ChangeState.REVIEWING)

    def acknowledge_write_failure(self, download: bool = False) -> CommitResult | None:
        """Close a failed direct write.

        Args:
            download: Commit through the download path instead of discarding.

        Returns:
            The commit result when ``download`` is set, else None.
        """
        self._require("acknowledge a write failure", ChangeState.WRITE_FAILED)
        if not download:
            self._discard(ChangeOutcome.WRITE_FAILED, self.last_error)
            return None
        self._state = ChangeState.COMMITTING
        return self._commit_download(ChangeState.WRITE_FAILED)

    def cancel(self) -> None:
        """Drop the change under review; the catalog is not touched."""
        self._require("cancel", ChangeState.REVIEWING, ChangeState.WRITE_FAILED)
        logger.info("Change for %s cancelled", self._pending.path if self._pending else "?")
        self._discard(ChangeOutcome.CANCELLED)

    def reset(self) -> None:
        """Forget any change in flight, e.g. when another project is opened."""
        self._pending = None
        self._review = None
        self._state = ChangeState.IDLE

    def _require_pending(self) -> PendingChange:
        if self._pending is None:
            raise ChangeStateError(f"No pending change while {self._state.value}")
        return self._pending

    def _write_failed(self, path: str, reason: str) -> WriteError:
        logger.error("Commit failed for %s: %s", path, reason)
        error = WriteError(path, reason)
        self._state = ChangeState.WRITE_FAILED
        self.last_outcome = ChangeOutcome.WRITE_FAILED
        self.last_error = error
        return error

    def _commit_download(self, restore_state: ChangeState) -> CommitResult:
        pending = self._require_pending()
        artifact = ExportArtifact(
            file_name=download_name(pending.path),
            content=pending.new_content,
        )
        location: str | None = None
        if self.download_sink is not None:
            try:
                location = self.download_sink.deliver(artifact)
            except Exception as e:
                logger.error("Download failed for %s: %s", pending.path, e)
                self._state = restore_state
                raise WriteError(pending.path, f"download failed: {e}") from e
        return self._finish_commit(CommitMethod.DOWNLOAD, artifact, location)

    def _finish_commit(
        self,
        method: CommitMethod,
        artifact: ExportArtifact | None = None,
        location: str | None = None,
    ) -> CommitResult:
        pending = self._require_pending()
        path = pending.path
        try:
            self.catalog.update_content(path, pending.new_content)
        except Exception as e:
            raise self._write_failed(path, f"catalog update failed: {e}") from e
        self._discard(ChangeOutcome.COMMITTED)
        logger.info("Committed %s via %s", path, method.value)
        return CommitResult(
            path=path,
            method=method,
            artifact=artifact,
            location=location,
        )
