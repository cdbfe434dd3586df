"""Destinations for artifacts produced by the download fallback."""

from pathlib import Path
from typing import Protocol

from repo_unifier.models import ExportArtifact
from repo_unifier.utils.artifacts import write_artifact


class DownloadSink(Protocol):
    def deliver(self, artifact: ExportArtifact) -> str | None:
        """Hand the artifact to the user; return where it went, if known."""
        ...


class DirectoryDownloadSink:
    """Saves downloads into a local folder, like a browser download dir."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def deliver(self, artifact: ExportArtifact) -> str:
        return str(write_artifact(artifact, self.directory))
