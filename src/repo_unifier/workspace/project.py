"""One open project: catalog, explorer filters, write capabilities and session."""

import logging
import uuid
from datetime import datetime
from pathlib import Path

from repo_unifier.catalog import (
    FileCatalog,
    build_tree,
    compute_statuses,
    filter_records,
    find_node,
    toggle_node,
)
from repo_unifier.catalog.exceptions import UnknownFileError
from repo_unifier.collection import CollectionResult, FileCollector
from repo_unifier.context import build_export_artifact, estimate_tokens, serialize_context
from repo_unifier.controller import (
    ChangeController,
    ChangeError,
    DownloadSink,
    FileRewriter,
    WriteCapabilityMap,
)
from repo_unifier.models import (
    CatalogStats,
    ExportArtifact,
    OutputFormat,
    ProjectSession,
    SelectionStatus,
    TreeNode,
)

logger = logging.getLogger(__name__)


class ProjectWorkspace:
    """Holds the state of the currently open project.

    Opening a directory grants direct-write capability for every collected
    file. Loading a saved session never does; such a project commits
    through the download path until the directory is opened again.
    """

    def __init__(
        self,
        collector: FileCollector | None = None,
        rewriter: FileRewriter | None = None,
        download_sink: DownloadSink | None = None,
        output_format: OutputFormat | str = OutputFormat.MARKDOWN,
    ) -> None:
        self.collector = collector or FileCollector()
        self.catalog = FileCatalog()
        self.capabilities = WriteCapabilityMap()
        self.download_sink = download_sink
        self.output_format = OutputFormat(output_format)
        self.session_id: str | None = None
        self.name: str | None = None
        self.root: Path | None = None
        self.summary = ""
        self.specification = ""
        self.search = ""
        self.language: str | None = None
        self._controller: ChangeController | None = None
        if rewriter is not None:
            self.attach_rewriter(rewriter)

    def attach_rewriter(self, rewriter: FileRewriter) -> None:
        self._controller = ChangeController(
            self.catalog,
            rewriter,
            capabilities=self.capabilities,
            download_sink=self.download_sink,
        )

    @property
    def controller(self) -> ChangeController:
        if self._controller is None:
            raise ChangeError("No rewrite agent attached to this workspace")
        return self._controller

    @property
    def is_open(self) -> bool:
        return self.name is not None

    def _reset_project(self) -> None:
        if self._controller is not None:
            self._controller.reset()
        self.capabilities.clear()
        self.catalog.clear()
        self.session_id = None
        self.name = None
        self.root = None
        self.summary = ""
        self.specification = ""

    def new_project(self) -> None:
        """Close the current project and start from an empty catalog."""
        self._reset_project()

    def open_directory(self, root: str | Path, grant_write: bool = True) -> CollectionResult:
        """Collect ``root`` and make it the open project.

        The whole catalog is swapped in one step after collection finishes.

        Args:
            root: Project directory.
            grant_write: Grant a direct-write handle per collected file.

        Raises:
            FileNotFoundError: If ``root`` is not a directory.
        """
        result = self.collector.collect(root)
        self._reset_project()
        root_path = Path(result.root)
        self.catalog.replace(result.records)
        if grant_write:
            self.capabilities.grant_directory(root_path, self.catalog.paths())
        self.root = root_path
        self.name = root_path.name or str(root_path)
        self.session_id = uuid.uuid4().hex
        logger.info(
            "Opened %s: %d files, direct write %s",
            self.name,
            len(self.catalog),
            "granted" if grant_write else "not granted",
        )
        return result

    def load_session(self, session: ProjectSession) -> None:
        """Rehydrate the catalog from a saved session, without write access."""
        self._reset_project()
        self.catalog.replace(f.model_copy(deep=True) for f in session.files)
        self.session_id = session.id
        self.name = session.name
        self.summary = session.summary
        self.specification = session.specification
        self.output_format = session.output_format

    def to_session(self) -> ProjectSession:
        """Serializable snapshot of the open project."""
        if self.session_id is None:
            self.session_id = uuid.uuid4().hex
        return ProjectSession(
            id=self.session_id,
            name=self.name or "project",
            files=self.catalog.snapshot(),
            summary=self.summary,
            specification=self.specification,
            output_format=self.output_format,
            last_updated=datetime.now(),
        )

    # Explorer

    def set_filter(self, search: str = "", language: str | None = None) -> None:
        self.search = search
        self.language = language

    def filtered_paths(self) -> list[str]:
        return [
            r.path
            for r in filter_records(self.catalog.records(), self.search, self.language)
        ]

    def tree(self) -> list[TreeNode]:
        """Tree over the records that pass the current filter."""
        return build_tree(
            filter_records(self.catalog.records(), self.search, self.language)
        )

    def statuses(self) -> dict[str, SelectionStatus]:
        return compute_statuses(self.tree())

    def toggle(self, path: str) -> bool:
        """Toggle a file, or a directory's text files, as shown in the tree.

        Directory toggles only reach files visible under the current filter.

        Returns:
            The new selected state of the file or directory.
        """
        node = find_node(self.tree(), path)
        if node is None:
            raise UnknownFileError(path)
        return toggle_node(self.catalog, node)

    def select_all(self) -> int:
        return self.catalog.select_all(True)

    def select_none(self) -> int:
        return self.catalog.select_all(False)

    def select_filtered(self) -> int:
        return self.catalog.set_selection(self.filtered_paths(), True)

    def deselect_filtered(self) -> int:
        return self.catalog.set_selection(self.filtered_paths(), False)

    def stats(self) -> CatalogStats:
        return self.catalog.stats()

    def available_languages(self) -> list[str]:
        return self.catalog.available_languages()

    # Context

    def serialize(self, output_format: OutputFormat | str | None = None) -> str:
        fmt = OutputFormat(output_format) if output_format is not None else self.output_format
        return serialize_context(self.name or "project", self.catalog.records(), fmt)

    def estimate_tokens(self, output_format: OutputFormat | str | None = None) -> int:
        return estimate_tokens(self.serialize(output_format))

    def export(self, output_format: OutputFormat | str | None = None) -> ExportArtifact:
        fmt = OutputFormat(output_format) if output_format is not None else self.output_format
        return build_export_artifact(self.name or "project", self.catalog.records(), fmt)
