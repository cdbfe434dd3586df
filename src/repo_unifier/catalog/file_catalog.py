"""The flat, authoritative path -> FileRecord map for the open project."""

import hashlib
import logging
from collections.abc import Iterable, Iterator

from repo_unifier.catalog.exceptions import (
    CatalogError,
    DuplicatePathError,
    UnknownFileError,
)
from repo_unifier.models import CatalogStats, FileKind, FileRecord, count_lines

logger = logging.getLogger(__name__)


class FileCatalog:
    """Versioned aggregate of file records.

    The catalog is replaced wholesale when a project is opened or loaded and
    mutated per path by selection toggles and committed write-backs. Every
    mutation that changes state bumps ``version`` so derived views can tell
    whether they are stale. Insertion order is the catalog order.
    """

    def __init__(self, records: Iterable[FileRecord] | None = None) -> None:
        self._records: dict[str, FileRecord] = {}
        self._version = 0
        if records is not None:
            self.replace(records)

    @property
    def version(self) -> int:
        return self._version

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._records.values()))

    def __contains__(self, path: object) -> bool:
        return path in self._records

    def __getitem__(self, path: str) -> FileRecord:
        try:
            return self._records[path]
        except KeyError:
            raise UnknownFileError(path) from None

    def get(self, path: str) -> FileRecord | None:
        return self._records.get(path)

    def records(self) -> list[FileRecord]:
        """Return the records in catalog order."""
        return list(self._records.values())

    def paths(self) -> list[str]:
        return list(self._records)

    def replace(self, records: Iterable[FileRecord]) -> None:
        """Swap in a new set of records in one step.

        The new map is fully built before it is installed, so a duplicate path
        leaves the current catalog untouched.
        """
        new_records: dict[str, FileRecord] = {}
        for record in records:
            if record.path in new_records:
                raise DuplicatePathError(record.path)
            new_records[record.path] = record

        self._records = new_records
        self._version += 1
        logger.debug(
            "Catalog replaced with %d records (version %d)",
            len(new_records),
            self._version,
        )

    def clear(self) -> None:
        self.replace([])

    def set_selection(self, paths: Iterable[str], selected: bool) -> int:
        """Set ``selected`` on every text record whose path is in ``paths``.

        Non-text records and unknown paths are left alone.

        Returns:
            Number of records whose flag actually changed.
        """
        changed = 0
        for path in set(paths):
            record = self._records.get(path)
            if record is None or not record.is_text:
                continue
            if record.selected != selected:
                record.selected = selected
                changed += 1

        if changed:
            self._version += 1
        return changed

    def toggle(self, path: str) -> bool:
        """Flip the selection of one text record and return the new flag."""
        record = self[path]
        if not record.is_text:
            return False
        self.set_selection([path], not record.selected)
        return record.selected

    def select_all(self, selected: bool = True) -> int:
        return self.set_selection(self._records, selected)

    def selected_records(self) -> list[FileRecord]:
        """Selected text records in catalog order."""
        return [r for r in self._records.values() if r.is_text and r.selected]

    def update_content(self, path: str, content: str) -> FileRecord:
        """Store committed content and re-derive size, line count and hash.

        The selection flag is not touched.
        """
        record = self[path]
        if not record.is_text:
            raise CatalogError(
                f"Cannot write content to non-text record '{path}' ({record.kind.value})"
            )

        encoded = content.encode("utf-8")
        record.content = content
        record.size_bytes = len(encoded)
        record.line_count = count_lines(content)
        record.sha256 = hashlib.sha256(encoded).hexdigest()
        self._version += 1
        return record

    def stats(self) -> CatalogStats:
        text = binary = oversized = selected = total_bytes = 0
        for record in self._records.values():
            total_bytes += record.size_bytes
            if record.kind is FileKind.TEXT:
                text += 1
                if record.selected:
                    selected += 1
            elif record.kind is FileKind.BINARY:
                binary += 1
            else:
                oversized += 1
        return CatalogStats(
            text=text,
            binary=binary,
            oversized=oversized,
            selected=selected,
            total_bytes=total_bytes,
        )

    def available_languages(self) -> list[str]:
        return sorted({r.language for r in self._records.values() if r.is_text})

    def snapshot(self) -> list[FileRecord]:
        """Detached copies of every record, safe to persist or serialize."""
        return [record.model_copy(deep=True) for record in self._records.values()]
