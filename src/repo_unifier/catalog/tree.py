"""Build the directory tree over the catalog and derive tri-state selection.

All functions here are pure over their inputs except ``toggle_node``, which
applies a bulk selection through the catalog.
"""

from collections.abc import Iterable, Iterator

from repo_unifier.catalog.exceptions import CatalogError
from repo_unifier.catalog.file_catalog import FileCatalog
from repo_unifier.models import FileRecord, NodeKind, SelectionStatus, TreeNode

ALL_LANGUAGES = "all"


def filter_records(
    records: Iterable[FileRecord],
    search: str = "",
    language: str | None = None,
) -> list[FileRecord]:
    """Apply the explorer filters to the flat record list.

    Args:
        records: Catalog records in catalog order.
        search: Case-insensitive substring matched against the path.
        language: Exact language tag; None or "all" disables the filter.

    Returns:
        Matching records, order preserved.
    """
    needle = search.lower()
    use_language = language is not None and language != ALL_LANGUAGES
    return [
        record
        for record in records
        if needle in record.path.lower()
        and (not use_language or record.language == language)
    ]


def build_tree(records: Iterable[FileRecord]) -> list[TreeNode]:
    """Group records into directory/file nodes and return the root level.

    Directories are synthesized from path segments, so a directory appears
    only when at least one record lives under it. Siblings are ordered
    directories first, then by name.
    """
    roots: list[TreeNode] = []
    directories: dict[str, TreeNode] = {}

    for record in records:
        parts = record.path.split("/")
        siblings = roots
        current_path = ""

        for part in parts[:-1]:
            current_path = f"{current_path}/{part}" if current_path else part
            directory = directories.get(current_path)
            if directory is None:
                directory = TreeNode(
                    name=part,
                    path=current_path,
                    kind=NodeKind.DIRECTORY,
                )
                directories[current_path] = directory
                siblings.append(directory)
            siblings = directory.children

        if record.path in directories:
            raise CatalogError(
                f"Path '{record.path}' is both a file and a directory"
            )
        siblings.append(
            TreeNode(
                name=parts[-1],
                path=record.path,
                kind=NodeKind.FILE,
                record=record,
            )
        )

    _sort_nodes(roots)
    return roots


def _sort_nodes(nodes: list[TreeNode]) -> None:
    nodes.sort(key=lambda n: (n.kind is not NodeKind.DIRECTORY, n.name))
    for node in nodes:
        if node.children:
            _sort_nodes(node.children)


def iter_file_nodes(node: TreeNode) -> Iterator[TreeNode]:
    """Yield every file leaf under ``node`` (``node`` itself if it is a file)."""
    if not node.is_directory:
        yield node
        return
    for child in node.children:
        yield from iter_file_nodes(child)


def iter_nodes(
    roots: Iterable[TreeNode], depth: int = 0
) -> Iterator[tuple[TreeNode, int]]:
    """Depth-first walk yielding ``(node, depth)`` in display order."""
    for node in roots:
        yield node, depth
        if node.children:
            yield from iter_nodes(node.children, depth + 1)


def text_descendant_paths(node: TreeNode) -> list[str]:
    return [
        leaf.path
        for leaf in iter_file_nodes(node)
        if leaf.record is not None and leaf.record.is_text
    ]


def _aggregate(node: TreeNode, statuses: dict[str, SelectionStatus] | None) -> tuple[bool, bool]:
    """Return ``(any_checked, any_unchecked)`` over the selectable leaves."""
    if not node.is_directory:
        record = node.record
        if record is None or not record.is_text:
            result = (False, False)
        else:
            result = (record.selected, not record.selected)
        if statuses is not None:
            statuses[node.path] = (
                SelectionStatus.CHECKED
                if record is not None and record.selected
                else SelectionStatus.UNCHECKED
            )
        return result

    any_checked = any_unchecked = False
    for child in node.children:
        checked, unchecked = _aggregate(child, statuses)
        any_checked = any_checked or checked
        any_unchecked = any_unchecked or unchecked
        # Once both are seen the answer is fixed; only keep walking to fill the map
        if any_checked and any_unchecked and statuses is None:
            break

    if statuses is not None:
        statuses[node.path] = _status_from(any_checked, any_unchecked)
    return any_checked, any_unchecked


def _status_from(any_checked: bool, any_unchecked: bool) -> SelectionStatus:
    if any_checked and any_unchecked:
        return SelectionStatus.PARTIAL
    if any_checked:
        return SelectionStatus.CHECKED
    return SelectionStatus.UNCHECKED


def get_status(node: TreeNode) -> SelectionStatus:
    """Tri-state selection of a node.

    A file mirrors its record's flag. A directory is checked when every
    selectable (text) descendant is selected, unchecked when none is, and
    partial otherwise. Binary and oversized leaves can never be selected and
    do not take part in the aggregate.
    """
    if not node.is_directory:
        record = node.record
        if record is not None and record.selected:
            return SelectionStatus.CHECKED
        return SelectionStatus.UNCHECKED
    return _status_from(*_aggregate(node, None))


def compute_statuses(roots: Iterable[TreeNode]) -> dict[str, SelectionStatus]:
    """Status of every node keyed by path, computed in one bottom-up pass."""
    statuses: dict[str, SelectionStatus] = {}
    for root in roots:
        _aggregate(root, statuses)
    return statuses


def toggle_node(catalog: FileCatalog, node: TreeNode) -> bool:
    """Apply a click on ``node`` to the catalog.

    A file flips its own flag. A directory that is not fully checked selects
    all of its text descendants; a fully checked directory deselects them.

    Returns:
        The selection value that was applied.
    """
    if not node.is_directory:
        return catalog.toggle(node.path)

    target = get_status(node) is not SelectionStatus.CHECKED
    catalog.set_selection(text_descendant_paths(node), target)
    return target


def find_node(roots: Iterable[TreeNode], path: str) -> TreeNode | None:
    """Walk the path's segments from the root level."""
    level = list(roots)
    node: TreeNode | None = None
    for part in path.strip("/").split("/"):
        node = next((n for n in level if n.name == part), None)
        if node is None:
            return None
        level = node.children
    return node
