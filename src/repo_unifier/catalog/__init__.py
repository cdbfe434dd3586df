"""File catalog and selection tree."""

from repo_unifier.catalog.exceptions import (
    CatalogError,
    DuplicatePathError,
    UnknownFileError,
)
from repo_unifier.catalog.file_catalog import FileCatalog
from repo_unifier.catalog.tree import (
    build_tree,
    compute_statuses,
    filter_records,
    find_node,
    get_status,
    iter_file_nodes,
    iter_nodes,
    text_descendant_paths,
    toggle_node,
)

__all__ = [
    "CatalogError",
    "DuplicatePathError",
    "FileCatalog",
    "UnknownFileError",
    "build_tree",
    "compute_statuses",
    "filter_records",
    "find_node",
    "get_status",
    "iter_file_nodes",
    "iter_nodes",
    "text_descendant_paths",
    "toggle_node",
]
