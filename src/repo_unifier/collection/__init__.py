"""Directory collection for loading a project into the catalog."""

from repo_unifier.collection.collector import (
    DEFAULT_IGNORE_PATTERNS,
    DEFAULT_MAX_SIZE_KB,
    CollectionResult,
    FileCollector,
)
from repo_unifier.collection.exceptions import CollectionError

__all__ = [
    "DEFAULT_IGNORE_PATTERNS",
    "DEFAULT_MAX_SIZE_KB",
    "CollectionError",
    "CollectionResult",
    "FileCollector",
]
