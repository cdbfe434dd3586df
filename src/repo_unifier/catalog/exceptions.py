"""Exceptions for catalog operations."""


class CatalogError(Exception):
    """Base exception for all catalog operations."""


class UnknownFileError(CatalogError):
    """Raised when a path is not present in the catalog."""

    def __init__(self, path: str) -> None:
        super().__init__(f"File '{path}' not found in the current project")
        self.path = path


class DuplicatePathError(CatalogError):
    """Raised when a replacement batch contains the same path twice."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Duplicate catalog path '{path}'")
        self.path = path
