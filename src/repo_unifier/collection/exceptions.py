"""Exceptions for directory collection."""


class CollectionError(Exception):
    """Raised when a single entry under the project root cannot be read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to read '{path}': {reason}")
        self.path = path
        self.reason = reason
