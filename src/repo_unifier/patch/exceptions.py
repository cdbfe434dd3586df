"""Exceptions for patch parsing."""


class PatchError(Exception):
    """Base exception for patch operations."""


class PatchParseError(PatchError):
    """Raised when patch text does not follow the unified-diff layout."""

    def __init__(self, line_number: int, reason: str) -> None:
        super().__init__(f"Line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason
