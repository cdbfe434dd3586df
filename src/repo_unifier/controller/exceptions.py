"""Exceptions for the change controller."""


class ChangeError(Exception):
    """Base exception for review-and-commit operations."""


class ChangeStateError(ChangeError):
    """Raised when an operation is not allowed in the controller's current state."""


class WriteError(ChangeError):
    """Raised when committing a reviewed change fails.

    The change is not applied; the user may retry through the download path.
    """

    def __init__(self, path: str, message: str) -> None:
        super().__init__(
            f"Could not write '{path}': {message}. "
            "The change was not applied; retry by downloading the file instead."
        )
        self.path = path
        self.message = message
