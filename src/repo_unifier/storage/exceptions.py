"""Exceptions for session persistence."""


class StorageError(Exception):
    """Base exception for session storage."""


class SessionNotFoundError(StorageError):
    """Raised when no session is stored under the requested id."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
