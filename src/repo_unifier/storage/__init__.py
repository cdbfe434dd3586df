"""Session persistence."""

from repo_unifier.storage.exceptions import SessionNotFoundError, StorageError
from repo_unifier.storage.session_store import SessionStore

__all__ = [
    "SessionNotFoundError",
    "SessionStore",
    "StorageError",
]
