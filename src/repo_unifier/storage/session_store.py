"""JSON-file store for persisted project sessions."""

import logging
import re
from pathlib import Path

from pydantic import ValidationError

from repo_unifier.models import ProjectSession
from repo_unifier.storage.exceptions import SessionNotFoundError, StorageError

logger = logging.getLogger(__name__)

_SESSION_ID_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
SESSION_SUFFIX = ".json"


class SessionStore:
    """One ``<id>.json`` file per session under ``directory``.

    Sessions hold file records and the chosen output format only. Write
    handles are never part of the stored layout.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path_for(self, session_id: str) -> Path:
        if not _SESSION_ID_RE.match(session_id) or session_id in {".", ".."}:
            raise StorageError(f"Invalid session id: {session_id!r}")
        return self.directory / f"{session_id}{SESSION_SUFFIX}"

    def save(self, session: ProjectSession) -> Path:
        path = self._path_for(session.id)
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_text(session.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("Saved session %s (%d files)", session.id, len(session.files))
        return path

    def load(self, session_id: str) -> ProjectSession:
        """Read one session.

        Raises:
            SessionNotFoundError: If no file exists for ``session_id``.
            StorageError: If the file is not a valid session document.
        """
        path = self._path_for(session_id)
        if not path.is_file():
            raise SessionNotFoundError(session_id)
        try:
            return ProjectSession.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as e:
            raise StorageError(f"Corrupt session file {path}: {e}") from e

    def exists(self, session_id: str) -> bool:
        return self._path_for(session_id).is_file()

    def list_sessions(self) -> list[ProjectSession]:
        """All readable sessions, most recently updated first.

        Unreadable files are logged and skipped.
        """
        if not self.directory.is_dir():
            return []
        sessions: list[ProjectSession] = []
        for path in sorted(self.directory.glob(f"*{SESSION_SUFFIX}")):
            try:
                sessions.append(
                    ProjectSession.model_validate_json(path.read_text(encoding="utf-8"))
                )
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable session file %s: %s", path, e)
        sessions.sort(key=lambda s: s.last_updated, reverse=True)
        return sessions

    def delete(self, session_id: str) -> None:
        path = self._path_for(session_id)
        if not path.is_file():
            raise SessionNotFoundError(session_id)
        path.unlink()
