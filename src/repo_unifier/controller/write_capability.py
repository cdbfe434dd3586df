"""Direct-write capability granted per file when a project is opened."""

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class WriteHandle(Protocol):
    """A live, path-addressable write target. Failures raise OSError."""

    def write(self, content: str) -> None: ...


class FileSystemWriteHandle:
    """Writes one file under the project root on the local filesystem."""

    def __init__(self, file_path: str | Path) -> None:
        self.file_path = Path(file_path)
        self.revoked = False

    def revoke(self) -> None:
        self.revoked = True

    def write(self, content: str) -> None:
        if self.revoked:
            raise PermissionError(f"Write access to {self.file_path} was revoked")
        self.file_path.write_text(content, encoding="utf-8")

    def __repr__(self) -> str:
        return f"FileSystemWriteHandle({str(self.file_path)!r})"


@dataclass(frozen=True)
class DirectWrite:
    handle: WriteHandle


@dataclass(frozen=True)
class WriteUnavailable:
    pass


WriteCapability = DirectWrite | WriteUnavailable

UNAVAILABLE = WriteUnavailable()


class WriteCapabilityMap:
    """Path -> write handle, filled at project-open time only.

    Sessions rehydrated from storage start with an empty map.
    """

    def __init__(self) -> None:
        self._handles: dict[str, WriteHandle] = {}

    def __len__(self) -> int:
        return len(self._handles)

    def __contains__(self, path: object) -> bool:
        return path in self._handles

    def grant(self, path: str, handle: WriteHandle) -> None:
        self._handles[path] = handle

    def grant_directory(self, root: str | Path, paths: Iterable[str]) -> None:
        """Replace the map with one filesystem handle per path under ``root``."""
        root_path = Path(root).resolve()
        self._handles = {
            path: FileSystemWriteHandle(root_path / path) for path in paths
        }

    def revoke(self, path: str) -> None:
        self._handles.pop(path, None)

    def clear(self) -> None:
        self._handles.clear()

    def resolve(self, path: str) -> WriteCapability:
        handle = self._handles.get(path)
        if handle is None:
            return UNAVAILABLE
        return DirectWrite(handle)

    def can_write(self, path: str) -> bool:
        return path in self._handles
