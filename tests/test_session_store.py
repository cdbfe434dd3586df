"""Tests for SessionStore."""

from datetime import datetime

import pytest

from repo_unifier.models import FileRecord, OutputFormat, ProjectSession
from repo_unifier.storage import SessionNotFoundError, SessionStore, StorageError


def _session(session_id, name="demo", updated=None):
    return ProjectSession(
        id=session_id,
        name=name,
        files=[FileRecord.from_text("a.ts", "x\n")],
        output_format=OutputFormat.JSON,
        last_updated=updated or datetime(2024, 1, 1),
    )


def test_save_and_load(tmp_path):
    store = SessionStore(tmp_path / "sessions")
    path = store.save(_session("s1"))
    assert path.name == "s1.json"
    loaded = store.load("s1")
    assert loaded == _session("s1")


def test_load_missing_raises(tmp_path):
    with pytest.raises(SessionNotFoundError, match="nope"):
        SessionStore(tmp_path).load("nope")


def test_list_newest_first(tmp_path):
    store = SessionStore(tmp_path)
    store.save(_session("old", updated=datetime(2024, 1, 1)))
    store.save(_session("new", updated=datetime(2024, 6, 1)))
    assert [s.id for s in store.list_sessions()] == ["new", "old"]


def test_list_skips_corrupt_files(tmp_path):
    store = SessionStore(tmp_path)
    store.save(_session("good"))
    (tmp_path / "bad.json").write_text("{not json")
    assert [s.id for s in store.list_sessions()] == ["good"]


def test_list_missing_directory_is_empty(tmp_path):
    assert SessionStore(tmp_path / "none").list_sessions() == []


def test_delete(tmp_path):
    store = SessionStore(tmp_path)
    store.save(_session("s1"))
    store.delete("s1")
    assert not store.exists("s1")
    with pytest.raises(SessionNotFoundError):
        store.delete("s1")


def test_corrupt_load_raises_storage_error(tmp_path):
    (tmp_path / "bad.json").write_text('{"id": "bad"}')
    with pytest.raises(StorageError, match="Corrupt"):
        SessionStore(tmp_path).load("bad")


@pytest.mark.parametrize("session_id", ["../escape", "a/b", ""])
def test_invalid_ids_rejected(tmp_path, session_id):
    with pytest.raises(StorageError, match="Invalid session id"):
        SessionStore(tmp_path).load(session_id)
