import json
from datetime import datetime, timezone

import pytest

from peerlink.store import JsonDocumentStore, StoreError


def _write(tmp_path, name, data):
    (tmp_path / f"{name}.json").write_text(json.dumps(data), encoding="utf-8")


def test_missing_files_read_as_empty(tmp_path):
    store = JsonDocumentStore(tmp_path)
    assert store.get_user("u-1") is None
    assert store.list_user_ids() == []
    assert store.symptom_entries("u-1", limit=10) == []
    assert store.journal_entries("u-1", limit=10) == []
    assert store.matching_preferences("u-1") is None
    assert store.peer_connections("u-1") == []


def test_blank_file_reads_as_empty(tmp_path):
    (tmp_path / "users.json").write_text("   \n", encoding="utf-8")
    assert JsonDocumentStore(tmp_path).list_user_ids() == []


def test_invalid_json_raises_store_error(tmp_path):
    (tmp_path / "peerConnections.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError, match="peerConnections"):
        JsonDocumentStore(tmp_path).peer_connections("u-1")


def test_wrong_shape_raises_store_error(tmp_path):
    _write(tmp_path, "users", [{"id": "u-1"}])
    with pytest.raises(StoreError, match="unexpected shape"):
        JsonDocumentStore(tmp_path).get_user("u-1")


def test_timestamps_become_aware_datetimes(tmp_path):
    _write(tmp_path, "users", {"u-1": {"lastLogin": "2026-02-01T10:00:00Z"}})
    _write(tmp_path, "journalEntries", [
        {"userId": "u-1", "content": "naive", "createdAt": "2026-02-01T10:00:00"},
        {"userId": "u-1", "content": "garbage", "createdAt": "yesterday"},
    ])
    store = JsonDocumentStore(tmp_path)

    assert store.get_user("u-1")["lastLogin"] == datetime(2026, 2, 1, 10, tzinfo=timezone.utc)
    entries = store.journal_entries("u-1", limit=5)
    assert entries[0]["createdAt"] == datetime(2026, 2, 1, 10, tzinfo=timezone.utc)
    # unparseable timestamps sort last
    assert entries[1]["createdAt"] is None


def test_entries_newest_first_and_limited(store):
    entries = store.symptom_entries("u-alice", limit=3)
    assert [e["intensity"] for e in entries] == [8, 7, 4]
    assert all(e["userId"] == "u-alice" for e in entries)


def test_entries_filtered_by_user(store):
    assert [e["userId"] for e in store.journal_entries("u-carol", limit=10)] == ["u-carol"]


def test_matching_preferences_and_connections(store):
    prefs = store.matching_preferences("u-bob")
    assert prefs["communicationStyle"] == "daily"
    assert store.matching_preferences("u-dan") is None

    connections = store.peer_connections("u-alice")
    assert [c["toUserId"] for c in connections] == ["u-erin", "u-frank"]


def test_store_never_writes(store, fixtures_dir):
    before = sorted(p.name for p in (fixtures_dir / "store").iterdir())
    store.list_user_ids()
    store.symptom_entries("u-alice", limit=1)
    after = sorted(p.name for p in (fixtures_dir / "store").iterdir())
    assert before == after
