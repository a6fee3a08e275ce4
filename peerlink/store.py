from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol


USERS = "users"
SYMPTOM_ENTRIES = "symptomEntries"
JOURNAL_ENTRIES = "journalEntries"
MATCHING_PREFERENCES = "matchingPreferences"
PEER_CONNECTIONS = "peerConnections"

_DATETIME_FIELDS = ("createdAt", "lastLogin")
_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class StoreError(Exception):
    """Raised when a collection cannot be read or decoded."""


def _parse_dt(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _rehydrate(doc: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(doc)
    for key in _DATETIME_FIELDS:
        if key in out:
            out[key] = _parse_dt(out[key])
    return out


def _newest_first(docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(docs, key=lambda d: d.get("createdAt") or _EPOCH, reverse=True)


class DocumentStore(Protocol):
    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    def list_user_ids(self) -> List[str]:
        ...

    def symptom_entries(self, user_id: str, *, limit: int) -> List[Dict[str, Any]]:
        """Newest first."""
        ...

    def journal_entries(self, user_id: str, *, limit: int) -> List[Dict[str, Any]]:
        """Newest first."""
        ...

    def matching_preferences(self, user_id: str) -> Optional[Dict[str, Any]]:
        ...

    def peer_connections(self, from_user_id: str) -> List[Dict[str, Any]]:
        ...


class JsonDocumentStore:
    """
    Read-mostly document store over local JSON files.

    Layout:
      <base_dir>/
        users.json               -> { "<user_id>": {...user doc...}, ... }
        symptomEntries.json      -> [ {"userId": "...", "symptoms": [...], "intensity": 6, "createdAt": "..."}, ... ]
        journalEntries.json      -> [ {"userId": "...", "content": "...", "createdAt": "..."}, ... ]
        matchingPreferences.json -> [ {"userId": "...", "supportType": [...], "interests": [...], ...}, ... ]
        peerConnections.json     -> [ {"fromUserId": "...", "toUserId": "...", "status": "...", "connectionType": "..."}, ... ]

    Timestamps are ISO-8601 strings on disk and timezone-aware datetimes
    once loaded. Missing files read as empty collections.
    """

    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, collection: str) -> Path:
        return self.base_dir / f"{collection}.json"

    def _load(self, collection: str, empty: Any) -> Any:
        path = self._path(collection)
        if not path.exists():
            return empty

        raw_text = path.read_text(encoding="utf-8").strip()
        if not raw_text:
            return empty

        try:
            data = json.loads(raw_text)
        except json.JSONDecodeError as exc:
            raise StoreError(f"Collection '{collection}' is not valid JSON: {exc.msg}") from None

        if not isinstance(data, type(empty)):
            raise StoreError(f"Collection '{collection}' has unexpected shape: {type(data).__name__}")
        return data

    def _where(self, collection: str, field: str, value: str) -> List[Dict[str, Any]]:
        docs = self._load(collection, [])
        return [_rehydrate(d) for d in docs if isinstance(d, dict) and d.get(field) == value]

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        users = self._load(USERS, {})
        doc = users.get(user_id)
        if not isinstance(doc, dict):
            return None
        return _rehydrate(doc)

    def list_user_ids(self) -> List[str]:
        return list(self._load(USERS, {}).keys())

    def symptom_entries(self, user_id: str, *, limit: int) -> List[Dict[str, Any]]:
        return _newest_first(self._where(SYMPTOM_ENTRIES, "userId", user_id))[:limit]

    def journal_entries(self, user_id: str, *, limit: int) -> List[Dict[str, Any]]:
        return _newest_first(self._where(JOURNAL_ENTRIES, "userId", user_id))[:limit]

    def matching_preferences(self, user_id: str) -> Optional[Dict[str, Any]]:
        docs = self._where(MATCHING_PREFERENCES, "userId", user_id)
        return docs[0] if docs else None

    def peer_connections(self, from_user_id: str) -> List[Dict[str, Any]]:
        return self._where(PEER_CONNECTIONS, "fromUserId", from_user_id)


def default_data_dir() -> Path:
    from peerlink import config
    return config.PEERLINK_DATA_DIR
