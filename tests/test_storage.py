"""Summary: Tests for key-value persistence.

Importance: Ensures the last-checked timestamp survives across sessions.
Alternatives: Rely on manual testing for storage operations.
"""

from __future__ import annotations

from pathlib import Path

from portalinbox.storage.kv_store import MemoryKeyValueStore, SqliteKeyValueStore


def test_sqlite_store_persists_values(tmp_path: Path) -> None:
    """Summary: Verify values are saved, replaced, and deleted.

    Importance: Confirms read state can be persisted for later loads.
    Alternatives: Use in-memory fixtures without database storage.
    """

    db_path = tmp_path / "state.db"
    store = SqliteKeyValueStore(str(db_path))
    store.initialize()
    store.set("portalInbox_lastCheckedComments", "2025-01-01T00:00:00+00:00")
    store.set("portalInbox_lastCheckedComments", "2025-02-01T00:00:00+00:00")

    reopened = SqliteKeyValueStore(str(db_path))
    reopened.initialize()
    assert reopened.get("portalInbox_lastCheckedComments") == "2025-02-01T00:00:00+00:00"

    reopened.delete("portalInbox_lastCheckedComments")
    assert store.get("portalInbox_lastCheckedComments") is None


def test_memory_store_ignores_missing_delete() -> None:
    store = MemoryKeyValueStore({"a": "1"})
    store.delete("missing")
    assert store.get("a") == "1"
    assert store.get("missing") is None
