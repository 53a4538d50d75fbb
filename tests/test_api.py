"""Summary: API integration tests.

Importance: Validates FastAPI endpoints against the inbox session workflows.
Alternatives: Use manual curl testing only.
"""

from __future__ import annotations

import json
from pathlib import Path

from fastapi.testclient import TestClient

from portalinbox.api import create_app
from portalinbox.app import build_session
from portalinbox.config import InboxConfig
from portalinbox.storage.kv_store import MemoryKeyValueStore


def _build_client(tmp_path: Path) -> TestClient:
    """Summary: Build a test client over a snapshot-backed session.

    Importance: Ensures tests use isolated read-state storage and no network.
    Alternatives: Load InboxConfig from environment variables.
    """

    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(
        json.dumps(
            {
                "messages": [
                    {
                        "id": "m1",
                        "from": "Support Team",
                        "subject": "Status",
                        "body": 'See <a href="https://example.gov/s">status</a><script>x()</script>',
                        "date": "2025-01-02T00:00:00Z",
                    },
                    {"id": "m2", "from": "Billing", "body": "Paid", "date": "2024-12-01T00:00:00Z", "read": True},
                ]
            }
        ),
        encoding="utf-8",
    )
    config = InboxConfig(local_data_source=str(snapshot), local_delay_seconds=0)
    session = build_session(config, store=MemoryKeyValueStore())
    return TestClient(create_app(config, session=session))


def test_api_health(tmp_path: Path) -> None:
    client = _build_client(tmp_path)
    assert client.get("/health").json() == {"status": "ok"}


def test_api_refresh_and_list_messages(tmp_path: Path) -> None:
    """Summary: Verify refresh loads messages and the list exposes sanitized bodies.

    Importance: Confirms the HTTP layer wires into the load cycle and formatting.
    Alternatives: Validate only the CLI workflow.
    """

    client = _build_client(tmp_path)
    refreshed = client.post("/messages/refresh").json()
    assert refreshed["status"] == "loaded"
    assert refreshed["generation"] == 1
    assert refreshed["unreadCount"] == 1
    assert refreshed["error"] is None

    listing = client.get("/messages").json()
    assert listing["viewMode"] == "active"
    assert [item["id"] for item in listing["messages"]] == ["m1"]
    body_html = listing["messages"][0]["bodyHtml"]
    assert 'href="https://example.gov/s"' in body_html
    assert "<script>" not in body_html
    assert listing["messages"][0]["relativeDate"] == "2025-01-02"

    everything = client.get("/messages", params={"all": "true"}).json()
    assert len(everything["messages"]) == 2


def test_api_mark_read_and_toggle_view(tmp_path: Path) -> None:
    client = _build_client(tmp_path)
    client.post("/messages/refresh")

    response = client.post("/messages/m1/read")
    assert response.json() == {"updated": True, "unreadCount": 0}
    assert client.post("/messages/m1/read").json()["updated"] is False
    assert client.post("/messages/unknown/read").status_code == 404

    assert client.post("/view/toggle").json() == {"viewMode": "archived"}
    archived = client.get("/messages").json()
    assert {item["id"] for item in archived["messages"]} == {"m1", "m2"}


def test_api_mark_all_and_clear_read_status(tmp_path: Path) -> None:
    client = _build_client(tmp_path)
    client.post("/messages/refresh")
    assert client.post("/messages/read-all").json() == {"unreadCount": 0}

    cleared = client.delete("/read-status").json()
    assert cleared["status"] == "loaded"
    assert cleared["generation"] == 2
    assert cleared["unreadCount"] == 1


def test_api_reply_on_local_source(tmp_path: Path) -> None:
    """Summary: Verify replies against the snapshot report that nothing was persisted.

    Importance: Local development must never pretend a reply reached the portal.
    Alternatives: Silently accept the reply.
    """

    client = _build_client(tmp_path)
    client.post("/messages/refresh")
    response = client.post("/messages/m1/reply", json={"text": "Thanks"})
    assert response.status_code == 200
    assert response.json() == {
        "success": False,
        "message": "Local environment - reply not persisted",
    }
    assert client.post("/messages/m1/reply", json={"text": ""}).status_code == 422


def test_api_refresh_reports_missing_snapshot(tmp_path: Path) -> None:
    config = InboxConfig(local_data_source=str(tmp_path / "missing.json"), local_delay_seconds=0)
    session = build_session(config, store=MemoryKeyValueStore())
    client = TestClient(create_app(config, session=session))
    payload = client.post("/messages/refresh").json()
    assert payload["status"] == "error"
    assert "Failed to load messages" in payload["error"]
