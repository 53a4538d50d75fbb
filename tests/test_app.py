"""Summary: Tests for application wiring.

Importance: Ensures the right data source is chosen for each hosting context.
Alternatives: Verify source selection manually in a browser.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from portalinbox.app import build_session, build_token_provider, select_source
from portalinbox.config import InboxConfig, PortalDataSourceConfig
from portalinbox.sources import SnapshotMessageSource, TabularApiMessageSource
from portalinbox.storage.kv_store import MemoryKeyValueStore
from portalinbox.tokens import PortalTokenProvider, StaticTokenProvider

PORTAL = PortalDataSourceConfig(base_url="https://portal.example.gov/_api")


def test_local_context_prefers_snapshot() -> None:
    config = InboxConfig(
        local_data_source="data/local.json", portal_data_source=PORTAL, origin="http://localhost:3000"
    )
    assert isinstance(select_source(config), SnapshotMessageSource)


def test_local_context_can_force_portal_api() -> None:
    config = InboxConfig(
        local_data_source="data/local.json",
        portal_data_source=PORTAL,
        origin="http://localhost:3000",
        use_portal_api=True,
    )
    assert isinstance(select_source(config), TabularApiMessageSource)


def test_hosted_context_uses_portal_api() -> None:
    config = InboxConfig(
        local_data_source="data/local.json",
        portal_data_source=PORTAL,
        origin="https://portal.example.gov",
    )
    source = select_source(config)
    assert isinstance(source, TabularApiMessageSource)
    assert source.supports_writes is True


def test_hosted_context_without_portal_falls_back_to_snapshot() -> None:
    """Summary: Verify hosted pages without a portal configuration still load the snapshot.

    Importance: A partially configured widget should degrade rather than fail to start.
    Alternatives: Raise a configuration error at startup.
    """

    config = InboxConfig(local_data_source="data/local.json", origin="https://portal.example.gov")
    assert isinstance(select_source(config), SnapshotMessageSource)


def test_build_token_provider_prefers_static_token() -> None:
    static = InboxConfig(
        portal_data_source=PortalDataSourceConfig(
            base_url="https://portal.example.gov/_api", request_token="abc"
        )
    )
    provider = build_token_provider(static)
    assert isinstance(provider, StaticTokenProvider)
    assert asyncio.run(provider.get_token()) == "abc"

    fetched = InboxConfig(portal_data_source=PORTAL, origin="https://portal.example.gov/")
    assert isinstance(build_token_provider(fetched), PortalTokenProvider)


def test_build_session_with_sqlite_store(tmp_path: Path) -> None:
    """Summary: Verify the default store persists the read timestamp across sessions.

    Importance: Read state must survive a restart when the server has no flags.
    Alternatives: Keep read state in memory only.
    """

    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(
        '{"messages": [{"id": "m1", "from": "Support", "body": "hi", "date": "2025-01-01T00:00:00Z"}]}',
        encoding="utf-8",
    )
    config = InboxConfig(
        local_data_source=str(snapshot),
        local_delay_seconds=0,
        state_store_path=str(tmp_path / "state.db"),
    )
    session = build_session(config)
    asyncio.run(session.load_messages())
    assert session.unread_count == 1
    session.mark_all_messages_as_read()

    reopened = build_session(config)
    asyncio.run(reopened.load_messages())
    assert reopened.unread_count == 0


def test_build_session_accepts_injected_store() -> None:
    store = MemoryKeyValueStore()
    config = InboxConfig(local_data_source="data/local.json")
    session = build_session(config, store=store)
    assert session.reconciler.tracker.last_checked_at().year == 1970
