"""Summary: Application wiring for inbox sessions.

Importance: Centralizes data source selection and dependency creation for the CLI and API.
Alternatives: Instantiate sources and reconcilers manually in each entrypoint.
"""

from __future__ import annotations

import logging

import httpx

from portalinbox.config import InboxConfig
from portalinbox.environment import LOCAL, classify
from portalinbox.mapping import FieldMapper
from portalinbox.reconciler import ReadStateReconciler, ReadStateTracker
from portalinbox.replies import ReplyComposer
from portalinbox.services import InboxSession, LoadCallback
from portalinbox.sources import MessageSource, SnapshotMessageSource, TabularApiMessageSource
from portalinbox.storage.kv_store import KeyValueStore, SqliteKeyValueStore
from portalinbox.tokens import PortalTokenProvider, StaticTokenProvider, TokenProvider


logger = logging.getLogger(__name__)


def select_source(
    config: InboxConfig,
    client: httpx.AsyncClient | None = None,
    token_provider: TokenProvider | None = None,
) -> MessageSource:
    """Summary: Choose the snapshot or Web API strategy for the current context.

    Importance: Local development never touches the live portal unless explicitly asked.
    Alternatives: Require callers to pick a strategy.
    """

    environment = classify(config.origin)
    logger.info("Portal inbox environment detected as %s", environment.upper())
    if environment == LOCAL and config.local_data_source and not config.use_portal_api:
        logger.info("Using local data source %s", config.local_data_source)
        return _snapshot(config, client)
    if config.portal_data_source is not None:
        logger.info("Using portal Web API data source")
        if token_provider is None:
            token_provider = build_token_provider(config, client)
        return TabularApiMessageSource(config, token_provider, client=client)
    logger.warning("Portal data source not configured, falling back to local")
    return _snapshot(config, client)


def _snapshot(config: InboxConfig, client: httpx.AsyncClient | None) -> SnapshotMessageSource:
    return SnapshotMessageSource(
        config.local_data_source or "", delay_seconds=config.local_delay_seconds, client=client
    )


def build_token_provider(
    config: InboxConfig, client: httpx.AsyncClient | None = None
) -> TokenProvider:
    """Summary: Build the token source for Web API calls.

    Importance: A configured token wins; otherwise the portal token endpoint is queried.
    Alternatives: Always require a static token.
    """

    portal = config.portal_data_source
    if portal is not None and portal.request_token:
        return StaticTokenProvider(portal.request_token)
    token_path = portal.token_path if portal is not None else "/_layout/tokenhtml"
    return PortalTokenProvider(config.origin.rstrip("/") + token_path, client=client)


def build_session(
    config: InboxConfig,
    store: KeyValueStore | None = None,
    client: httpx.AsyncClient | None = None,
    token_provider: TokenProvider | None = None,
    on_complete: LoadCallback | None = None,
) -> InboxSession:
    """Summary: Build an inbox session from configuration.

    Importance: Provides a single construction path for the application.
    Alternatives: Instantiate components directly within each entrypoint.
    """

    if store is None:
        sqlite_store = SqliteKeyValueStore(config.state_store_path)
        sqlite_store.initialize()
        store = sqlite_store
    return InboxSession(
        source=select_source(config, client=client, token_provider=token_provider),
        mapper=FieldMapper(config),
        reconciler=ReadStateReconciler(ReadStateTracker(store)),
        composer=ReplyComposer(config),
        on_complete=on_complete,
    )
