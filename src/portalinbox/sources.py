"""Summary: Data source strategies for inbox records.

Importance: Gives the snapshot file and the portal Web API one interchangeable fetch contract.
Alternatives: Branch on the environment inside the load cycle.
"""

from __future__ import annotations

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx

from portalinbox.config import InboxConfig, OperationConfig
from portalinbox.errors import AuthUnavailable, OperationDisabled, RemoteError, SourceUnavailable
from portalinbox.models import DIRECTION_TO_CONTACT, ReplyPayload
from portalinbox.tokens import TOKEN_NAME, TokenProvider
from portalinbox.transport import client_scope


logger = logging.getLogger(__name__)

DIRECTION_FILTER = f"adx_portalcommentdirectioncode eq {DIRECTION_TO_CONTACT}"
FORMATTED_VALUES_PREFER = 'odata.include-annotations="OData.Community.Display.V1.FormattedValue"'


class MessageSource(ABC):
    """Summary: Abstract interface for raw record retrieval.

    Importance: Standardizes retrieval across the snapshot and Web API strategies.
    Alternatives: Use strategy-specific classes directly in the load cycle.
    """

    supports_writes = False

    @abstractmethod
    async def fetch_records(self) -> list[dict[str, Any]]:
        """Summary: Fetch raw records from the source.

        Importance: Drives every load cycle.
        Alternatives: Stream records page by page.
        """

    async def update_read_flag(self, message_id: str, value: bool) -> None:
        raise OperationDisabled("update")

    async def create_reply(self, payload: ReplyPayload) -> None:
        raise OperationDisabled("create")


class SnapshotMessageSource(MessageSource):
    """Summary: Loads records from a static JSON snapshot.

    Importance: Supports offline development and testing of loading states.
    Alternatives: Generate synthetic messages in code.
    """

    def __init__(
        self,
        location: str,
        delay_seconds: float = 4.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Summary: Initialize the snapshot source.

        Importance: The delay emulates network latency so loading states stay visible.
        Alternatives: Return immediately.
        """

        self._location = location
        self._delay_seconds = delay_seconds
        self._client = client

    async def fetch_records(self) -> list[dict[str, Any]]:
        if self._delay_seconds:
            await asyncio.sleep(self._delay_seconds)
        raw = await self._read()
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SourceUnavailable(f"Malformed snapshot at {self._location}: {exc}") from exc
        return extract_rows(data, self._location)

    async def _read(self) -> str:
        if self._location.startswith(("http://", "https://")):
            try:
                async with client_scope(self._client) as client:
                    response = await client.get(self._location)
            except httpx.HTTPError as exc:
                raise SourceUnavailable(f"Failed to load messages from {self._location}") from exc
            if not response.is_success:
                raise SourceUnavailable(
                    f"Failed to load messages from local source (status {response.status_code})"
                )
            return response.text
        path = Path(self._location)
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise SourceUnavailable(f"Malformed snapshot at {path}: {exc}") from exc
        except OSError as exc:
            raise SourceUnavailable(f"Failed to load messages from {path}") from exc


class TabularApiMessageSource(MessageSource):
    """Summary: Reads and writes portal comments through the portal Web API.

    Importance: Provides server-backed messages, read flags, and replies.
    Alternatives: Use the Dataverse SDK directly from a server.
    """

    supports_writes = True

    def __init__(
        self,
        config: InboxConfig,
        token_provider: TokenProvider | None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if config.portal_data_source is None:
            raise ValueError("portal_data_source configuration is required for the Web API source")
        self._config = config
        self._portal = config.portal_data_source
        self._token_provider = token_provider
        self._client = client

    @property
    def collection_url(self) -> str:
        return f"{self._portal.base_url}/{self._portal.entity_set_name}"

    async def fetch_records(self) -> list[dict[str, Any]]:
        read_ops = self._portal.operations.read
        if not read_ops.enabled:
            raise OperationDisabled("read")
        params = build_read_params(read_ops)
        logger.debug("Portal inbox API request: %s %s", self.collection_url, params)
        token = await self._token()
        headers = {TOKEN_NAME: token, "Accept": "application/json", "Prefer": FORMATTED_VALUES_PREFER}
        try:
            async with client_scope(self._client) as client:
                response = await client.get(self.collection_url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            raise SourceUnavailable(f"Portal Web API request failed: {exc}") from exc
        if not response.is_success:
            raise RemoteError(response.status_code, response.text)
        try:
            data = response.json()
        except ValueError as exc:
            raise SourceUnavailable("Portal Web API returned invalid JSON") from exc
        return extract_rows(data, self.collection_url, keys=("value",))

    async def update_read_flag(self, message_id: str, value: bool) -> None:
        """Summary: Write the read flag and mark the comment completed.

        Importance: Keeps read state consistent across devices through the server.
        Alternatives: Track read state only on the client.
        """

        if not self._portal.operations.update.enabled:
            raise OperationDisabled("update")
        payload = {self._config.field_name("hasread"): value, "statecode": 1}
        await self._send("PATCH", f"{self.collection_url}({message_id})", payload)
        logger.info("Portal comment %s %s updated", message_id, self._config.field_name("hasread"))

    async def create_reply(self, payload: ReplyPayload) -> None:
        if not self._portal.operations.create.enabled:
            raise OperationDisabled("create")
        await self._send("POST", self.collection_url, payload.to_wire())
        logger.info("Reply created successfully")

    async def _send(self, method: str, url: str, body: dict[str, Any]) -> None:
        token = await self._token()
        headers = {
            TOKEN_NAME: token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            async with client_scope(self._client) as client:
                response = await client.request(method, url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteError(0, str(exc)) from exc
        if not response.is_success:
            raise RemoteError(response.status_code, response.text)

    async def _token(self) -> str:
        if self._token_provider is None:
            raise AuthUnavailable("No token source configured")
        return await self._token_provider.get_token()


def build_read_params(read_ops: OperationConfig) -> dict[str, str]:
    """Summary: Build OData query parameters for the comment collection.

    Importance: The direction predicate is always applied; caller filters only narrow it.
    Alternatives: Trust the configured filter to include the direction.
    """

    params: dict[str, str] = {}
    if read_ops.select:
        params["$select"] = read_ops.select
    filter_parts = [DIRECTION_FILTER]
    if read_ops.filter:
        filter_parts.append(f"({read_ops.filter})")
    params["$filter"] = " and ".join(filter_parts)
    if read_ops.order_by:
        params["$orderby"] = read_ops.order_by
    if read_ops.expand:
        params["$expand"] = read_ops.expand
    return params


def extract_rows(
    data: Any, location: str, keys: tuple[str, ...] = ("value", "messages")
) -> list[dict[str, Any]]:
    """Summary: Pull the row list out of a tabular or legacy wrapper.

    Importance: Snapshots may use either the OData "value" or the legacy "messages" key.
    Alternatives: Support only one wrapper shape.
    """

    if not isinstance(data, dict):
        raise SourceUnavailable(f"Unexpected payload from {location}: expected a JSON object")
    for key in keys:
        rows = data.get(key)
        if isinstance(rows, list):
            if not all(isinstance(row, dict) for row in rows):
                raise SourceUnavailable(f"Malformed {key} list in payload from {location}")
            return rows
    raise SourceUnavailable(f"No {' or '.join(keys)} list found in payload from {location}")
