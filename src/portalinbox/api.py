"""Summary: FastAPI application exposing the inbox session.

Importance: Lets a portal page or any HTTP client drive the inbox engine.
Alternatives: Embed the engine only behind the CLI.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from portalinbox.app import build_session
from portalinbox.config import InboxConfig
from portalinbox.errors import ComposeError, MappingError
from portalinbox.formatting import format_relative_date, sanitize_html_for_links
from portalinbox.models import LoadOutcome, Message
from portalinbox.services import InboxSession


class ReplyRequest(BaseModel):
    """Summary: Request payload for replying to a message.

    Importance: Rejects empty replies before any Web API call.
    Alternatives: Accept the reply text as a query parameter.
    """

    text: str = Field(min_length=1)


def _serialize_message(message: Message) -> dict[str, Any]:
    data = message.to_dict()
    data["bodyHtml"] = sanitize_html_for_links(message.body)
    data["relativeDate"] = format_relative_date(message.date)
    return data


def _serialize_outcome(outcome: LoadOutcome) -> dict[str, Any]:
    return {
        "status": outcome.status,
        "generation": outcome.generation,
        "unreadCount": outcome.unread_count,
        "error": outcome.error,
    }


def create_app(config: InboxConfig, session: InboxSession | None = None) -> FastAPI:
    """Summary: Create a FastAPI app wired to one inbox session.

    Importance: Ensures the API layer shares the same configuration and read-state store.
    Alternatives: Instantiate sessions globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = FastAPI(title="Portal Inbox API", version="0.1.0")
    app.state.session = session or build_session(config)

    def _session() -> InboxSession:
        return app.state.session

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/messages/refresh")
    async def refresh() -> dict[str, Any]:
        """Summary: Run a full load cycle.

        Importance: Error states come back as data so the client can show one error view.
        Alternatives: Map load failures to HTTP 5xx.
        """

        try:
            outcome = await _session().load_messages()
        except MappingError as exc:
            raise HTTPException(status_code=500, detail=exc.message) from exc
        return _serialize_outcome(outcome)

    @app.get("/messages")
    def list_messages(include_all: bool = Query(default=False, alias="all")) -> dict[str, Any]:
        current = _session()
        messages = current.messages if include_all else current.get_filtered_messages()
        return {
            "viewMode": current.view_mode,
            "unreadCount": current.unread_count,
            "messages": [_serialize_message(message) for message in messages],
        }

    @app.post("/messages/read-all")
    def mark_all_read() -> dict[str, int]:
        current = _session()
        current.mark_all_messages_as_read()
        return {"unreadCount": current.unread_count}

    @app.post("/messages/{message_id}/read")
    async def mark_read(message_id: str) -> dict[str, Any]:
        current = _session()
        if current.get_message(message_id) is None:
            raise HTTPException(status_code=404, detail="Message not found")
        updated = await current.mark_message_as_read(message_id)
        return {"updated": updated, "unreadCount": current.unread_count}

    @app.post("/messages/{message_id}/reply")
    async def reply(message_id: str, payload: ReplyRequest) -> dict[str, Any]:
        """Summary: Send a reply to a loaded message.

        Importance: Configuration errors surface as 422 while remote failures stay retryable results.
        Alternatives: Return 500 for every failure.
        """

        try:
            result = await _session().create_reply(message_id, payload.text)
        except ComposeError as exc:
            raise HTTPException(status_code=422, detail=exc.message) from exc
        return {"success": result.success, "message": result.message}

    @app.post("/view/toggle")
    def toggle_view() -> dict[str, str]:
        return {"viewMode": _session().toggle_view()}

    @app.delete("/read-status")
    async def clear_read_status() -> dict[str, Any]:
        outcome = await _session().clear_read_status()
        return _serialize_outcome(outcome)

    return app
