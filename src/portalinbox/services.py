"""Summary: Inbox session orchestrating load, read-state, and reply workflows.

Importance: Replaces the widget's global state with an explicit per-session object.
Alternatives: Keep a module-level singleton shared by every caller.
"""

from __future__ import annotations

import logging
from typing import Callable

from portalinbox.errors import (
    AuthUnavailable,
    InboxError,
    MappingError,
    OperationDisabled,
    RemoteError,
    SourceUnavailable,
)
from portalinbox.mapping import FieldMapper
from portalinbox.models import LoadOutcome, Message, ReplyResult
from portalinbox.reconciler import ReadStateReconciler
from portalinbox.replies import ReplyComposer
from portalinbox.sources import MessageSource


logger = logging.getLogger(__name__)

LoadCallback = Callable[[LoadOutcome], None]

_LOAD_ERRORS = (SourceUnavailable, RemoteError, AuthUnavailable, OperationDisabled)


class InboxSession:
    """Summary: Public inbox operations bound to one data source and one read-state store.

    Importance: Several independent sessions can coexist, which keeps tests deterministic.
    Alternatives: Expose the reconciler and data source separately to callers.
    """

    def __init__(
        self,
        source: MessageSource,
        mapper: FieldMapper,
        reconciler: ReadStateReconciler,
        composer: ReplyComposer,
        on_complete: LoadCallback | None = None,
    ) -> None:
        self.source = source
        self.mapper = mapper
        self.reconciler = reconciler
        self.composer = composer
        self.on_complete = on_complete
        self.is_loading = False
        self.is_loaded = False
        self.failed_read_updates: list[str] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def messages(self) -> list[Message]:
        return self.reconciler.messages

    @property
    def unread_count(self) -> int:
        return self.reconciler.unread_count

    @property
    def view_mode(self) -> str:
        return self.reconciler.view_mode

    async def load_messages(self) -> LoadOutcome:
        """Summary: Run one fetch, map, and reconcile cycle.

        Importance: Produces either a fully loaded list or a single error state, never a partial list.
        Alternatives: Render records as they arrive.
        """

        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.is_loaded = False
        try:
            records = await self.source.fetch_records()
            messages = self.mapper.map_all(records)
        except _LOAD_ERRORS as exc:
            logger.error("Portal inbox load failed: %s", exc)
            if generation != self._generation:
                return self._stale(generation)
            return self._finish(LoadOutcome(status="error", generation=generation, error=str(exc)))
        except MappingError as exc:
            logger.error("Portal inbox mapping failed: %s", exc)
            if generation != self._generation:
                return self._stale(generation)
            self._finish(LoadOutcome(status="error", generation=generation, error=str(exc)))
            raise
        finally:
            # Unexpected errors must not leave the session stuck in loading.
            if generation == self._generation and not self.is_loaded:
                self.is_loading = False

        if generation != self._generation:
            return self._stale(generation)
        reconciled = self.reconciler.apply(messages)
        logger.info("Loaded %s messages, %s unread", len(reconciled), self.unread_count)
        return self._finish(
            LoadOutcome(
                status="loaded",
                generation=generation,
                messages=tuple(reconciled),
                unread_count=self.unread_count,
            )
        )

    async def mark_message_as_read(self, message_id: str) -> bool:
        """Summary: Optimistically mark a message read and persist it to the server.

        Importance: The local flag stays read even when the remote write fails; failures are queued.
        Alternatives: Wait for the server before updating the UI.
        """

        updated = self.reconciler.mark_as_read(message_id)
        if updated is None:
            return False
        if not self.source.supports_writes:
            logger.info("Local data source: read status not persisted to server")
            return True
        await self._push_read_flag(message_id)
        return True

    async def retry_failed_read_updates(self) -> int:
        """Summary: Re-send read-flag updates that previously failed.

        Importance: Lets hosts reconcile the optimistic local state with the server later.
        Alternatives: Drop failed updates silently.
        """

        pending, self.failed_read_updates = self.failed_read_updates, []
        succeeded = 0
        for message_id in pending:
            if await self._push_read_flag(message_id):
                succeeded += 1
        return succeeded

    def mark_all_messages_as_read(self) -> None:
        self.reconciler.mark_all_as_read()
        logger.info("Marked all %s messages as read", len(self.reconciler.messages))

    def toggle_view(self) -> str:
        return self.reconciler.toggle_view()

    def get_filtered_messages(self) -> list[Message]:
        return self.reconciler.filtered_view()

    def get_message(self, message_id: str) -> Message | None:
        return self.reconciler.get(message_id)

    async def create_reply(self, message_id: str, reply_text: str) -> ReplyResult:
        """Summary: Compose and send a reply to a loaded message.

        Importance: Remote failures come back as a result so the user can retry manually.
        Alternatives: Raise every failure to the caller.
        """

        if not self.source.supports_writes:
            logger.info("Local data source: reply not sent to server")
            return ReplyResult(success=False, message="Local environment - reply not persisted")
        original = self.reconciler.get(message_id)
        if original is None:
            return ReplyResult(success=False, message="Original message not found")
        payload = self.composer.compose(original, reply_text)
        try:
            await self.source.create_reply(payload)
        except (RemoteError, AuthUnavailable, OperationDisabled) as exc:
            logger.error("Failed to create reply: %s", exc)
            return ReplyResult(success=False, message=str(exc))
        return ReplyResult(success=True, message="Reply sent successfully")

    async def clear_read_status(self) -> LoadOutcome:
        self.reconciler.tracker.clear()
        return await self.load_messages()

    async def _push_read_flag(self, message_id: str) -> bool:
        try:
            await self.source.update_read_flag(message_id, True)
        except OperationDisabled as exc:
            logger.info("%s; read status kept locally", exc)
            return False
        except InboxError as exc:
            logger.error("Failed to update read status for %s: %s", message_id, exc)
            if message_id not in self.failed_read_updates:
                self.failed_read_updates.append(message_id)
            return False
        return True

    def _stale(self, generation: int) -> LoadOutcome:
        logger.debug("Discarding stale load generation %s (latest %s)", generation, self._generation)
        return LoadOutcome(status="stale", generation=generation)

    def _finish(self, outcome: LoadOutcome) -> LoadOutcome:
        self.is_loading = False
        self.is_loaded = True
        if self.on_complete is not None:
            self.on_complete(outcome)
        return outcome
