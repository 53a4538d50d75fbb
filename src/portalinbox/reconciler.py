"""Summary: Read-state reconciliation between server flags and the client timestamp.

Importance: Produces one read flag per message without losing either source of truth.
Alternatives: Trust only the server flag and show everything else as unread.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from portalinbox.mapping import parse_iso_datetime
from portalinbox.models import Message
from portalinbox.storage.kv_store import KeyValueStore


logger = logging.getLogger(__name__)

LAST_CHECKED_KEY = "portalInbox_lastCheckedComments"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

VIEW_ACTIVE = "active"
VIEW_ARCHIVED = "archived"


class ReadStateTracker:
    """Summary: Owns the persisted last-checked timestamp.

    Importance: Messages dated at or before the timestamp count as read when the server is silent.
    Alternatives: Persist a set of read message ids.
    """

    def __init__(self, store: KeyValueStore, key: str = LAST_CHECKED_KEY) -> None:
        self._store = store
        self._key = key

    def last_checked_at(self) -> datetime:
        raw = self._store.get(self._key)
        if raw is None:
            return EPOCH
        parsed = parse_iso_datetime(raw)
        if parsed is None:
            logger.warning("Ignoring unreadable %s value: %r", self._key, raw)
            return EPOCH
        return parsed

    def advance(self, timestamp: datetime) -> bool:
        """Summary: Move the timestamp forward to the given instant.

        Importance: The timestamp must never move backward.
        Alternatives: Overwrite unconditionally and accept regressions.
        """

        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        if timestamp <= self.last_checked_at():
            return False
        self._store.set(self._key, timestamp.astimezone(timezone.utc).isoformat())
        return True

    def mark_now(self, now: datetime | None = None) -> None:
        self.advance(now or datetime.now(timezone.utc))

    def clear(self) -> None:
        self._store.delete(self._key)
        logger.info("Read status cleared from %s", self._key)


class ReadStateReconciler:
    """Summary: Holds loaded messages and derives their read flags.

    Importance: The only component allowed to change a message's read flag.
    Alternatives: Let UI code toggle read flags directly.
    """

    def __init__(self, tracker: ReadStateTracker) -> None:
        self.tracker = tracker
        self._messages: list[Message] = []
        self._view_mode = VIEW_ACTIVE
        self._unread_count = 0

    @property
    def messages(self) -> list[Message]:
        return list(self._messages)

    @property
    def unread_count(self) -> int:
        return self._unread_count

    @property
    def view_mode(self) -> str:
        return self._view_mode

    def apply(self, messages: list[Message]) -> list[Message]:
        """Summary: Derive read flags for a freshly loaded message list.

        Importance: Server flags win; the timestamp fills in when the server field is absent.
        Alternatives: Merge read flags per message id across loads.
        """

        last_checked = self.tracker.last_checked_at()
        reconciled = [
            replace(message, read=_derive_read(message, last_checked)) for message in messages
        ]
        self._messages = reconciled
        self._sync_tracker()
        self._recount()
        return list(reconciled)

    def get(self, message_id: str) -> Message | None:
        return next((message for message in self._messages if message.id == message_id), None)

    def mark_as_read(self, message_id: str) -> Message | None:
        """Summary: Mark one loaded message as read.

        Importance: Returns the updated message only when something changed.
        Alternatives: Raise for unknown ids.
        """

        for index, message in enumerate(self._messages):
            if message.id != message_id:
                continue
            if message.read:
                return None
            updated = replace(message, read=True)
            self._messages[index] = updated
            self.tracker.advance(updated.date)
            self._recount()
            return updated
        return None

    def mark_all_as_read(self, now: datetime | None = None) -> None:
        self.tracker.mark_now(now)
        self._messages = [replace(message, read=True) for message in self._messages]
        self._recount()

    def toggle_view(self) -> str:
        self._view_mode = VIEW_ARCHIVED if self._view_mode == VIEW_ACTIVE else VIEW_ACTIVE
        return self._view_mode

    def reset_view(self) -> None:
        self._view_mode = VIEW_ACTIVE

    def filtered_view(self) -> list[Message]:
        want_read = self._view_mode == VIEW_ARCHIVED
        return [message for message in self._messages if message.read == want_read]

    def _sync_tracker(self) -> None:
        # Keeps the fallback consistent with server flags for later loads without them.
        read_dates = [message.date for message in self._messages if message.read]
        if read_dates:
            self.tracker.advance(max(read_dates))

    def _recount(self) -> None:
        self._unread_count = sum(1 for message in self._messages if not message.read)


def _derive_read(message: Message, last_checked: datetime) -> bool:
    if message.has_read_value is not None:
        return bool(message.has_read_value)
    return message.date <= last_checked
