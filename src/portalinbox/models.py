"""Summary: Domain model dataclasses for the portal inbox.

Importance: Defines the canonical message and reply shapes shared by every component.
Alternatives: Pass raw Web API dictionaries through the whole stack.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


NO_SUBJECT = "(No Subject)"
CATEGORY_GENERAL = "general"
CATEGORY_PORTAL_COMMENT = "portal-comment"

DIRECTION_FROM_CONTACT = 1
DIRECTION_TO_CONTACT = 2

PARTICIPATION_SENDER = 1
PARTICIPATION_RECIPIENT = 2


@dataclass(frozen=True)
class Message:
    """Summary: Canonical inbox message built from either data source.

    Importance: Core unit for read-state reconciliation and reply composition.
    Alternatives: Keep separate classes for snapshot and Web API records.
    """

    id: str
    sender: str
    subject: str
    body: str
    date: datetime
    read: bool = False
    category: str = CATEGORY_GENERAL
    regarding_object_id: str | None = None
    to_contact: str | None = None
    to_contact_id: str | None = None
    from_staff_id: str | None = None
    direction_code: int | None = None
    statecode: int | None = None
    statuscode: int | None = None
    has_read_value: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        """Summary: Serialize the message in the widget's camelCase shape.

        Importance: Keeps API responses compatible with existing inbox front ends.
        Alternatives: Expose snake_case field names directly.
        """

        return {
            "id": self.id,
            "from": self.sender,
            "subject": self.subject,
            "body": self.body,
            "date": self.date.isoformat(),
            "read": self.read,
            "category": self.category,
            "regardingObjectId": self.regarding_object_id,
            "toContact": self.to_contact,
            "toContactId": self.to_contact_id,
            "fromStaffId": self.from_staff_id,
            "directionCode": self.direction_code,
            "statecode": self.statecode,
            "statuscode": self.statuscode,
            "hasReadValue": self.has_read_value,
        }


@dataclass(frozen=True)
class ReplyParty:
    """One activity party entry of an outgoing reply."""

    participation_type: int
    bind_key: str
    bind_value: str


@dataclass(frozen=True)
class ReplyPayload:
    """Summary: Outgoing portal comment with reversed sender and recipient.

    Importance: Separates payload construction from the network call that sends it.
    Alternatives: Build the JSON body inline in the data source.
    """

    subject: str
    description: str
    direction_code: int
    regarding_bind_key: str
    regarding_bind_value: str
    parties: tuple[ReplyParty, ...]

    def to_wire(self) -> dict[str, Any]:
        return {
            "subject": self.subject,
            "description": self.description,
            "adx_portalcommentdirectioncode": self.direction_code,
            self.regarding_bind_key: self.regarding_bind_value,
            "adx_portalcomment_activity_parties": [
                {"participationtypemask": party.participation_type, party.bind_key: party.bind_value}
                for party in self.parties
            ],
        }


@dataclass(frozen=True)
class ReplyResult:
    """Summary: Structured outcome of a reply attempt.

    Importance: Lets the UI prompt a manual retry without catching exceptions.
    Alternatives: Raise on every failure.
    """

    success: bool
    message: str


@dataclass(frozen=True)
class LoadOutcome:
    """Summary: Terminal state of one load cycle.

    Importance: Drives the "rendered" versus "error" states of the inbox UI.
    Alternatives: Return the message list and raise on failure.
    """

    status: str
    generation: int
    messages: tuple[Message, ...] = ()
    unread_count: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "loaded"
