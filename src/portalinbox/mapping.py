"""Summary: Field mapping from raw source records to canonical messages.

Importance: Converges the snapshot and Web API shapes on one message model.
Alternatives: Let each data source build messages itself.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from portalinbox.config import InboxConfig
from portalinbox.errors import MappingError
from portalinbox.models import (
    CATEGORY_GENERAL,
    CATEGORY_PORTAL_COMMENT,
    NO_SUBJECT,
    PARTICIPATION_RECIPIENT,
    Message,
)


logger = logging.getLogger(__name__)

PARTIES_KEY = "adx_portalcomment_activity_parties"
CREATED_BY_KEY = "_createdby_value"
CREATED_BY_NAME_KEY = "_createdby_value@OData.Community.Display.V1.FormattedValue"


class FieldMapper:
    """Summary: Translates raw records into Message objects.

    Importance: Enforces required-field contracts instead of defaulting missing identities.
    Alternatives: Map fields leniently and fail later when replying.
    """

    def __init__(self, config: InboxConfig) -> None:
        self._config = config

    def map_all(self, records: Iterable[dict[str, Any]]) -> list[Message]:
        return [self.map(record) for record in records]

    def map(self, record: dict[str, Any]) -> Message:
        """Summary: Map one raw record to a canonical message.

        Importance: Single entry point that picks the legacy or relationship-backed shape.
        Alternatives: Require callers to know which shape they hold.
        """

        if is_legacy_record(record):
            return self._map_legacy(record)
        return self._map_portal_comment(record)

    def _map_legacy(self, record: dict[str, Any]) -> Message:
        record_id = record.get("id")
        if record_id is None or record_id == "":
            raise MappingError(None, "id", "Message id not found in legacy record.", "Add an id field.")
        date = _require_date(record.get("date"), str(record_id), "date", "Add an ISO 8601 date field.")
        read_value = record.get("read")
        return Message(
            id=str(record_id),
            sender=record["from"],
            subject=record.get("subject") or NO_SUBJECT,
            body=record.get("body") or "",
            date=date,
            read=bool(read_value) if read_value is not None else False,
            category=record.get("category") or CATEGORY_GENERAL,
            has_read_value=read_value if read_value is None else bool(read_value),
        )

    def _map_portal_comment(self, record: dict[str, Any]) -> Message:
        record_id = record.get("activityid")
        if not record_id:
            logger.error("Missing activityid in portal comment record")
            raise MappingError(
                None,
                "activityid",
                "Activity ID not found in portal comment record.",
                "Ensure $select includes activityid.",
            )
        from_staff_id = record.get(CREATED_BY_KEY)
        if not from_staff_id:
            logger.error("Missing %s for comment %s", CREATED_BY_KEY, record_id)
            raise MappingError(
                record_id,
                CREATED_BY_KEY,
                f"Created by value not found for comment {record_id}.",
                "Ensure $select includes _createdby_value.",
            )

        parties = record.get(PARTIES_KEY)
        if not parties:
            logger.error("Missing or empty activity parties for comment %s", record_id)
            raise MappingError(
                record_id,
                PARTIES_KEY,
                f"Activity parties not found for comment {record_id}.",
                f"Ensure $expand includes {PARTIES_KEY}.",
            )

        to_party = next(
            (
                party
                for party in parties
                if party.get("participationtypemask") == PARTICIPATION_RECIPIENT
                and isinstance(party.get("partyid_contact"), dict)
            ),
            None,
        )
        if to_party is None:
            logger.error("No contact party found for comment %s", record_id)
            raise MappingError(
                record_id,
                "partyid_contact",
                f"Contact party not found for comment {record_id}.",
                "The comment must have a contact party with participationtypemask=2.",
            )

        contact = to_party["partyid_contact"]
        to_contact_id = contact.get("contactid")
        if not to_contact_id:
            raise MappingError(
                record_id,
                "contactid",
                f"Contact ID not found in party data for comment {record_id}.",
                "Ensure $expand includes partyid_contact.",
            )

        from_staff_name = record.get(CREATED_BY_NAME_KEY)
        if not from_staff_name:
            raise MappingError(
                record_id,
                CREATED_BY_NAME_KEY,
                f"Staff name not found for comment {record_id}.",
                "Ensure formatted values are included.",
            )

        to_contact = contact.get("fullname")
        if not to_contact:
            raise MappingError(
                record_id,
                "fullname",
                f"Contact name not found in party data for comment {record_id}.",
                "Ensure $expand selects fullname on partyid_contact.",
            )

        date = _require_date(
            record.get("createdon"), record_id, "createdon", "Ensure $select includes createdon."
        )
        has_read_value = record.get(self._config.field_name("hasread"))
        return Message(
            id=str(record_id),
            sender=from_staff_name,
            subject=record.get("subject") or NO_SUBJECT,
            body=record.get("description") or "",
            date=date,
            read=False,
            category=CATEGORY_PORTAL_COMMENT,
            regarding_object_id=record.get("_regardingobjectid_value"),
            to_contact=to_contact,
            to_contact_id=str(to_contact_id),
            from_staff_id=str(from_staff_id),
            direction_code=record.get("adx_portalcommentdirectioncode"),
            statecode=record.get("statecode"),
            statuscode=record.get("statuscode"),
            has_read_value=has_read_value,
        )


def is_legacy_record(record: dict[str, Any]) -> bool:
    return bool(record.get("from")) and bool(record.get("body")) and not record.get("activityid")


def parse_iso_datetime(value: Any) -> datetime | None:
    """Summary: Parse ISO 8601 strings into timezone-aware datetimes.

    Importance: Read-state comparisons need every timestamp on the same UTC clock.
    Alternatives: Compare raw timestamp strings.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_date(value: Any, record_id: str | None, field: str, remedy: str) -> datetime:
    parsed = parse_iso_datetime(value)
    if parsed is None:
        raise MappingError(
            record_id, field, f"Valid {field} not found for record {record_id}.", remedy
        )
    return parsed
