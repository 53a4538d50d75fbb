"""Summary: Tests for reply composition.

Importance: Ensures replies reverse the original sender and recipient.
Alternatives: Inspect outgoing payloads manually in the browser.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from portalinbox.config import InboxConfig, PortalDataSourceConfig, RegardingObjectConfig
from portalinbox.errors import ComposeError
from portalinbox.models import Message
from portalinbox.replies import ReplyComposer


def _config() -> InboxConfig:
    return InboxConfig(
        publisher_prefix="msfed",
        portal_data_source=PortalDataSourceConfig(
            base_url="https://portal.example.com/_api",
            regarding_object=RegardingObjectConfig(entity_set_name="msfed_cases"),
        ),
    )


def _message() -> Message:
    return Message(
        id="act-1",
        sender="Program Support",
        subject="Document needed",
        body="Please upload.",
        date=datetime(2025, 11, 19, tzinfo=timezone.utc),
        category="portal-comment",
        regarding_object_id="app-1",
        to_contact="Jordan Lee",
        to_contact_id="contact-1",
        from_staff_id="staff-1",
        direction_code=2,
    )


def test_compose_reverses_parties() -> None:
    """Summary: Verify the reply sender is the original recipient and vice versa.

    Importance: Replies must reach the staff member who wrote the original.
    Alternatives: Copy parties from the original unchanged.
    """

    payload = ReplyComposer(_config()).compose(_message(), "Uploaded, thanks.")
    wire = payload.to_wire()
    assert wire["subject"] == "Re: Document needed"
    assert wire["description"] == "Uploaded, thanks."
    assert wire["adx_portalcommentdirectioncode"] == 1
    assert wire["regardingobjectid_msfed_application@odata.bind"] == "/msfed_cases(app-1)"
    assert wire["adx_portalcomment_activity_parties"] == [
        {"participationtypemask": 1, "partyid_contact@odata.bind": "/contacts(contact-1)"},
        {"participationtypemask": 2, "partyid_systemuser@odata.bind": "/systemusers(staff-1)"},
    ]


def test_compose_uses_configured_party_collections() -> None:
    config = InboxConfig(
        portal_data_source=PortalDataSourceConfig(
            base_url="https://portal.example.com/_api",
            contact_entity_set="portalcontacts",
            staff_entity_set="staffmembers",
        )
    )
    parties = ReplyComposer(config).compose(_message(), "ok").parties
    assert parties[0].bind_value == "/portalcontacts(contact-1)"
    assert parties[1].bind_value == "/staffmembers(staff-1)"


@pytest.mark.parametrize(
    ("field", "hint"),
    [
        ("from_staff_id", "_createdby_value"),
        ("to_contact_id", "$expand"),
        ("regarding_object_id", "_regardingobjectid_value"),
    ],
)
def test_compose_fails_on_missing_identity(field: str, hint: str) -> None:
    """Summary: Verify a missing identity raises instead of returning a partial payload.

    Importance: A reply without both parties would be misrouted.
    Alternatives: Let the Web API reject the request.
    """

    message = replace(_message(), **{field: None})
    with pytest.raises(ComposeError) as excinfo:
        ReplyComposer(_config()).compose(message, "text")
    assert hint in excinfo.value.message
