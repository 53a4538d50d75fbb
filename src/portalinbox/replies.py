"""Summary: Reply composition for portal comments.

Importance: Reverses sender and recipient so replies reach the staff member who wrote the original.
Alternatives: Let the portal infer parties from the regarding record.
"""

from __future__ import annotations

import logging

from portalinbox.config import InboxConfig
from portalinbox.errors import ComposeError
from portalinbox.models import (
    DIRECTION_FROM_CONTACT,
    PARTICIPATION_RECIPIENT,
    PARTICIPATION_SENDER,
    Message,
    ReplyParty,
    ReplyPayload,
)


logger = logging.getLogger(__name__)


class ReplyComposer:
    """Summary: Builds outgoing reply payloads from an existing message.

    Importance: Keeps reply construction pure so it can be tested without a network.
    Alternatives: Assemble the JSON body inside the Web API client.
    """

    def __init__(self, config: InboxConfig) -> None:
        self._config = config

    def compose(self, message: Message, reply_text: str) -> ReplyPayload:
        """Summary: Compose a reply to the given message.

        Importance: Fails loudly when an identity is missing rather than sending a misrouted reply.
        Alternatives: Fall back to default parties.
        """

        if not message.to_contact_id:
            raise ComposeError(
                "toContactId",
                "Contact ID not found in original message. "
                "API configuration error - check $expand parameter (partyid_contact).",
            )
        if not message.from_staff_id:
            raise ComposeError(
                "fromStaffId",
                "Staff ID not found in original message. "
                "API configuration error - check _createdby_value in $select.",
            )
        if not message.regarding_object_id:
            raise ComposeError(
                "regardingObjectId",
                "Regarding object ID not found in original message. "
                "API configuration error - check _regardingobjectid_value in $select.",
            )

        regarding = self._config.regarding_object()
        portal = self._config.portal_data_source
        contact_set = portal.contact_entity_set if portal else "contacts"
        staff_set = portal.staff_entity_set if portal else "systemusers"
        logger.debug(
            "Reply party info: from contact %s to staff %s",
            message.to_contact_id,
            message.from_staff_id,
        )
        return ReplyPayload(
            subject=f"Re: {message.subject}",
            description=reply_text,
            direction_code=DIRECTION_FROM_CONTACT,
            regarding_bind_key=f"{regarding.navigation_property}@odata.bind",
            regarding_bind_value=f"/{regarding.entity_set_name}({message.regarding_object_id})",
            parties=(
                ReplyParty(
                    participation_type=PARTICIPATION_SENDER,
                    bind_key="partyid_contact@odata.bind",
                    bind_value=f"/{contact_set}({message.to_contact_id})",
                ),
                ReplyParty(
                    participation_type=PARTICIPATION_RECIPIENT,
                    bind_key="partyid_systemuser@odata.bind",
                    bind_value=f"/{staff_set}({message.from_staff_id})",
                ),
            ),
        )
