"""Summary: Error taxonomy for the portal inbox engine.

Importance: Lets hosts tell configuration mistakes apart from transient remote failures.
Alternatives: Raise RuntimeError everywhere and parse messages.
"""

from __future__ import annotations

from typing import Any


class InboxError(Exception):
    """Summary: Base class for inbox engine errors.

    Importance: Gives every error a machine-readable code alongside the message.
    Alternatives: Use bare exception classes without metadata.
    """

    def __init__(self, code: str, message: str, **extra: Any) -> None:
        self.code = code
        self.message = message
        self.extra = extra
        super().__init__(message)


class SourceUnavailable(InboxError):
    """Fetch, transport, or payload parse failure while loading records."""

    def __init__(self, message: str) -> None:
        super().__init__("SOURCE_UNAVAILABLE", message)


class AuthUnavailable(InboxError):
    """No request verification token could be obtained."""

    def __init__(self, message: str = "Authentication token not available") -> None:
        super().__init__("AUTH_UNAVAILABLE", message)


class RemoteError(InboxError):
    """Summary: Non-success response from the portal Web API.

    Importance: Carries status and body so callers can log or display them.
    Alternatives: Return response objects to callers.
    """

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(
            "REMOTE_ERROR", f"HTTP error! status: {status}, message: {body}", status=status
        )


class OperationDisabled(InboxError):
    """The requested Web API operation is not enabled in configuration."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(
            "OPERATION_DISABLED",
            f"{operation.capitalize()} operations are not enabled",
            operation=operation,
        )


class MappingError(InboxError):
    """Summary: A raw record lacks a field the canonical message requires.

    Importance: Points at the query parameter that must be added instead of defaulting.
    Alternatives: Substitute placeholders and render incomplete messages.
    """

    def __init__(self, record_id: str | None, field: str, message: str, remedy: str) -> None:
        self.record_id = record_id
        self.field = field
        self.remedy = remedy
        super().__init__(
            "MAPPING_ERROR", f"{message} {remedy}".strip(), record_id=record_id, field=field
        )


class ComposeError(InboxError):
    """Summary: The message being replied to is missing a required identity.

    Importance: Prevents sending a reply bound to the wrong or no party.
    Alternatives: Send the reply without parties and let the server reject it.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__("COMPOSE_ERROR", message, field=field)
