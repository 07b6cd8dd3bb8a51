"""Messaging-specific exceptions for sms-relay-messaging."""

from __future__ import annotations

from sms_relay_core.primitives.exceptions import InfrastructureError, PublishError


class MessagingError(InfrastructureError):
    """Base class for all messaging-related infrastructure errors."""


class BusUnavailableError(MessagingError, PublishError):
    """Raised when the transport rejects an envelope or cannot be reached."""

    retriable = True

    def __init__(self, message: str, event_id: str | None = None) -> None:
        self.event_id = event_id
        super().__init__(message, event_id=event_id)
