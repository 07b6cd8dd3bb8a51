"""Message — the record owned by the message store."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..primitives.exceptions import InvalidStatusTransitionError


class MessageType(str, Enum):
    """Direction of travel relative to the gateway handset."""

    MOBILE_ORIGINATED = "mobile-originated"
    MOBILE_TERMINATED = "mobile-terminated"


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    DELIVERED = "delivered"
    EXPIRED = "expired"


# Forward-only lifecycle; anything not listed here is a regression.
_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.PENDING: frozenset(
        {
            MessageStatus.SENDING,
            MessageStatus.SENT,
            MessageStatus.FAILED,
            MessageStatus.EXPIRED,
        }
    ),
    MessageStatus.SENDING: frozenset(
        {MessageStatus.SENT, MessageStatus.FAILED, MessageStatus.EXPIRED}
    ),
    MessageStatus.SENT: frozenset({MessageStatus.DELIVERED, MessageStatus.EXPIRED}),
    MessageStatus.FAILED: frozenset({MessageStatus.EXPIRED}),
    MessageStatus.DELIVERED: frozenset(),
    MessageStatus.EXPIRED: frozenset(),
}

_IMMUTABLE_FIELDS = (
    "id",
    "from_",
    "to",
    "content",
    "type",
    "request_received_at",
    "order_timestamp",
)


class Message(BaseModel):
    """A text message travelling through the relay.

    Identity, endpoints, content, direction and ordering timestamps are frozen
    at creation. ``status`` only moves forward through the ``mark_*`` methods,
    each of which refreshes ``updated_at``.

    Usage::

        message = Message(
            id="a1", from_="+1000", to="+2000", content="hi",
            type=MessageType.MOBILE_TERMINATED,
            request_received_at=t0, order_timestamp=t0,
            created_at=t0, updated_at=t0,
        )
        message.mark_sent(t1)
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    id: str = Field(frozen=True)
    from_: str = Field(alias="from", frozen=True)
    to: str = Field(frozen=True)
    content: str = Field(frozen=True)
    type: MessageType = Field(frozen=True)
    status: MessageStatus = MessageStatus.PENDING
    request_received_at: datetime = Field(frozen=True)
    order_timestamp: datetime = Field(frozen=True)
    created_at: datetime = Field(frozen=True)
    updated_at: datetime
    send_duration: timedelta | None = None
    last_attempted_at: datetime | None = None
    sent_at: datetime | None = None
    received_at: datetime | None = None
    version: int = Field(default=0, description="Managed by the message store")

    def can_transition_to(self, status: MessageStatus) -> bool:
        return status in _TRANSITIONS[self.status]

    def _transition(self, status: MessageStatus, at: datetime) -> bool:
        """Apply a forward transition.

        Returns False when the message is already in *status* so redelivered
        events are harmless.
        """
        if status == self.status:
            return False
        if not self.can_transition_to(status):
            raise InvalidStatusTransitionError(
                self.id, self.status.value, status.value
            )
        self.status = status
        self.updated_at = at
        return True

    def mark_sending(self, at: datetime) -> bool:
        changed = self._transition(MessageStatus.SENDING, at)
        if changed:
            self.last_attempted_at = at
        return changed

    def mark_sent(self, at: datetime) -> bool:
        changed = self._transition(MessageStatus.SENT, at)
        if changed:
            self.sent_at = at
            self.last_attempted_at = self.last_attempted_at or at
            self.send_duration = at - self.request_received_at
        return changed

    def mark_failed(self, at: datetime) -> bool:
        changed = self._transition(MessageStatus.FAILED, at)
        if changed:
            self.last_attempted_at = self.last_attempted_at or at
        return changed

    def mark_delivered(self, at: datetime) -> bool:
        changed = self._transition(MessageStatus.DELIVERED, at)
        if changed:
            self.received_at = at
        return changed

    def mark_expired(self, at: datetime) -> bool:
        return self._transition(MessageStatus.EXPIRED, at)

    def same_content_as(self, other: Message) -> bool:
        """True when both records agree on every creation-time field."""
        return all(
            getattr(self, name) == getattr(other, name) for name in _IMMUTABLE_FIELDS
        )
