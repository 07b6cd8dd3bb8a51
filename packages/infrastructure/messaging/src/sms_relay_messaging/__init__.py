"""Event transport adapters for the sms-relay pipeline — wire codec and in-memory bus."""

from __future__ import annotations

from .exceptions import BusUnavailableError, MessagingError
from .idempotency import IdempotencyFilter
from .listener import MessageAPISentListener
from .memory import InMemoryEventBus, InMemoryEventConsumer, InMemoryEventPublisher
from .serialization import CloudEventSerializer, format_rfc3339, parse_rfc3339

__all__ = [
    "BusUnavailableError",
    "CloudEventSerializer",
    "IdempotencyFilter",
    "InMemoryEventBus",
    "InMemoryEventConsumer",
    "InMemoryEventPublisher",
    "MessageAPISentListener",
    "MessagingError",
    "format_rfc3339",
    "parse_rfc3339",
]
