"""In-memory messaging adapters for testing."""

from __future__ import annotations

from .bus import InMemoryEventBus
from .consumer import InMemoryEventConsumer
from .publisher import InMemoryEventPublisher

__all__ = [
    "InMemoryEventBus",
    "InMemoryEventConsumer",
    "InMemoryEventPublisher",
]
