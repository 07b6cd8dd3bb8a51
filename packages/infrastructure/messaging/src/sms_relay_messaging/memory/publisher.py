"""InMemoryEventPublisher — IEventPublisher with assertion helpers for tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sms_relay_core.ports.messaging import IEventPublisher

from .bus import InMemoryEventBus

if TYPE_CHECKING:
    from sms_relay_core.envelope import EventEnvelope


class InMemoryEventPublisher(IEventPublisher):
    """In-memory publisher on top of an ``InMemoryEventBus``.

    Pass a shared bus to connect with ``InMemoryEventConsumer`` so that
    ``dispatch()`` triggers subscribed handlers.
    """

    def __init__(self, bus: InMemoryEventBus | None = None) -> None:
        """If bus is None, a new bus is created (no consumer connection)."""
        self._bus = bus or InMemoryEventBus()

    async def dispatch(self, envelope: EventEnvelope) -> None:
        await self._bus.publish(envelope)

    def get_published(self) -> list[EventEnvelope]:
        return self._bus.get_published()

    def assert_published(self, event_type: str, count: int = 1) -> None:
        """Assert that exactly `count` envelopes with this type were published."""
        published = self.get_published()
        matching = [e for e in published if e.type == event_type]
        assert len(matching) == count, (
            f"Expected {count} event(s) with type={event_type!r}, "
            f"got {len(matching)}. Published: {[e.type for e in published]}"
        )

    @property
    def bus(self) -> InMemoryEventBus:
        """Return the bus (e.g. to pass to InMemoryEventConsumer)."""
        return self._bus
