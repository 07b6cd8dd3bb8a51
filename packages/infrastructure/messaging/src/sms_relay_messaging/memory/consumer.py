"""InMemoryEventConsumer — IMessageConsumer registering handlers on a shared bus."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sms_relay_core.ports.messaging import IMessageConsumer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sms_relay_core.envelope import EventEnvelope

    from .bus import InMemoryEventBus


class InMemoryEventConsumer(IMessageConsumer):
    """Use the same ``InMemoryEventBus`` as ``InMemoryEventPublisher``."""

    def __init__(self, bus: InMemoryEventBus) -> None:
        self._bus = bus

    async def subscribe(
        self,
        event_type: str,
        handler: Callable[[EventEnvelope], Awaitable[None]],
    ) -> None:
        self._bus.register(event_type, handler)
