"""In-memory event bus for tests and local wiring — connects publisher and consumer."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ..exceptions import BusUnavailableError
from ..serialization import CloudEventSerializer

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sms_relay_core.envelope import EventEnvelope

    Handler = Callable[[EventEnvelope], Awaitable[None]]

logger = logging.getLogger("sms_relay.messaging.memory")


class InMemoryEventBus:
    """Shared bus: publish records envelopes and delivers them to subscribers.

    Every envelope goes through the wire codec, so subscribers see exactly
    what a broker consumer would. Delivery is synchronous by default; with
    ``delivery_delay`` set it happens in a background task after the delay,
    which mimics a consumer that persists after ``publish`` has returned.

    A subscriber failure never fails ``publish``: the bus has accepted the
    envelope at that point. Failures are logged and kept in
    ``failed_deliveries``.
    """

    def __init__(
        self,
        *,
        delivery_delay: float | None = None,
        serializer: CloudEventSerializer | None = None,
    ) -> None:
        self._serializer = serializer or CloudEventSerializer()
        self._delivery_delay = delivery_delay
        self._published: list[EventEnvelope] = []
        self._handlers: dict[str, list[Handler]] = {}
        self._pending: set[asyncio.Task[None]] = set()
        self._available = True
        self._failures_remaining = 0
        self.failed_deliveries: list[tuple[EventEnvelope, Exception]] = []

    def register(self, event_type: str, handler: Handler) -> None:
        """Register a handler for an event type (``"*"`` matches all)."""
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    async def publish(self, envelope: EventEnvelope) -> None:
        """Accept the envelope, then deliver it to subscribers."""
        if not self._available or self._failures_remaining > 0:
            self._failures_remaining = max(0, self._failures_remaining - 1)
            raise BusUnavailableError(
                f"bus rejected event type [{envelope.type}] and id [{envelope.id}]",
                event_id=envelope.id,
            )

        delivered = self._serializer.deserialize(self._serializer.serialize(envelope))
        self._published.append(delivered)

        if self._delivery_delay is None:
            await self._deliver(delivered)
            return

        task = asyncio.get_running_loop().create_task(self._deliver_later(delivered))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def redeliver(self) -> None:
        """Deliver every published envelope again (at-least-once duplicates)."""
        for envelope in list(self._published):
            await self._deliver(envelope)

    async def drain(self) -> None:
        """Wait for all delayed deliveries to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def _deliver_later(self, envelope: EventEnvelope) -> None:
        await asyncio.sleep(self._delivery_delay or 0)
        await self._deliver(envelope)

    async def _deliver(self, envelope: EventEnvelope) -> None:
        handlers = self._handlers.get(envelope.type, []) + self._handlers.get("*", [])
        for handler in handlers:
            try:
                await handler(envelope)
            except Exception as exc:
                logger.exception(
                    "subscriber failed for event type [%s] and id [%s]",
                    envelope.type,
                    envelope.id,
                )
                self.failed_deliveries.append((envelope, exc))

    # ── Failure injection ────────────────────────────────────────

    def set_available(self, available: bool) -> None:
        self._available = available

    def fail_next(self, count: int = 1) -> None:
        """Reject the next *count* publishes."""
        self._failures_remaining = count

    # ── Assertions ───────────────────────────────────────────────

    def get_published(self) -> list[EventEnvelope]:
        """Return all published envelopes in order."""
        return list(self._published)

    def clear(self) -> None:
        """Clear published envelopes and handlers (for test teardown)."""
        self._published.clear()
        self._handlers.clear()
        self.failed_deliveries.clear()
