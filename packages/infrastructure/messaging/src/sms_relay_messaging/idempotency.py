"""IdempotencyFilter — deduplicate redelivered events by event id."""

from __future__ import annotations

import asyncio
from collections import OrderedDict


class IdempotencyFilter:
    """Deduplicate envelopes by ``EventEnvelope.id`` to prevent double-processing.

    The bus is at-least-once and the publisher never deduplicates, so every
    consumer that must not repeat side effects keeps one of these. Bounded:
    the oldest ids are forgotten once ``max_entries`` is exceeded.
    """

    def __init__(self, *, max_entries: int = 100_000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._seen: OrderedDict[str, None] = OrderedDict()
        self._lock = asyncio.Lock()

    async def is_duplicate(self, event_id: str) -> bool:
        """Return True if this event id has already been processed."""
        async with self._lock:
            return event_id in self._seen

    async def mark_processed(self, event_id: str) -> None:
        """Record that this event id has been processed."""
        async with self._lock:
            self._seen[event_id] = None
            self._seen.move_to_end(event_id)
            while len(self._seen) > self._max_entries:
                self._seen.popitem(last=False)

    def clear(self) -> None:
        self._seen.clear()

    def __len__(self) -> int:
        return len(self._seen)
