"""InMemoryMessageStore — dict-backed message store for tests and wiring."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from sms_relay_core.correlation import get_correlation_id
from sms_relay_core.instrumentation import get_hook_registry
from sms_relay_core.ports.message_store import IMessageStore
from sms_relay_core.primitives.exceptions import (
    ConflictError,
    MessageNotFoundError,
    StoreUnavailableError,
)

if TYPE_CHECKING:
    from sms_relay_core.domain.message import Message


class InMemoryMessageStore(IMessageStore):
    """In-memory implementation of ``IMessageStore``.

    Records are keyed by ``Message.id`` and guarded by one ``asyncio.Lock``,
    so concurrent saves for the same id are serialized. Callers always get
    copies back; mutating a loaded message does not touch the store.
    """

    def __init__(self) -> None:
        self._store: dict[str, Message] = {}
        self._lock = asyncio.Lock()
        self._available = True

    async def save(self, message: Message) -> Message:
        result: Message = await get_hook_registry().execute_all(
            "store.save",
            {
                "message.id": message.id,
                "correlation_id": get_correlation_id(),
            },
            lambda: self._save_internal(message),
        )
        return result

    async def load(self, message_id: str) -> Message:
        result: Message = await get_hook_registry().execute_all(
            "store.load",
            {"message.id": message_id, "correlation_id": get_correlation_id()},
            lambda: self._load_internal(message_id),
        )
        return result

    async def update(self, message: Message) -> Message:
        result: Message = await get_hook_registry().execute_all(
            "store.update",
            {
                "message.id": message.id,
                "message.status": message.status.value,
                "correlation_id": get_correlation_id(),
            },
            lambda: self._update_internal(message),
        )
        return result

    async def _save_internal(self, message: Message) -> Message:
        self._check_available()
        async with self._lock:
            existing = self._store.get(message.id)
            if existing is not None:
                if existing.same_content_as(message):
                    return existing.model_copy(deep=True)
                raise ConflictError(message.id)
            stored = message.model_copy(deep=True, update={"version": 1})
            self._store[message.id] = stored
            return stored.model_copy(deep=True)

    async def _load_internal(self, message_id: str) -> Message:
        self._check_available()
        async with self._lock:
            existing = self._store.get(message_id)
            if existing is None:
                raise MessageNotFoundError(message_id)
            return existing.model_copy(deep=True)

    async def _update_internal(self, message: Message) -> Message:
        self._check_available()
        async with self._lock:
            existing = self._store.get(message.id)
            if existing is None:
                raise MessageNotFoundError(message.id)
            if not existing.same_content_as(message):
                raise ConflictError(message.id)
            if existing.version != message.version:
                raise ConflictError(
                    message.id,
                    reason=(
                        f"stale version {message.version}, "
                        f"current is {existing.version}"
                    ),
                )
            stored = message.model_copy(
                deep=True, update={"version": existing.version + 1}
            )
            self._store[message.id] = stored
            return stored.model_copy(deep=True)

    def _check_available(self) -> None:
        if not self._available:
            raise StoreUnavailableError("message store is unavailable")

    # ── Test helpers ─────────────────────────────────────────────

    def set_available(self, available: bool) -> None:
        self._available = available

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._store
