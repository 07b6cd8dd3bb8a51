"""IMessageStore — keyed storage for message records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..domain.message import Message


@runtime_checkable
class IMessageStore(Protocol):
    """
    Durable keyed storage for ``Message`` records.

    Implementations must serialize concurrent writes for the same id so that
    at most one ``save`` wins and diverging writes are detected, never merged.

    Errors:
        ``save``: ``ConflictError`` when the id exists with different content,
        ``StoreUnavailableError`` on storage-layer failure. Saving an identical
        record twice is a no-op that returns the stored copy.
        ``load``: ``MessageNotFoundError`` when absent,
        ``StoreUnavailableError`` on storage-layer failure.
        ``update``: ``MessageNotFoundError`` when absent, ``ConflictError``
        when the caller's ``version`` is stale.
    """

    async def save(self, message: Message) -> Message: ...

    async def load(self, message_id: str) -> Message: ...

    async def update(self, message: Message) -> Message: ...
