from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..envelope import EventEnvelope


@runtime_checkable
class IEventPublisher(Protocol):
    """
    Port for handing envelopes to the event bus (at-least-once).

    Infrastructure packages provide concrete adapters.
    """

    async def dispatch(self, envelope: EventEnvelope) -> None:
        """
        Publish *envelope*.

        Raises:
            PublishError: the transport rejected the envelope or could not
                confirm acceptance.
        """
        ...


@runtime_checkable
class IMessageConsumer(Protocol):
    """
    Port for subscribing to envelopes of a given event type.

    Consumers deduplicate on ``EventEnvelope.id`` themselves.
    """

    async def subscribe(
        self,
        event_type: str,
        handler: Callable[[EventEnvelope], Awaitable[None]],
    ) -> None:
        """Invoke *handler* for every envelope whose ``type`` is *event_type*."""
        ...
