"""MessageAPISentListener — persists messages announced on the bus."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sms_relay_core.correlation import get_correlation_id
from sms_relay_core.domain.events import (
    EVENT_TYPE_MESSAGE_API_SENT,
    MessageAPISentPayload,
)
from sms_relay_core.instrumentation import get_hook_registry
from sms_relay_core.services.message_service import MessageStoreParams

from .idempotency import IdempotencyFilter

if TYPE_CHECKING:
    from sms_relay_core.envelope import EventEnvelope
    from sms_relay_core.ports.messaging import IMessageConsumer
    from sms_relay_core.services.message_service import MessageService

logger = logging.getLogger("sms_relay.messaging.listener")


class MessageAPISentListener:
    """Consumer side of the send path.

    Subscribes to ``message.api.sent``, skips event ids it has already
    handled, decodes the payload and stores the message under the identity
    the pipeline generated. Errors propagate to the transport so it can
    redeliver.

    Usage::

        listener = MessageAPISentListener(service, InMemoryEventConsumer(bus))
        await listener.start()
    """

    def __init__(
        self,
        service: MessageService,
        consumer: IMessageConsumer,
        *,
        idempotency: IdempotencyFilter | None = None,
    ) -> None:
        self._service = service
        self._consumer = consumer
        self._idempotency = idempotency or IdempotencyFilter()
        self._started = False

    async def start(self) -> None:
        if self._started:
            return
        await self._consumer.subscribe(EVENT_TYPE_MESSAGE_API_SENT, self.handle)
        self._started = True
        logger.info("listening for [%s] events", EVENT_TYPE_MESSAGE_API_SENT)

    async def handle(self, envelope: EventEnvelope) -> None:
        await get_hook_registry().execute_all(
            f"consumer.consume.{envelope.type}",
            {
                "event.type": envelope.type,
                "event.id": envelope.id,
                "event.source": envelope.source,
                "correlation_id": get_correlation_id(),
            },
            lambda: self._handle(envelope),
        )

    async def _handle(self, envelope: EventEnvelope) -> None:
        if await self._idempotency.is_duplicate(envelope.id):
            logger.info("skipping duplicate event [%s]", envelope.id)
            return

        payload = envelope.decode(MessageAPISentPayload)
        await self._service.store_message(
            MessageStoreParams(
                id=payload.id,
                from_=payload.from_,
                to=payload.to,
                content=payload.content,
                request_received_at=payload.request_received_at,
            )
        )
        await self._idempotency.mark_processed(envelope.id)
        logger.info("stored message [%s] from event [%s]", payload.id, envelope.id)
