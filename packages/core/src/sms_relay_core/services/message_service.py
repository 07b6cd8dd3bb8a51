"""MessageService — send/store pipeline for text messages."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ..config import RelaySettings, get_settings
from ..domain.events import MessageAPISentPayload
from ..domain.message import Message, MessageStatus, MessageType
from ..envelope import EventEnvelopeBuilder
from ..instrumentation import current_logger, instrumented
from ..primitives.clock import IClock, SystemClock
from ..primitives.exceptions import (
    MessageNotFoundError,
    OperationTimeoutError,
    PublishError,
    ReadBackTimeoutError,
    RetryExhaustedError,
    SmsRelayError,
)
from ..primitives.id_generator import IIDGenerator, UUID4Generator

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..envelope import EventEnvelope
    from ..logging_utils import ContextLogger
    from ..ports.message_store import IMessageStore
    from ..ports.messaging import IEventPublisher


class MessageSendParams(BaseModel):
    """A request to send a message through the API."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    content: str
    request_received_at: datetime
    source: str | None = Field(
        default=None, description="Publishing actor; defaults to settings.event_source"
    )


class MessageStoreParams(BaseModel):
    """A message arriving from the consumer side with an explicit identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    from_: str = Field(alias="from")
    to: str
    content: str
    request_received_at: datetime


class MessageStatusParams(BaseModel):
    """A status report for an existing message."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime


class MessageService:
    """Coordinates envelope construction, bus publication and store read-back.

    Stateless apart from its injected collaborators, so one instance is safe
    to share between concurrent callers.

    Usage::

        service = MessageService(store, publisher, clock=clock, id_generator=ids)
        message = await service.send_message(
            MessageSendParams(from_="+1000", to="+2000", content="hi",
                              request_received_at=now),
            timeout=10,
        )
    """

    def __init__(
        self,
        store: IMessageStore,
        publisher: IEventPublisher,
        *,
        clock: IClock | None = None,
        id_generator: IIDGenerator | None = None,
        settings: RelaySettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or logging.getLogger("sms_relay.services.message")
        self._store = store
        self._publisher = publisher
        self._clock = clock or SystemClock()
        self._id_generator = id_generator or UUID4Generator()
        self._settings = settings or get_settings()
        self._envelopes = EventEnvelopeBuilder(self._clock, self._id_generator)
        self._read_back_policy = self._settings.read_back_policy()

    # ── Send path ────────────────────────────────────────────────

    @instrumented(
        "message.send",
        lambda params, **_: {"message.from": params.from_, "message.to": params.to},
    )
    async def send_message(
        self, params: MessageSendParams, *, timeout: float | None = None
    ) -> Message:
        """Publish a send intent and return the record the consumer persisted.

        A successful return means the bus accepted the event and the store
        holds a record with the generated id. It says nothing about the
        message having left the handset.

        Raises:
            EventSerializationError: the payload cannot be encoded.
            PublishError: the bus rejected the envelope; nothing was stored
                by this call and it is safe to retry.
            ReadBackTimeoutError: the record did not appear in time.
            OperationTimeoutError: *timeout* expired first.
        """
        payload = MessageAPISentPayload(
            id=self._id_generator.next_id(),
            from_=params.from_,
            to=params.to,
            request_received_at=params.request_received_at,
            content=params.content,
        )
        log = current_logger().bind(message_id=payload.id)
        log.info("creating cloud event for message with ID [%s]", payload.id)

        source = params.source or self._settings.event_source
        try:
            envelope = self._envelopes.message_api_sent(source, payload)
        except SmsRelayError as e:
            raise e.with_context(operation="message.send", message_id=payload.id)

        log = log.bind(event_id=envelope.id)
        log.info(
            "created event [%s] with id [%s] and message id [%s]",
            envelope.type,
            envelope.id,
            payload.id,
        )

        if timeout is None:
            return await self._publish_and_read_back(envelope, payload.id, log)
        try:
            return await asyncio.wait_for(
                self._publish_and_read_back(envelope, payload.id, log), timeout
            )
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(
                "message.send",
                timeout,
                message_id=payload.id,
                event_id=envelope.id,
            ) from e

    async def _publish_and_read_back(
        self, envelope: EventEnvelope, message_id: str, log: ContextLogger
    ) -> Message:
        try:
            await self._publisher.dispatch(envelope)
        except SmsRelayError as e:
            raise e.with_context(
                operation="message.send", message_id=message_id, event_id=envelope.id
            )
        except Exception as e:
            raise PublishError(
                f"cannot dispatch event type [{envelope.type}] and id [{envelope.id}]",
                operation="message.send",
                message_id=message_id,
                event_id=envelope.id,
            ) from e

        log.info("event [%s] dispatched successfully", envelope.id)

        message = await self._read_back(message_id, envelope.id, log)
        log.info("fetched message with id [%s] from the repository", message.id)
        return message

    async def _read_back(
        self, message_id: str, event_id: str, log: ContextLogger
    ) -> Message:
        """Load the record, tolerating the consumer not having written it yet."""

        async def load() -> Message:
            try:
                return await self._store.load(message_id)
            except MessageNotFoundError:
                log.debug("message [%s] not in the repository yet", message_id)
                raise

        try:
            return await self._read_back_policy.run(
                load, retry_on=MessageNotFoundError
            )
        except RetryExhaustedError as e:
            raise ReadBackTimeoutError(
                message_id,
                attempts=e.attempts,
                elapsed=e.elapsed,
                timeout=self._settings.read_back_timeout,
            ).with_context(operation="message.send", event_id=event_id) from (
                e.last_error or e
            )
        except SmsRelayError as e:
            raise e.with_context(
                operation="message.send", message_id=message_id, event_id=event_id
            )

    # ── Store path ───────────────────────────────────────────────

    @instrumented("message.store", lambda params, **_: {"message.id": params.id})
    async def store_message(self, params: MessageStoreParams) -> Message:
        """Create a mobile-terminated message directly in the store.

        Raises:
            ConflictError: the id exists with different content.
            StoreUnavailableError: the store could not be reached.
        """
        now = self._clock.now()
        message = Message(
            id=params.id,
            from_=params.from_,
            to=params.to,
            content=params.content,
            type=MessageType.MOBILE_TERMINATED,
            status=MessageStatus.PENDING,
            request_received_at=params.request_received_at,
            order_timestamp=params.request_received_at,
            created_at=now,
            updated_at=now,
        )

        try:
            stored = await self._store.save(message)
        except SmsRelayError as e:
            raise e.with_context(operation="message.store", message_id=params.id)

        current_logger().info("message saved with id [%s] in the repository", stored.id)
        return stored

    @instrumented("message.get", lambda message_id, **_: {"message.id": message_id})
    async def get_message(self, message_id: str) -> Message:
        try:
            return await self._store.load(message_id)
        except SmsRelayError as e:
            raise e.with_context(operation="message.get", message_id=message_id)

    # ── Status bookkeeping ───────────────────────────────────────

    @instrumented("message.sending", lambda params, **_: {"message.id": params.id})
    async def handle_message_sending(self, params: MessageStatusParams) -> Message:
        return await self._apply_status("message.sending", params, Message.mark_sending)

    @instrumented("message.sent", lambda params, **_: {"message.id": params.id})
    async def handle_message_sent(self, params: MessageStatusParams) -> Message:
        return await self._apply_status("message.sent", params, Message.mark_sent)

    @instrumented("message.failed", lambda params, **_: {"message.id": params.id})
    async def handle_message_failed(self, params: MessageStatusParams) -> Message:
        return await self._apply_status("message.failed", params, Message.mark_failed)

    async def _apply_status(
        self,
        operation: str,
        params: MessageStatusParams,
        transition: Callable[[Message, datetime], bool],
    ) -> Message:
        try:
            message = await self._store.load(params.id)
            if not transition(message, params.timestamp):
                current_logger().info(
                    "message [%s] already in status [%s]",
                    message.id,
                    message.status.value,
                )
                return message
            updated = await self._store.update(message)
        except SmsRelayError as e:
            raise e.with_context(operation=operation, message_id=params.id)

        current_logger().info(
            "message [%s] moved to status [%s]", updated.id, updated.status.value
        )
        return updated
