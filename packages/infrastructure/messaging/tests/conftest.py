"""Fixtures for sms-relay-messaging tests: store, bus and wired service."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from sms_relay_core.adapters.memory import InMemoryMessageStore
from sms_relay_core.config import RelaySettings
from sms_relay_core.instrumentation import HookRegistry, set_hook_registry
from sms_relay_core.primitives.clock import FixedClock
from sms_relay_core.services.message_service import MessageService
from sms_relay_messaging import (
    IdempotencyFilter,
    InMemoryEventBus,
    InMemoryEventConsumer,
    InMemoryEventPublisher,
    MessageAPISentListener,
)


@pytest.fixture(autouse=True)
def hook_registry() -> HookRegistry:
    registry = HookRegistry()
    set_hook_registry(registry)
    return registry


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2022, 6, 5, 14, 26, 2, 302718, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> RelaySettings:
    return RelaySettings(
        read_back_timeout=1.0,
        read_back_max_attempts=200,
        read_back_base_delay=0.001,
        read_back_max_delay=0.01,
    )


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def publisher(bus: InMemoryEventBus) -> InMemoryEventPublisher:
    return InMemoryEventPublisher(bus)


@pytest.fixture
def service(
    store: InMemoryMessageStore,
    publisher: InMemoryEventPublisher,
    clock: FixedClock,
    settings: RelaySettings,
) -> MessageService:
    return MessageService(store, publisher, clock=clock, settings=settings)


@pytest.fixture
def idempotency() -> IdempotencyFilter:
    return IdempotencyFilter()


@pytest.fixture
async def listener(
    service: MessageService,
    bus: InMemoryEventBus,
    idempotency: IdempotencyFilter,
) -> MessageAPISentListener:
    listener = MessageAPISentListener(
        service, InMemoryEventConsumer(bus), idempotency=idempotency
    )
    await listener.start()
    return listener
