"""Shared fixtures for sms-relay-core tests."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timezone

import pytest

from sms_relay_core.adapters.memory import InMemoryMessageStore
from sms_relay_core.config import RelaySettings
from sms_relay_core.correlation import set_correlation_id
from sms_relay_core.domain.message import Message, MessageType
from sms_relay_core.envelope import EventEnvelope
from sms_relay_core.instrumentation import HookRegistry, set_hook_registry
from sms_relay_core.primitives.clock import FixedClock
from sms_relay_core.services.message_service import MessageService

T0 = datetime(2022, 6, 5, 14, 26, 2, 302718, tzinfo=timezone.utc)


class ScriptedIdGenerator:
    """Hands out the given ids first, then ``<prefix>-<n>``."""

    def __init__(self, ids: Iterable[str] = (), prefix: str = "id") -> None:
        self._ids = list(ids)
        self._prefix = prefix
        self._counter = 0

    def next_id(self) -> str:
        if self._ids:
            return self._ids.pop(0)
        self._counter += 1
        return f"{self._prefix}-{self._counter}"


class RecordingPublisher:
    """IEventPublisher fake: records envelopes, optionally fails or reacts."""

    def __init__(self) -> None:
        self.dispatched: list[EventEnvelope] = []
        self.error: Exception | None = None
        self.on_dispatch: Callable[[EventEnvelope], Awaitable[None]] | None = None

    async def dispatch(self, envelope: EventEnvelope) -> None:
        if self.error is not None:
            raise self.error
        self.dispatched.append(envelope)
        if self.on_dispatch is not None:
            await self.on_dispatch(envelope)


@pytest.fixture(autouse=True)
def hook_registry() -> HookRegistry:
    """Fresh hook registry per test."""
    registry = HookRegistry()
    set_hook_registry(registry)
    return registry


@pytest.fixture(autouse=True)
def _clear_correlation_id() -> None:
    set_correlation_id(None)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(T0)


@pytest.fixture
def ids() -> ScriptedIdGenerator:
    return ScriptedIdGenerator()


@pytest.fixture
def settings() -> RelaySettings:
    return RelaySettings(
        read_back_timeout=0.5,
        read_back_max_attempts=5,
        read_back_base_delay=0.001,
        read_back_max_delay=0.01,
    )


@pytest.fixture
def store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def make_message(clock: FixedClock) -> Callable[..., Message]:
    """Factory for mobile-terminated records stamped at the fixed clock."""

    def _make(message_id: str = "m-1", **overrides: object) -> Message:
        now = clock.now()
        fields: dict[str, object] = {
            "id": message_id,
            "from_": "+15550001",
            "to": "+15550002",
            "content": "hello",
            "type": MessageType.MOBILE_TERMINATED,
            "request_received_at": now,
            "order_timestamp": now,
            "created_at": now,
            "updated_at": now,
        }
        fields.update(overrides)
        return Message(**fields)

    return _make


@pytest.fixture
def make_service(
    store: InMemoryMessageStore,
    publisher: RecordingPublisher,
    clock: FixedClock,
    settings: RelaySettings,
) -> Callable[..., MessageService]:
    """Build a service with scripted ids and optional settings overrides."""

    def _make(
        ids: Iterable[str] = (), store_: object = None, **overrides: object
    ) -> MessageService:
        return MessageService(
            store if store_ is None else store_,  # type: ignore[arg-type]
            publisher,
            clock=clock,
            id_generator=ScriptedIdGenerator(ids),
            settings=settings.model_copy(update=overrides),
        )

    return _make


@pytest.fixture
def service(
    store: InMemoryMessageStore,
    publisher: RecordingPublisher,
    clock: FixedClock,
    ids: ScriptedIdGenerator,
    settings: RelaySettings,
) -> MessageService:
    return MessageService(
        store, publisher, clock=clock, id_generator=ids, settings=settings
    )
