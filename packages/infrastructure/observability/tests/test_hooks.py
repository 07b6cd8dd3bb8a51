from __future__ import annotations

import logging
from datetime import datetime, timezone

import pytest

from sms_relay_core.adapters.memory import InMemoryMessageStore
from sms_relay_core.config import RelaySettings
from sms_relay_core.instrumentation import (
    HookRegistry,
    get_hook_registry,
    set_hook_registry,
)
from sms_relay_core.primitives.clock import FixedClock
from sms_relay_core.primitives.exceptions import ConflictError
from sms_relay_core.services.message_service import (
    MessageService,
    MessageStoreParams,
)
from sms_relay_observability.hooks import (
    DEFAULT_TRACE_OPERATIONS,
    ObservabilityInstrumentationHook,
    install_observability_hooks,
)
from sms_relay_observability.structured_logging import StructuredLoggingHook


@pytest.fixture
def registry() -> HookRegistry:
    local = HookRegistry()
    set_hook_registry(local)
    return local


@pytest.mark.asyncio
async def test_instrumentation_hook_calls_next_handler() -> None:
    hook = ObservabilityInstrumentationHook()
    called = False

    async def _next() -> str:
        nonlocal called
        called = True
        return "ok"

    result = await hook("message.send", {"message.id": "m-1", "skip": None}, _next)
    assert result == "ok"
    assert called


@pytest.mark.asyncio
async def test_instrumentation_hook_propagates_errors() -> None:
    hook = ObservabilityInstrumentationHook()

    async def _next() -> None:
        raise ConflictError("m-1")

    with pytest.raises(ConflictError):
        await hook("message.store", {}, _next)


def test_install_registers_tracing_and_logging(registry: HookRegistry) -> None:
    registrations = install_observability_hooks()

    assert len(registry) == 2
    assert isinstance(registrations[0].hook, ObservabilityInstrumentationHook)
    assert isinstance(registrations[1].hook, StructuredLoggingHook)
    assert registrations[0].priority < registrations[1].priority
    assert registrations[0].operations == DEFAULT_TRACE_OPERATIONS
    assert get_hook_registry() is registry


def test_install_respects_toggles(registry: HookRegistry) -> None:
    install_observability_hooks(
        registry=registry, operations=["store.*"], tracing=False
    )

    assert len(registry) == 1


@pytest.mark.asyncio
async def test_service_operations_are_logged(
    registry: HookRegistry, caplog: pytest.LogCaptureFixture
) -> None:
    install_observability_hooks(tracing=False)
    now = datetime(2022, 6, 5, 14, 26, 2, tzinfo=timezone.utc)
    service = MessageService(
        InMemoryMessageStore(),
        publisher=None,  # type: ignore[arg-type]
        clock=FixedClock(now),
        settings=RelaySettings(),
    )

    with caplog.at_level(logging.INFO, logger="sms_relay.observability.operations"):
        await service.store_message(
            MessageStoreParams(
                id="m-1",
                from_="+1000",
                to="+2000",
                content="hi",
                request_received_at=now,
            )
        )

    entries = [r.getMessage() for r in caplog.records if r.name.endswith("operations")]
    assert len(entries) == 1
    assert '"operation": "message.store"' in entries[0]
    assert '"message.id": "m-1"' in entries[0]
