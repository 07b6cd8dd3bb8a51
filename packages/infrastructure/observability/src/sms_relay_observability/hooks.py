"""Connect observability to the pipeline's instrumentation hooks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from sms_relay_core.instrumentation import HookRegistry, get_hook_registry

from .structured_logging import StructuredLoggingHook

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from sms_relay_core.instrumentation import HookRegistration

logger = logging.getLogger("sms_relay.observability")

# Public pipeline operations plus the bus consumer boundary; store calls are
# left out by default because every send does at least one load.
DEFAULT_TRACE_OPERATIONS: list[str] = [
    "message.*",
    "consumer.consume.*",
]


class ObservabilityInstrumentationHook:
    """Implements the InstrumentationHook protocol with OpenTelemetry spans.

    Falls through to the wrapped operation when ``opentelemetry-api`` is not
    installed.
    """

    def __init__(self, tracer_name: str = "sms-relay") -> None:
        self._tracer_name = tracer_name

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        try:
            trace_api = cast(
                "Any", __import__("opentelemetry.trace", fromlist=["trace"])
            )
        except ImportError:
            return await next_handler()

        tracer = trace_api.get_tracer(self._tracer_name)
        with tracer.start_as_current_span(operation) as span:
            for key, value in attributes.items():
                if value is not None:
                    span.set_attribute(key, str(value))
            try:
                result = await next_handler()
            except Exception as exc:
                span.set_attribute("outcome", "error")
                span.set_attribute(
                    "error.retriable", bool(getattr(exc, "retriable", False))
                )
                span.record_exception(exc)
                raise
            span.set_attribute("outcome", "success")
            return result


def install_observability_hooks(
    *,
    registry: HookRegistry | None = None,
    operations: list[str] | None = None,
    tracing: bool = True,
    structured_logging: bool = True,
    priority: int = -100,
) -> list[HookRegistration]:
    """Register the tracing and structured-logging hooks.

    Tracing wraps outermost so the logged duration sits inside the span.
    """
    registry = registry or get_hook_registry()
    ops = operations or DEFAULT_TRACE_OPERATIONS
    registrations: list[HookRegistration] = []
    if tracing:
        registrations.append(
            registry.register(
                ObservabilityInstrumentationHook(), priority=priority, operations=ops
            )
        )
    if structured_logging:
        registrations.append(
            registry.register(
                StructuredLoggingHook(), priority=priority + 1, operations=ops
            )
        )
    logger.info("Observability hooks installed for %s", ops)
    return registrations
