"""Instrumentation hooks — tracing/logging wrappers applied at operation boundaries."""

from __future__ import annotations

import fnmatch
import functools
import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, cast, runtime_checkable

from .correlation import get_correlation_id
from .logging_utils import ContextLogger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("sms_relay.instrumentation")

F = TypeVar("F", bound="Callable[..., Awaitable[Any]]")


@runtime_checkable
class InstrumentationHook(Protocol):
    """Protocol for instrumentation hooks (tracing, structured logs, ...)."""

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Wrap an operation with instrumentation."""
        ...


class HookRegistration:
    """One hook plus the rules deciding which operations it wraps.

    *operations* holds glob patterns (``"message.*"``); empty means all.
    """

    def __init__(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        operations: list[str] | None = None,
        enabled: bool = True,
    ) -> None:
        self.hook = hook
        self.priority = priority
        self.predicate = predicate
        self.operations = operations or []
        self.enabled = enabled

    def matches(self, operation: str, attributes: dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        if self.operations and not any(
            fnmatch.fnmatchcase(operation, pattern) for pattern in self.operations
        ):
            return False
        return self.predicate is None or self.predicate(operation, attributes)


class HookRegistry:
    """Ordered hooks wrapped around each instrumented operation."""

    def __init__(self) -> None:
        self._registrations: list[HookRegistration] = []

    def register(
        self,
        hook: InstrumentationHook,
        *,
        priority: int = 0,
        predicate: Callable[[str, dict[str, Any]], bool] | None = None,
        operations: list[str] | None = None,
        enabled: bool = True,
    ) -> HookRegistration:
        """Add *hook*; lower priority values wrap outermost."""
        registration = HookRegistration(
            hook,
            priority=priority,
            predicate=predicate,
            operations=operations,
            enabled=enabled,
        )
        self._registrations.append(registration)
        self._registrations.sort(key=lambda r: r.priority)
        return registration

    async def execute_all(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        """Run *next_handler* inside every hook that matches *operation*."""
        chain = next_handler
        for registration in reversed(self._registrations):
            if registration.matches(operation, attributes):
                chain = functools.partial(
                    registration.hook, operation, attributes, chain
                )
        return await chain()

    def __len__(self) -> int:
        return len(self._registrations)


_hook_registry_var: ContextVar[HookRegistry | None] = ContextVar(
    "hook_registry", default=None
)


def get_hook_registry() -> HookRegistry:
    """Get the hook registry for the current context.

    Creates a fresh ``HookRegistry`` on first access within each context,
    providing automatic test isolation without leaking state across async
    tasks or test boundaries.
    """
    registry = _hook_registry_var.get()
    if registry is None:
        registry = HookRegistry()
        _hook_registry_var.set(registry)
    return registry


def set_hook_registry(registry: HookRegistry) -> None:
    """Set a custom hook registry in the current context."""
    _hook_registry_var.set(registry)


_context_logger_var: ContextVar[ContextLogger | None] = ContextVar(
    "context_logger", default=None
)


def current_logger() -> ContextLogger:
    """Contextual logger of the innermost instrumented operation."""
    ctx_logger = _context_logger_var.get()
    if ctx_logger is None:
        return ContextLogger(logger, correlation_id=get_correlation_id())
    return ctx_logger


def instrumented(
    operation: str,
    attributes: Callable[..., dict[str, Any]] | None = None,
) -> Callable[[F], F]:
    """Decorate an async service method with hooks and a contextual logger.

    Spans, metrics and structured logs come from hooks registered on the
    current ``HookRegistry``; the method body reads its logger through
    ``current_logger()``. *attributes* maps the call arguments (without
    ``self``) to hook attributes.

    Usage::

        @instrumented("message.send", lambda params, **_: {"message.to": params.to})
        async def send_message(self, params): ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        async def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            correlation_id = get_correlation_id()
            attrs: dict[str, Any] = {"correlation_id": correlation_id}
            if attributes is not None:
                attrs.update(attributes(*args, **kwargs))
            ctx_logger = ContextLogger(
                getattr(self, "logger", logger),
                operation=operation,
                correlation_id=correlation_id,
            )
            token = _context_logger_var.set(ctx_logger)
            try:
                return await get_hook_registry().execute_all(
                    operation, attrs, lambda: func(self, *args, **kwargs)
                )
            finally:
                _context_logger_var.reset(token)

        return cast("F", wrapper)

    return decorator
