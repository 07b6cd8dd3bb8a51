"""Correlation ID management — ties log lines and spans of one request together."""

from __future__ import annotations

import asyncio
import functools
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Get current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Set correlation ID in context."""
    _correlation_id.set(correlation_id)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def with_correlation_context(func: Any) -> Any:
    """Run an async function in its own task (and so its own context copy).

    A fresh correlation id is generated when none is set, so every
    top-level request gets one.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        async def _run() -> Any:
            if get_correlation_id() is None:
                set_correlation_id(generate_correlation_id())
            return await func(*args, **kwargs)

        return await asyncio.create_task(_run())

    return wrapper
