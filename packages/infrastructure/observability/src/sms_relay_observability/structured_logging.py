"""StructuredLoggingHook — one JSON log entry per instrumented operation."""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_log = logging.getLogger("sms_relay.observability.operations")


class StructuredLoggingHook:
    """Emits JSON entries with operation, outcome, duration and identities."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or _log

    async def __call__(
        self,
        operation: str,
        attributes: dict[str, Any],
        next_handler: Callable[[], Awaitable[Any]],
    ) -> Any:
        start = time.monotonic()
        outcome = "success"
        error: BaseException | None = None
        try:
            return await next_handler()
        except Exception as exc:
            outcome = "error"
            error = exc
            raise
        finally:
            entry: dict[str, Any] = {
                "operation": operation,
                "outcome": outcome,
                "duration_ms": round((time.monotonic() - start) * 1000, 2),
            }
            entry.update({k: v for k, v in attributes.items() if v is not None})
            if error is not None:
                entry["error"] = type(error).__name__
                entry["retriable"] = bool(getattr(error, "retriable", False))
            level = logging.WARNING if error is not None else logging.INFO
            self._log.log(level, json.dumps(entry, default=str))
