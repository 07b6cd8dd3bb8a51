"""Logging helpers — contextual adapter, JSON formatter, one-shot configuration."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from .config import RelaySettings

_CONTEXT_FIELDS = ("operation", "correlation_id", "message_id", "event_id")


class ContextLogger(logging.LoggerAdapter):  # type: ignore[type-arg]
    """Logger bound to an operation; context lands in ``record.__dict__``.

    ``bind`` returns a new adapter with extra fields, so identities can be
    attached as soon as they are known::

        log = ctx_logger.bind(message_id=payload.id)
        log.info("created event [%s]", envelope.id)
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)

    def bind(self, **context: Any) -> ContextLogger:
        merged = {**(self.extra or {}), **context}
        return ContextLogger(self.logger, **merged)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


class JSONFormatter(logging.Formatter):
    """One JSON object per record, including any bound context fields."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value
        if record.exc_info:
            log_data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def configure_logging(settings: RelaySettings) -> logging.Logger:
    """Attach a stdout handler to the ``sms_relay`` logger tree (idempotent)."""
    root = logging.getLogger("sms_relay")
    root.setLevel(settings.log_level.upper())
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.log_json:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
            )
        root.addHandler(handler)
    return root
