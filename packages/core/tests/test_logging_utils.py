from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone

import pytest

from sms_relay_core.config import RelaySettings
from sms_relay_core.logging_utils import ContextLogger, JSONFormatter, configure_logging
from sms_relay_core.primitives.clock import FixedClock, SystemClock


def _record(logger_name: str = "sms_relay.test", **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        logger_name, logging.INFO, __file__, 1, "stored [%s]", ("m-1",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_logger_bind_merges() -> None:
    base = ContextLogger(logging.getLogger("sms_relay.test"), operation="message.send")

    bound = base.bind(message_id="m-1")

    assert bound.extra == {"operation": "message.send", "message_id": "m-1"}
    assert base.extra == {"operation": "message.send"}


def test_context_logger_puts_context_on_records(
    caplog: pytest.LogCaptureFixture,
) -> None:
    log = ContextLogger(logging.getLogger("sms_relay.test"), operation="message.send")

    with caplog.at_level(logging.INFO, logger="sms_relay.test"):
        log.bind(event_id="evt-1").info("dispatched")

    record = caplog.records[0]
    assert record.operation == "message.send"  # type: ignore[attr-defined]
    assert record.event_id == "evt-1"  # type: ignore[attr-defined]


def test_json_formatter_includes_context_fields() -> None:
    output = JSONFormatter().format(
        _record(operation="message.store", message_id="m-1", unrelated="x")
    )

    data = json.loads(output)
    assert data["message"] == "stored [m-1]"
    assert data["level"] == "INFO"
    assert data["operation"] == "message.store"
    assert data["message_id"] == "m-1"
    assert "unrelated" not in data
    assert "event_id" not in data


def test_configure_logging_is_idempotent() -> None:
    root = logging.getLogger("sms_relay")
    saved = list(root.handlers)
    saved_level = root.level
    root.handlers.clear()
    try:
        configure_logging(RelaySettings(log_json=True, log_level="debug"))
        configure_logging(RelaySettings())

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.INFO
    finally:
        root.handlers[:] = saved
        root.setLevel(saved_level)


def test_fixed_clock() -> None:
    clock = FixedClock(datetime(2022, 6, 5, 12, 0))

    assert clock.now().tzinfo is timezone.utc
    assert clock.advance(minutes=5) == datetime(2022, 6, 5, 12, 5, tzinfo=timezone.utc)
    assert clock.now() - datetime(2022, 6, 5, 12, tzinfo=timezone.utc) == timedelta(
        minutes=5
    )


def test_system_clock_is_utc() -> None:
    assert SystemClock().now().tzinfo is timezone.utc
