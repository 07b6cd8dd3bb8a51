from __future__ import annotations

import pytest

from sms_relay_core.primitives.exceptions import (
    ConflictError,
    DomainError,
    EventSerializationError,
    InfrastructureError,
    MessageNotFoundError,
    NotFoundError,
    OperationTimeoutError,
    PublishError,
    ReadBackTimeoutError,
    RetryExhaustedError,
    SmsRelayError,
    StoreUnavailableError,
)


@pytest.mark.parametrize(
    ("error", "retriable"),
    [
        (MessageNotFoundError("m-1"), False),
        (ConflictError("m-1"), False),
        (EventSerializationError("bad payload"), False),
        (StoreUnavailableError("down"), True),
        (PublishError("rejected"), True),
        (OperationTimeoutError("message.send", 1.0), True),
        (ReadBackTimeoutError("m-1", attempts=3, elapsed=5.0, timeout=5.0), True),
        (RetryExhaustedError(3, 0.5), True),
    ],
)
def test_retriable_flags(error: SmsRelayError, retriable: bool) -> None:
    assert error.retriable is retriable


def test_hierarchy() -> None:
    assert issubclass(MessageNotFoundError, NotFoundError)
    assert issubclass(NotFoundError, DomainError)
    assert issubclass(ConflictError, DomainError)
    assert issubclass(PublishError, InfrastructureError)
    assert issubclass(ReadBackTimeoutError, OperationTimeoutError)
    assert issubclass(InfrastructureError, SmsRelayError)


def test_with_context_annotates_in_place() -> None:
    error = PublishError("rejected", event_id="evt-1")

    returned = error.with_context(operation="message.send", event_id="other")

    assert returned is error
    assert error.context == {"event_id": "evt-1", "operation": "message.send"}


def test_none_context_is_dropped() -> None:
    error = StoreUnavailableError("down", message_id=None)
    error.with_context(operation=None)

    assert error.context == {}
    assert str(error) == "down"


def test_str_includes_context() -> None:
    error = MessageNotFoundError("m-1").with_context(operation="message.get")

    assert str(error) == "message with id='m-1' not found [operation=message.get]"


def test_conflict_reason() -> None:
    error = ConflictError("m-1", reason="stale version 1, current is 2")

    assert error.reason == "stale version 1, current is 2"
    assert "stale version" in str(error)


def test_read_back_timeout_details() -> None:
    error = ReadBackTimeoutError("m-1", attempts=3, elapsed=0.25, timeout=2.0)

    assert error.operation == "read-back"
    assert error.timeout == 2.0
    assert error.context == {"message_id": "m-1"}
    assert error.attempts == 3
    assert str(error) == (
        "read-back gave up after 3 attempt(s) in 0.250s (limit 2.0s) [message_id=m-1]"
    )


def test_retry_exhausted_keeps_last_error() -> None:
    cause = MessageNotFoundError("m-1")
    error = RetryExhaustedError(4, 1.5, cause)

    assert error.last_error is cause
    assert str(error) == "gave up after 4 attempt(s) in 1.500s"
