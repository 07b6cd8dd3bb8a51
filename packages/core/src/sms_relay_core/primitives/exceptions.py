"""Domain and infrastructure exceptions for sms-relay-core."""

from __future__ import annotations

from typing import Any


class SmsRelayError(Exception):
    """Root exception for the entire sms-relay pipeline.

    Carries a ``context`` mapping (operation, message id, event id, ...) that
    callers up the stack can enrich before re-raising. The concrete class is
    preserved so handlers can still catch ``ConflictError`` and friends.
    """

    retriable: bool = False

    def __init__(self, message: str = "", **context: Any) -> None:
        self.message = message
        self.context: dict[str, Any] = {
            key: value for key, value in context.items() if value is not None
        }
        super().__init__(message)

    def with_context(self, **context: Any) -> SmsRelayError:
        """Annotate the error in place and return it for ``raise``."""
        for key, value in context.items():
            if value is not None:
                self.context.setdefault(key, value)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} [{details}]"


class DomainError(SmsRelayError):
    """Base class for all domain-related errors."""


class NotFoundError(DomainError):
    """Raised when a resource is not found."""


class MessageNotFoundError(NotFoundError):
    """Raised when no message exists for the given id (yet).

    Ambiguous on the send path: the consumer may still be propagating the
    event, or the event may have been lost.
    """

    def __init__(self, message_id: str) -> None:
        self.message_id = message_id
        super().__init__(f"message with id={message_id!r} not found")


class InvariantViolationError(DomainError):
    """Raised when a domain invariant is violated."""


class InvalidStatusTransitionError(InvariantViolationError):
    """Raised when a message status would move backwards."""

    def __init__(self, message_id: str, current: str, target: str) -> None:
        self.message_id = message_id
        self.current = current
        self.target = target
        super().__init__(
            f"cannot move message from status [{current}] to [{target}]",
        )


class ConflictError(DomainError):
    """Raised when a write collides with an existing record.

    Either the identity already exists with divergent content, or an update
    was based on a stale version. Signals a bug or a replay; never retriable.
    """

    def __init__(self, message_id: str, reason: str = "divergent content") -> None:
        self.message_id = message_id
        self.reason = reason
        super().__init__(
            f"conflicting write for message id={message_id!r} ({reason})",
        )


class InfrastructureError(SmsRelayError):
    """Base class for all infrastructure-related errors."""


class StoreUnavailableError(InfrastructureError):
    """Raised on a transient storage-layer failure."""

    retriable = True


class PublishError(InfrastructureError):
    """Raised when the event bus rejects an envelope or cannot confirm it.

    Retriable with the same identity: no store write has happened yet.
    """

    retriable = True


class EventSerializationError(InfrastructureError):
    """Raised when a payload or envelope cannot be encoded or decoded."""


class RetryExhaustedError(InfrastructureError):
    """Raised by ``RetryPolicy.run`` when its attempts or its deadline run out.

    ``last_error`` is the final retried failure, or None when the deadline
    cut the first attempt short.
    """

    retriable = True

    def __init__(
        self, attempts: int, elapsed: float, last_error: Exception | None = None
    ) -> None:
        self.attempts = attempts
        self.elapsed = elapsed
        self.last_error = last_error
        super().__init__(
            f"gave up after {attempts} attempt(s) in {elapsed:.3f}s",
        )


class OperationTimeoutError(InfrastructureError):
    """Raised when a caller-supplied deadline expires mid-operation."""

    retriable = True

    def __init__(self, operation: str, timeout: float, **context: Any) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(self._describe(), **context)

    def _describe(self) -> str:
        return f"{self.operation} did not finish within {self.timeout}s"


class ReadBackTimeoutError(OperationTimeoutError):
    """Raised when a published message could not be read back from the store.

    Read-back stops at whichever comes first, ``attempts`` reaching the
    configured limit or ``elapsed`` reaching ``timeout``.
    """

    def __init__(
        self, message_id: str, *, attempts: int, elapsed: float, timeout: float
    ) -> None:
        self.message_id = message_id
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__("read-back", timeout, message_id=message_id)

    def _describe(self) -> str:
        return (
            f"read-back gave up after {self.attempts} attempt(s) "
            f"in {self.elapsed:.3f}s (limit {self.timeout}s)"
        )
