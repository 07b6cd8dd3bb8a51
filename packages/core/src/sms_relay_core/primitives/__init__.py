from .clock import FixedClock, IClock, SystemClock
from .exceptions import (
    ConflictError,
    DomainError,
    EventSerializationError,
    InfrastructureError,
    InvalidStatusTransitionError,
    InvariantViolationError,
    MessageNotFoundError,
    NotFoundError,
    OperationTimeoutError,
    PublishError,
    ReadBackTimeoutError,
    RetryExhaustedError,
    SmsRelayError,
    StoreUnavailableError,
)
from .id_generator import IIDGenerator, UUID4Generator
from .retry import RetryPolicy

__all__ = [
    "ConflictError",
    "DomainError",
    "EventSerializationError",
    "FixedClock",
    "IClock",
    "IIDGenerator",
    "InfrastructureError",
    "InvalidStatusTransitionError",
    "InvariantViolationError",
    "MessageNotFoundError",
    "NotFoundError",
    "OperationTimeoutError",
    "PublishError",
    "ReadBackTimeoutError",
    "RetryExhaustedError",
    "RetryPolicy",
    "SmsRelayError",
    "StoreUnavailableError",
    "SystemClock",
    "UUID4Generator",
]
