"""sms-relay-core — message ingestion and event dispatch pipeline.

Zero infrastructure dependencies. Pydantic for models and settings.
"""

from __future__ import annotations

# ── Adapters ────────────────────────────────────────────────────
from .adapters.memory import InMemoryMessageStore
from .config import RelaySettings, get_settings
from .correlation import (
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
    with_correlation_context,
)

# ── Domain ───────────────────────────────────────────────────────
from .domain import (
    EVENT_TYPE_MESSAGE_API_SENT,
    Message,
    MessageAPISentPayload,
    MessageStatus,
    MessageType,
)
from .envelope import EventEnvelope, EventEnvelopeBuilder

# ── Instrumentation ─────────────────────────────────────────────
from .instrumentation import (
    HookRegistration,
    HookRegistry,
    InstrumentationHook,
    current_logger,
    get_hook_registry,
    instrumented,
    set_hook_registry,
)
from .logging_utils import ContextLogger, JSONFormatter, configure_logging

# ── Ports ────────────────────────────────────────────────────────
from .ports import IEventPublisher, IMessageConsumer, IMessageStore

# ── Primitives ──────────────────────────────────────────────────
from .primitives import (
    ConflictError,
    DomainError,
    EventSerializationError,
    FixedClock,
    IClock,
    IIDGenerator,
    InfrastructureError,
    InvalidStatusTransitionError,
    InvariantViolationError,
    MessageNotFoundError,
    NotFoundError,
    OperationTimeoutError,
    PublishError,
    ReadBackTimeoutError,
    RetryExhaustedError,
    RetryPolicy,
    SmsRelayError,
    StoreUnavailableError,
    SystemClock,
    UUID4Generator,
)

# ── Services ────────────────────────────────────────────────────
from .services import (
    MessageSendParams,
    MessageService,
    MessageStatusParams,
    MessageStoreParams,
)

__all__: list[str] = [
    # Domain
    "EVENT_TYPE_MESSAGE_API_SENT",
    "EventEnvelope",
    "EventEnvelopeBuilder",
    "Message",
    "MessageAPISentPayload",
    "MessageStatus",
    "MessageType",
    # Services
    "MessageSendParams",
    "MessageService",
    "MessageStatusParams",
    "MessageStoreParams",
    # Ports
    "IEventPublisher",
    "IMessageConsumer",
    "IMessageStore",
    # Adapters
    "InMemoryMessageStore",
    # Config & logging
    "ContextLogger",
    "JSONFormatter",
    "RelaySettings",
    "configure_logging",
    "get_settings",
    # Correlation & instrumentation
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "with_correlation_context",
    "HookRegistration",
    "HookRegistry",
    "InstrumentationHook",
    "current_logger",
    "get_hook_registry",
    "instrumented",
    "set_hook_registry",
    # Primitives
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
