"""Observability for the sms-relay pipeline — OpenTelemetry spans and structured logs."""

from __future__ import annotations

from .hooks import (
    DEFAULT_TRACE_OPERATIONS,
    ObservabilityInstrumentationHook,
    install_observability_hooks,
)
from .structured_logging import StructuredLoggingHook

__all__ = [
    "DEFAULT_TRACE_OPERATIONS",
    "ObservabilityInstrumentationHook",
    "StructuredLoggingHook",
    "install_observability_hooks",
]
