"""
Observability utilities for arewethere.

Provides the composition-based tracer and standard span attribute keys.

Note:
    OpenTelemetry is an optional dependency. Everything in this module works
    without it; tracers simply become no-ops.
"""

from arewethere.observability.attributes import (
    ATTR_DB_NAME,
    ATTR_DB_SYSTEM,
    ATTR_HISTORY_CHANGED,
    ATTR_HISTORY_KEY,
    ATTR_HISTORY_LENGTH,
    ATTR_HISTORY_RESET,
    ATTR_HTTP_METHOD,
    ATTR_HTTP_STATUS_CODE,
    ATTR_HTTP_URL,
    ATTR_PERCENT,
    ATTR_STORE_KEY,
)
from arewethere.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanKindEnum,
    Tracer,
    create_tracer,
)
from arewethere.observability.tracing import OTEL_AVAILABLE, get_tracer

__all__ = [
    # Tracing
    "OTEL_AVAILABLE",
    "get_tracer",
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "SpanKindEnum",
    "create_tracer",
    # Attributes
    "ATTR_DB_NAME",
    "ATTR_DB_SYSTEM",
    "ATTR_HISTORY_CHANGED",
    "ATTR_HISTORY_KEY",
    "ATTR_HISTORY_LENGTH",
    "ATTR_HISTORY_RESET",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_STATUS_CODE",
    "ATTR_HTTP_URL",
    "ATTR_PERCENT",
    "ATTR_STORE_KEY",
]
