"""
Standard span attributes for arewethere.

Attribute keys shared by every component so spans can be filtered
consistently. HTTP keys follow OpenTelemetry semantic conventions.
"""

# =============================================================================
# History Attributes
# =============================================================================

ATTR_HISTORY_KEY = "arewethere.history.key"
"""Key under which the history is persisted (string)."""

ATTR_HISTORY_LENGTH = "arewethere.history.length"
"""Number of observations retained after the operation (integer)."""

ATTR_HISTORY_CHANGED = "arewethere.history.changed"
"""Whether the operation mutated the history (boolean)."""

ATTR_HISTORY_RESET = "arewethere.history.reset"
"""Whether the observation started a new migration run (boolean)."""

ATTR_PERCENT = "arewethere.progress.percent"
"""Observed completion percentage (float)."""

# =============================================================================
# Store Attributes
# =============================================================================

ATTR_STORE_KEY = "arewethere.store.key"
"""Key being read or written in the key-value store (string)."""

ATTR_DB_SYSTEM = "db.system"
"""Database system identifier, e.g. 'sqlite' (OTEL semantic convention)."""

ATTR_DB_NAME = "db.name"
"""Database name or path (OTEL semantic convention)."""

# =============================================================================
# HTTP Attributes
# =============================================================================

ATTR_HTTP_METHOD = "http.request.method"
"""HTTP request method (OTEL semantic convention)."""

ATTR_HTTP_URL = "url.full"
"""Full request URL (OTEL semantic convention)."""

ATTR_HTTP_STATUS_CODE = "http.response.status_code"
"""HTTP response status code (OTEL semantic convention)."""


__all__ = [
    "ATTR_HISTORY_KEY",
    "ATTR_HISTORY_LENGTH",
    "ATTR_HISTORY_CHANGED",
    "ATTR_HISTORY_RESET",
    "ATTR_PERCENT",
    "ATTR_STORE_KEY",
    "ATTR_DB_SYSTEM",
    "ATTR_DB_NAME",
    "ATTR_HTTP_METHOD",
    "ATTR_HTTP_URL",
    "ATTR_HTTP_STATUS_CODE",
]
