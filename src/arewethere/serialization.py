"""
JSON serialization utilities for arewethere types.

Example:
    >>> from arewethere.serialization import json_dumps, json_loads
    >>> from datetime import UTC, datetime
    >>>
    >>> json_str = json_dumps({"timestamp": datetime.now(UTC)})
    >>> parsed = json_loads(json_str)
"""

import json
from datetime import datetime, timedelta
from typing import Any


class ArewethereJSONEncoder(json.JSONEncoder):
    """
    JSON encoder that handles datetime and timedelta objects.

    - datetime objects: Converted to ISO 8601 format string
    - timedelta objects: Converted to total seconds (float)
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, timedelta):
            return obj.total_seconds()
        return super().default(obj)


def json_dumps(obj: Any) -> str:
    """
    Serialize object to JSON string with datetime support.

    Args:
        obj: Object to serialize

    Returns:
        JSON string representation
    """
    return json.dumps(obj, cls=ArewethereJSONEncoder)


def json_loads(s: str) -> Any:
    """
    Deserialize JSON string to Python object.

    Note: datetime strings are NOT converted back automatically; that is
    the caller's responsibility.
    """
    return json.loads(s)


__all__ = [
    "ArewethereJSONEncoder",
    "json_dumps",
    "json_loads",
]
