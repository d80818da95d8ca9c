"""Shared utilities for the service layer."""

import json
from datetime import datetime
from typing import Any, Optional

# Decoded JSON object as returned by the backends.
JsonDict = dict[str, Any]


def load_json(raw: str | None) -> Optional[object]:
    """Parse a response body. Empty bodies give None; invalid JSON raises ValueError."""
    if not raw:
        return None
    return json.loads(raw)


def dump_json(obj: object) -> str:
    return json.dumps(obj, indent=2, default=str)


def parse_timestamp(value: str) -> Optional[datetime]:
    """ISO-8601 to datetime; None when the text is not a timestamp."""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
