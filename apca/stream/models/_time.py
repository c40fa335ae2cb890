"""Timestamp parsing shared by the wire models."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

# RFC 3339 with up to nanosecond precision, e.g. 2021-02-22T19:15:00.123456789Z
_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(value: Any) -> Any:
    """Convert RFC 3339 strings to aware UTC datetimes.

    Sub-microsecond digits are truncated since ``datetime`` cannot hold them.
    Non-string values are returned unchanged for pydantic to validate.
    """
    if not isinstance(value, str):
        return value
    text = _FRACTION.sub(r"\1", value.strip())
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)
