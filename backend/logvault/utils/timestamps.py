# logvault/utils/timestamps.py
"""
Timestamp normalization helpers.

Log entries store time as whole seconds since the Unix epoch. Writers may send:
- an integer (already epoch seconds)
- a float (fractional seconds are truncated)
- an ISO 8601 string; naive values are treated as UTC

Booleans are rejected even though Python treats them as ints.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from dateutil import parser as dtparser

# SQLite INTEGER is a signed 64-bit value
SQLITE_MIN_INT = -(2**63)
SQLITE_MAX_INT = 2**63 - 1


def now_epoch_seconds() -> int:
    return int(time.time())


def _datetime_to_epoch_seconds(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp())


def to_epoch_seconds(value: Any) -> int:
    """
    Normalize a timestamp value to integer epoch seconds.

    Raises:
        ValueError: if the value is not a number or a parseable ISO 8601 string,
            or falls outside the signed 64-bit range.
    """
    seconds = _coerce_epoch_seconds(value)
    if not SQLITE_MIN_INT <= seconds <= SQLITE_MAX_INT:
        raise ValueError("timestamp is out of range")
    return seconds


def _coerce_epoch_seconds(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("timestamp must be epoch seconds or an ISO 8601 string")

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise ValueError("timestamp must be a finite number")
        return int(value)

    if isinstance(value, datetime):
        return _datetime_to_epoch_seconds(value)

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValueError("timestamp must not be an empty string")
        # Numeric strings are common from shell-based shippers
        if raw.lstrip("-").isdigit():
            return int(raw)
        try:
            dt = dtparser.isoparse(raw)
        except (ValueError, OverflowError) as e:
            raise ValueError(f"unparseable timestamp {value!r}") from e
        return _datetime_to_epoch_seconds(dt)

    raise ValueError("timestamp must be epoch seconds or an ISO 8601 string")
