"""Conversion of family-specific stored times to UTC epoch milliseconds."""

from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from decimal import Decimal

from history_clients.browser.models import FamilyGroup
from history_clients.exceptions import InvalidInputError

# Milliseconds from 1601-01-01 to 1970-01-01 (Chromium epoch).
CHROME_EPOCH_OFFSET_MS = 11_644_473_600_000
# Seconds from 1970-01-01 to 2001-01-01 (Apple absolute time).
APPLE_EPOCH_OFFSET = 978_307_200


def now_ms() -> int:
    """Current time as UTC epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_iso(utc_ms: int) -> str:
    """UTC ISO 8601 form of epoch milliseconds; empty when out of datetime range."""
    try:
        return datetime.fromtimestamp(utc_ms / 1000, tz=timezone.utc).isoformat()
    except (ValueError, OSError, OverflowError):
        return ""


def normalize(raw: int | float, group: FamilyGroup) -> int:
    """Convert a raw stored time value to UTC epoch milliseconds.

    Integers go through exact integer arithmetic, so zero, negative and very
    large values never wrap. Floats (WebKit stores REAL seconds) are taken at
    their shortest decimal repr before flooring to the millisecond.
    """
    value = _exact(raw)
    if group is FamilyGroup.CHROMIUM:
        return _floor_div(value, 1000) - CHROME_EPOCH_OFFSET_MS
    if group is FamilyGroup.MOZILLA:
        return _floor_div(value, 1000)
    if group in (FamilyGroup.WEBKIT, FamilyGroup.MAXTHON):
        return math.floor((value + APPLE_EPOCH_OFFSET) * 1000)
    raise ValueError(f"No stored time convention for {group}")


def raw_lower_bound(cutoff: int, group: FamilyGroup) -> int:
    """Raw value at or below every raw value that normalizes to ``cutoff`` or later.

    Used as a SQL prefilter. Exact for the microsecond groups; one second
    looser for the seconds-based groups, whose raw values may be REAL.
    The exact comparison always happens on the normalized value.
    """
    if group is FamilyGroup.CHROMIUM:
        return (cutoff + CHROME_EPOCH_OFFSET_MS) * 1000
    if group is FamilyGroup.MOZILLA:
        return cutoff * 1000
    if group in (FamilyGroup.WEBKIT, FamilyGroup.MAXTHON):
        return cutoff // 1000 - APPLE_EPOCH_OFFSET - 1
    raise ValueError(f"No stored time convention for {group}")


def cutoff_ms(window_minutes: int, now: int) -> int:
    """Lower bound (inclusive) of a recency window ending at ``now``."""
    validate_window(window_minutes)
    return now - window_minutes * 60_000


def validate_window(window_minutes) -> int:
    """Reject recency windows that are not non-negative integers."""
    if isinstance(window_minutes, bool) or not isinstance(window_minutes, int):
        raise InvalidInputError(
            f"Recency window must be an integer number of minutes, got {window_minutes!r}"
        )
    if window_minutes < 0:
        raise InvalidInputError(f"Recency window must not be negative, got {window_minutes}")
    return window_minutes


def _exact(raw) -> int | Decimal:
    if isinstance(raw, bool) or raw is None:
        raise ValueError(f"Not a timestamp: {raw!r}")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise ValueError(f"Not a timestamp: {raw!r}")
        if raw.is_integer():
            return int(raw)
        return Decimal(repr(raw))
    raise ValueError(f"Not a timestamp: {raw!r}")


def _floor_div(value: int | Decimal, divisor: int) -> int:
    if isinstance(value, int):
        return value // divisor
    return math.floor(value / divisor)
