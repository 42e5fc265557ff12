"""
Time helpers.

All detectors funnel their time values through `normalize_time`, which turns
the many ways people write a clock time into 'HH:MM'. It is deliberately
forgiving: anything it cannot make sense of is returned as-is and left for
the validator to reject.

Note: there is no AM/PM handling. '2:30 PM' becomes '02:30'.
"""

from __future__ import annotations

import re
from typing import Any, Tuple


STRICT_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$", re.ASCII)
_LOOSE_TIME_RE = re.compile(r"(\d{1,2})\D?(\d{2})?", re.ASCII)


def normalize_time(raw: Any) -> str:
    """
    Coerce a time value into 'HH:MM'.

    - None / '' -> ''
    - strict 'HH:MM' -> unchanged
    - '9.30', '8:30 AM', '9' -> '09:30', '08:30', '09:00'
    - no digits at all -> the trimmed input
    """
    if raw is None or raw == "":
        return ""

    text = str(raw).strip()
    if STRICT_TIME_RE.match(text):
        return text

    m = _LOOSE_TIME_RE.search(text)
    if not m:
        return text

    hours = m.group(1).zfill(2)
    minutes = m.group(2) or "00"
    return f"{hours}:{minutes}"


def is_valid_time(value: Any) -> bool:
    return isinstance(value, str) and STRICT_TIME_RE.match(value) is not None


def time_to_minutes(hhmm: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.
    Raises ValueError for invalid formats.
    """
    if not is_valid_time(hhmm):
        raise ValueError(f"Invalid time format: {hhmm!r}")
    h, m = hhmm.split(":")
    return int(h) * 60 + int(m)


def minutes_to_time(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def add_minutes(hhmm: str, minutes: int) -> str:
    """
    Add `minutes` to an 'HH:MM' value, wrapping at midnight.
    Returns '' when `hhmm` is not a strict time.
    """
    try:
        start = time_to_minutes(hhmm)
    except ValueError:
        return ""
    return minutes_to_time(start + minutes)


def sort_key(raw: str) -> Tuple[int, int, str]:
    """
    Sort key for time-slot keys: chronological after normalization,
    raw string as tie-breaker. Keys that are not times go last.
    """
    normalized = normalize_time(raw)
    try:
        return (0, time_to_minutes(normalized), str(raw))
    except ValueError:
        return (1, 0, str(raw))
