"""
Time-of-day normalization for press exports.

Shift and work-order times arrive in several shapes depending on how the
sheet was filled in: real Excel datetimes, fraction-of-a-day serials
(0.25 == 06:00), or typed text like "6:00", "06:00:00" or a full
"2025-11-06 06:00:00" string. Everything is reduced to canonical
"HH:MM" or None.
"""

from __future__ import annotations

import math
import re
from typing import Optional

from press_grid import CellValue, DateTimeCell, NullCell, NumberCell, TextCell
from shared import MINUTES_PER_DAY

_TIME_TOKEN_RE = re.compile(r"(?<![\d:])(\d{1,2}):(\d{2})(?::(\d{2}))?(?![\d:])")
_CANONICAL_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def _fmt(hour, minute):
    return f"{hour:02d}:{minute:02d}"


def normalize_time(cell: CellValue) -> Optional[str]:
    """Convert one cell to "HH:MM", or None when it holds no usable time."""
    if isinstance(cell, DateTimeCell):
        # clock time as written, tz-aware or not
        ts = cell.value
        return _fmt(ts.hour, ts.minute)

    if isinstance(cell, NumberCell):
        v = cell.value
        if not (0 <= v < 1):
            return None
        # round first: 14:00 is stored as 0.58333.. and * 1440 lands a hair under 840
        minutes = math.floor(round(v * MINUTES_PER_DAY, 6))
        minutes = min(minutes, MINUTES_PER_DAY - 1)
        return _fmt(minutes // 60, minutes % 60)

    if isinstance(cell, TextCell):
        tokens = _TIME_TOKEN_RE.findall(cell.value)
        if len(tokens) != 1:
            return None
        hh, mm, _ss = tokens[0]
        hour, minute = int(hh), int(mm)
        if hour > 23 or minute > 59:
            return None
        return _fmt(hour, minute)

    if isinstance(cell, NullCell):
        return None
    raise TypeError(f"Unknown cell variant: {cell!r}")


def time_to_minutes(hhmm) -> Optional[int]:
    """Minutes since midnight for an "HH:MM" string."""
    if not hhmm or not isinstance(hhmm, str):
        return None
    m = _CANONICAL_RE.match(hhmm.strip())
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def minutes_between(start, end) -> Optional[int]:
    """Duration from start to end in minutes, wrapping past midnight."""
    s = time_to_minutes(start)
    e = time_to_minutes(end)
    if s is None or e is None:
        return None
    if e < s:
        return MINUTES_PER_DAY - s + e
    return e - s
