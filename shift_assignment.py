"""
Assign each work order to the shift that ran it.

A work order belongs to the shift whose hours overlap its production
interval the most. Both intervals live on a 24h clock and either may
wrap past midnight (end < start), e.g. Nights 22:00-06:00.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from press_models import Interval, ShiftRecord
from press_times import time_to_minutes
from shared import MINUTES_PER_DAY


@dataclass(frozen=True)
class ShiftAssignment:
    shift: Optional[ShiftRecord]
    overlap_minutes: int = 0


def _linear_overlap(start1, end1, start2, end2):
    return max(0, min(end1, end2) - max(start1, start2))


def interval_overlap(start1: int, end1: int, start2: int, end2: int) -> int:
    """Overlap in minutes of two clock intervals given as minutes since midnight.

    One wrapping interval is split into [start, 1440) and [0, end) and the
    larger piece-overlap is kept; when both wrap, the late pieces and the
    early pieces are compared pairwise and summed.
    """
    wraps1 = end1 < start1
    wraps2 = end2 < start2

    if not wraps1 and not wraps2:
        return _linear_overlap(start1, end1, start2, end2)

    if wraps1 and wraps2:
        late = _linear_overlap(start1, MINUTES_PER_DAY, start2, MINUTES_PER_DAY)
        early = _linear_overlap(0, end1, 0, end2)
        return late + early

    if wraps1:
        ws, we, ns, ne = start1, end1, start2, end2
    else:
        ws, we, ns, ne = start2, end2, start1, end1
    return max(
        _linear_overlap(ws, MINUTES_PER_DAY, ns, ne),
        _linear_overlap(0, we, ns, ne),
    )


def overlap_minutes(a: Interval, b: Interval) -> Optional[int]:
    """Overlap of two "HH:MM" intervals, or None if any time is missing."""
    times = [time_to_minutes(t) for t in (a.start, a.end, b.start, b.end)]
    if any(t is None for t in times):
        return None
    return interval_overlap(*times)


def assign_shift(production: Interval, shifts: Sequence[ShiftRecord]) -> ShiftAssignment:
    """Shift with the greatest positive overlap; ties go to the earliest shift.

    No assignment when any production or shift time is missing.
    """
    best = None
    best_overlap = 0
    for shift in shifts:
        overlap = overlap_minutes(production, Interval(shift.start_time, shift.end_time))
        if overlap is None:
            return ShiftAssignment(shift=None)
        if overlap > best_overlap:
            best = shift
            best_overlap = overlap
    return ShiftAssignment(shift=best, overlap_minutes=best_overlap)
