"""Typed records produced by the press report parser."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from press_times import minutes_between


class DiagnosticKind(str, Enum):
    NO_HEADER_FOUND = "no_header_found"
    NO_WORK_ORDERS = "no_work_orders"
    UNPARSEABLE_TIME = "unparseable_time"
    INVALID_TEAM = "invalid_team"
    INVALID_SHIFT_NAME = "invalid_shift_name"
    MISSING_ANCHOR = "missing_anchor"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    row: Optional[int]
    message: str

    def to_record(self) -> dict:
        return {"kind": self.kind.value, "row": self.row, "message": self.message}


class NoWorkOrdersError(ValueError):
    """Raised when a sheet holds no work-order rows at all."""

    def __init__(self, message="No work orders found", diagnostics=()):
        super().__init__(message)
        self.diagnostics = tuple(diagnostics)


@dataclass(frozen=True)
class ShiftRecord:
    start_time: Optional[str]
    end_time: Optional[str]
    shift_name: str
    team: str
    actual_hours: Optional[float] = None
    make_ready_minutes: Optional[float] = None
    other_logged_minutes: Optional[float] = None
    row: Optional[int] = None

    @property
    def label(self) -> str:
        return f"{self.shift_name}/{self.team}"


@dataclass(frozen=True)
class Interval:
    start: Optional[str] = None
    end: Optional[str] = None

    @property
    def minutes(self) -> Optional[int]:
        return minutes_between(self.start, self.end)


@dataclass(frozen=True)
class WorkOrderRecord:
    work_order_number: int
    good_production: Optional[float] = None
    lhe: Optional[float] = None
    spoilage_percent: Optional[float] = None
    make_ready: Interval = field(default_factory=Interval)
    production: Interval = field(default_factory=Interval)
    row: Optional[int] = None


@dataclass(frozen=True)
class DowntimeEvent:
    category: str
    minutes: float


@dataclass(frozen=True)
class SpoilageEvent:
    category: str
    units: float


@dataclass(frozen=True)
class ProductionRun:
    """A work order enriched with its events, shift and run speed.

    ``shift`` points at one of the report's ShiftRecords (lookup only);
    downtime and spoilage belong to this run alone.
    """

    work_order: WorkOrderRecord
    downtime: tuple[DowntimeEvent, ...] = ()
    spoilage: tuple[SpoilageEvent, ...] = ()
    shift: Optional[ShiftRecord] = None
    shift_overlap_minutes: int = 0
    run_speed: float = 0.0
    anchor_row: Optional[int] = None

    @property
    def total_downtime_minutes(self) -> float:
        return sum(e.minutes for e in self.downtime)

    @property
    def total_spoilage_units(self) -> float:
        return sum(e.units for e in self.spoilage)


@dataclass(frozen=True)
class ProductionReport:
    press: str
    date: str
    shifts: tuple[ShiftRecord, ...]
    work_orders: tuple[ProductionRun, ...]
    diagnostics: tuple[Diagnostic, ...] = ()

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    def to_record(self) -> dict[str, Any]:
        shifts = [
            {
                "shift": s.shift_name,
                "team": s.team,
                "start_time": s.start_time,
                "end_time": s.end_time,
                "actual_hours": s.actual_hours,
                "make_ready_minutes": s.make_ready_minutes,
                "other_logged_minutes": s.other_logged_minutes,
            }
            for s in self.shifts
        ]
        runs = []
        for run in self.work_orders:
            wo = run.work_order
            runs.append({
                "work_order": wo.work_order_number,
                "good_production": wo.good_production,
                "lhe": wo.lhe,
                "spoilage_percent": wo.spoilage_percent,
                "make_ready": {"start": wo.make_ready.start, "end": wo.make_ready.end},
                "production": {"start": wo.production.start, "end": wo.production.end},
                "shift": run.shift.label if run.shift else None,
                "run_speed": run.run_speed,
                "downtime_minutes": run.total_downtime_minutes,
                "spoilage_units": run.total_spoilage_units,
                "downtime": [{"category": e.category, "minutes": e.minutes} for e in run.downtime],
                "spoilage": [{"category": e.category, "units": e.units} for e in run.spoilage],
            })
        return {
            "press": self.press,
            "date": self.date,
            "shifts": shifts,
            "work_orders": runs,
            "diagnostics": [d.to_record() for d in self.diagnostics],
        }
