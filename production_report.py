"""
Production report assembly.

Turns one loaded press export grid into a ProductionReport:

  shift table  →  work orders  →  per work order:
      anchor row ("Production") → downtime / spoilage events
      production interval       → assigned shift
      good production, minutes  → run speed

Per-row problems are collected as diagnostics on the report; only a sheet
with no work orders at all is fatal (NoWorkOrdersError).
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from calculations import calculate_run_speed
from parse_shifts import extract_shifts
from parse_work_orders import (
    extract_work_orders,
    find_production_anchor,
    find_work_order_row,
    scan_events,
)
from press_grid import Grid
from press_models import (
    Diagnostic,
    DiagnosticKind,
    NoWorkOrdersError,
    ProductionReport,
    ProductionRun,
)
from shared import recommend_action
from shift_assignment import assign_shift

RUN_COLUMNS = [
    "press", "date", "work_order", "good_production", "lhe_units",
    "spoilage_percentage", "shift_start_time", "shift_end_time",
    "make_ready_start_time", "make_ready_end_time", "make_ready_minutes",
    "production_start_time", "production_end_time", "production_minutes",
    "logged_downtime_minutes", "shift", "team", "team_identifier", "run_speed",
]
DOWNTIME_COLUMNS = [
    "press", "date", "work_order", "shift", "team", "team_identifier",
    "category", "minutes", "recommendation",
]
SPOILAGE_COLUMNS = [
    "press", "date", "work_order", "shift", "team", "team_identifier",
    "category", "units",
]


def _run_speed(work_order, downtime_minutes):
    minutes = work_order.production.minutes
    if work_order.good_production is None or minutes is None:
        return 0.0
    return calculate_run_speed(work_order.good_production, minutes, downtime_minutes)


def build_production_report(press: str, date: str, grid: Grid) -> ProductionReport:
    """Parse a loaded grid for an already-validated (press, date)."""
    diagnostics: list[Diagnostic] = []

    table = extract_shifts(grid)
    diagnostics.extend(table.diagnostics)

    work_orders = extract_work_orders(grid, table.work_order_start, diagnostics)
    if not work_orders:
        diagnostics.append(Diagnostic(
            DiagnosticKind.NO_WORK_ORDERS, None, "No work orders found",
        ))
        raise NoWorkOrdersError(diagnostics=diagnostics)

    shifts = tuple(table.shifts)
    runs = []
    claimed = set()
    search_from = table.work_order_start
    for wo in work_orders:
        wo_row = find_work_order_row(grid, wo.work_order_number, search_from, claimed)
        anchor = -1
        if wo_row is not None:
            claimed.add(wo_row)
            search_from = wo_row + 1
            anchor = find_production_anchor(grid, wo_row)
        if anchor < 0:
            diagnostics.append(Diagnostic(
                DiagnosticKind.MISSING_ANCHOR, wo_row,
                f"Work order {wo.work_order_number}: no 'Production' row; events not scanned",
            ))

        downtime, spoilage = scan_events(grid, anchor)
        assignment = assign_shift(wo.production, shifts)
        downtime_minutes = sum(e.minutes for e in downtime)

        runs.append(ProductionRun(
            work_order=wo,
            downtime=downtime,
            spoilage=spoilage,
            shift=assignment.shift,
            shift_overlap_minutes=assignment.overlap_minutes,
            run_speed=_run_speed(wo, downtime_minutes),
            anchor_row=anchor if anchor >= 0 else None,
        ))

    return ProductionReport(
        press=press,
        date=date,
        shifts=shifts,
        work_orders=tuple(runs),
        diagnostics=tuple(diagnostics),
    )


# ---------------------------------------------------------------------------
# Tabular output (one row per persisted record)
# ---------------------------------------------------------------------------
def team_identifier(press, shift_name, team):
    """'LP05_Earlies_A'; missing parts become 'Unknown'."""
    return f"{press}_{shift_name or 'Unknown'}_{team or 'Unknown'}"


def _num(value):
    return np.nan if value is None else value


def report_frames(report: ProductionReport) -> dict[str, pd.DataFrame]:
    """Flatten a report into production_runs / downtime_events / spoilage_events."""
    runs, downtime, spoilage = [], [], []

    for run in report.work_orders:
        wo = run.work_order
        shift_name = run.shift.shift_name if run.shift else ""
        team = run.shift.team if run.shift else ""
        ident = team_identifier(report.press, shift_name, team)
        common = {
            "press": report.press,
            "date": report.date,
            "work_order": str(wo.work_order_number),
            "shift": shift_name,
            "team": team,
            "team_identifier": ident,
        }

        runs.append({
            **common,
            "good_production": _num(wo.good_production),
            "lhe_units": _num(wo.lhe),
            "spoilage_percentage": _num(wo.spoilage_percent),
            "shift_start_time": run.shift.start_time if run.shift else None,
            "shift_end_time": run.shift.end_time if run.shift else None,
            "make_ready_start_time": wo.make_ready.start,
            "make_ready_end_time": wo.make_ready.end,
            "make_ready_minutes": _num(wo.make_ready.minutes),
            "production_start_time": wo.production.start,
            "production_end_time": wo.production.end,
            "production_minutes": _num(wo.production.minutes),
            "logged_downtime_minutes": run.total_downtime_minutes,
            "run_speed": run.run_speed,
        })
        for e in run.downtime:
            downtime.append({
                **common,
                "category": e.category,
                "minutes": e.minutes,
                "recommendation": recommend_action(e.category),
            })
        for e in run.spoilage:
            spoilage.append({**common, "category": e.category, "units": e.units})

    return {
        "production_runs": pd.DataFrame(runs, columns=RUN_COLUMNS),
        "downtime_events": pd.DataFrame(downtime, columns=DOWNTIME_COLUMNS),
        "spoilage_events": pd.DataFrame(spoilage, columns=SPOILAGE_COLUMNS),
    }
