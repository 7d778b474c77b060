"""
Parser for the work-order section of a press production export.

Block layout (one block per work order, variable length):
  Row+0:  Col A=work order number, Col B=good production, Col C=LHE,
          Col D=spoilage %   (Col F may already carry "Make Ready")
  Row+n:  Col F="Make Ready",  Col G=start, Col H=end
  Row+m:  Col F="Production",  Col G=start, Col H=end
  Rows after "Production", until the next work order:
          Col O=downtime/spoilage category, Col P=minutes, Col Q=units

Work order numbers may repeat (a job split across the day); each opening
is its own record.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from press_grid import Grid, cell_number, cell_text, is_blank
from press_models import (
    Diagnostic,
    DiagnosticKind,
    DowntimeEvent,
    Interval,
    SpoilageEvent,
    WorkOrderRecord,
)
from press_times import normalize_time
from shared import (
    COL_COMMENT,
    COL_DISCRIMINANT,
    COL_GOOD_PRODUCTION,
    COL_INTERVAL_END,
    COL_INTERVAL_START,
    COL_LHE,
    COL_MINUTES,
    COL_ROW_LABEL,
    COL_SPOILAGE_PCT,
    COL_UNITS,
)


class WorkOrderState(Enum):
    SEEKING_WORK_ORDER = "seeking_work_order"
    IN_WORK_ORDER = "in_work_order"


@dataclass
class _OpenWorkOrder:
    """The single in-progress slot; frozen into a WorkOrderRecord on commit."""

    number: int
    row: int
    good_production: Optional[float]
    lhe: Optional[float]
    spoilage_percent: Optional[float]
    make_ready: Interval = Interval()
    production: Interval = Interval()

    def freeze(self) -> WorkOrderRecord:
        return WorkOrderRecord(
            work_order_number=self.number,
            good_production=self.good_production,
            lhe=self.lhe,
            spoilage_percent=self.spoilage_percent,
            make_ready=self.make_ready,
            production=self.production,
            row=self.row,
        )


def work_order_number(grid: Grid, row: int) -> Optional[int]:
    """Work order number in column A, or None if the row is not a work order."""
    n = cell_number(grid.cell(row, COL_DISCRIMINANT))
    if n is None:
        return None
    return int(n)


def _read_interval(grid, row, diagnostics, label):
    values = []
    for col in (COL_INTERVAL_START, COL_INTERVAL_END):
        cell = grid.cell(row, col)
        value = normalize_time(cell)
        if value is None and not is_blank(cell):
            diagnostics.append(Diagnostic(
                DiagnosticKind.UNPARSEABLE_TIME, row,
                f"{label} time {cell_text(cell)!r} in column {col} could not be read",
            ))
        values.append(value)
    return Interval(start=values[0], end=values[1])


# ---------------------------------------------------------------------------
# Work order table
# ---------------------------------------------------------------------------
def extract_work_orders(grid: Grid, start_row: int = 0, diagnostics=None) -> list[WorkOrderRecord]:
    """Scan from start_row to EOF and return work orders in sheet order."""
    if diagnostics is None:
        diagnostics = []
    records = []
    state = WorkOrderState.SEEKING_WORK_ORDER
    current = None

    for row in range(start_row, len(grid)):
        number = work_order_number(grid, row)
        if number is not None:
            if current is not None:
                records.append(current.freeze())
            current = _OpenWorkOrder(
                number=number,
                row=row,
                good_production=cell_number(grid.cell(row, COL_GOOD_PRODUCTION)),
                lhe=cell_number(grid.cell(row, COL_LHE)),
                spoilage_percent=cell_number(grid.cell(row, COL_SPOILAGE_PCT)),
            )
            state = WorkOrderState.IN_WORK_ORDER

        if state is not WorkOrderState.IN_WORK_ORDER:
            continue

        label = cell_text(grid.cell(row, COL_ROW_LABEL)).lower()
        if "production" in label:
            current.production = _read_interval(grid, row, diagnostics, "Production")
        elif "make ready" in label:
            current.make_ready = _read_interval(grid, row, diagnostics, "Make Ready")

    if current is not None:
        records.append(current.freeze())
    return records


# ---------------------------------------------------------------------------
# Anchor rows
# ---------------------------------------------------------------------------
def find_work_order_row(grid: Grid, number: int, start_row: int, claimed) -> Optional[int]:
    """Next unclaimed row at or after start_row whose column A is this number."""
    for row in range(max(start_row, 0), len(grid)):
        if row in claimed:
            continue
        if work_order_number(grid, row) == number:
            return row
    return None


def find_production_anchor(grid: Grid, work_order_row: int) -> int:
    """Row labelled exactly 'Production' inside this work order's block, or -1."""
    for row in range(work_order_row, len(grid)):
        if row > work_order_row and work_order_number(grid, row) is not None:
            return -1
        if cell_text(grid.cell(row, COL_ROW_LABEL)).lower() == "production":
            return row
    return -1


# ---------------------------------------------------------------------------
# Downtime / spoilage events
# ---------------------------------------------------------------------------
def scan_events(grid: Grid, anchor: int):
    """Downtime and spoilage events logged after a Production anchor row.

    Returns (downtime, spoilage) as tuples in sheet order.
    """
    downtime = []
    spoilage = []
    if anchor < 0:
        return tuple(downtime), tuple(spoilage)

    for row in range(anchor + 1, len(grid)):
        if work_order_number(grid, row) is not None:
            break
        minutes = cell_number(grid.cell(row, COL_MINUTES))
        units = cell_number(grid.cell(row, COL_UNITS))
        if minutes is None and units is None:
            continue
        category = cell_text(grid.cell(row, COL_COMMENT))
        if not category:
            continue
        if minutes is not None:
            downtime.append(DowntimeEvent(category=category, minutes=minutes))
        if units is not None:
            spoilage.append(SpoilageEvent(category=category, units=units))

    return tuple(downtime), tuple(spoilage)
