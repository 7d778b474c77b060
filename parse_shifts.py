"""
Parser for the shift table at the top of a press production export.

Layout (first worksheet):
  Rows 1-2:   title / press banner
  Row 3*:     header: Start | End | Shift | Team | Actual Line Hours |
              Make Ready | Other Logged   (*anywhere in rows 3-12)
  Rows 4+:    one row per shift worked, e.g.
              06:00 | 14:00 | Earlies | Team A | 7.5 | 45 | 10
  ...         the table ends where column A reads "Works Order" or holds
              a work-order number; the work-order section follows.

Header columns are detected from label text, not hardcoded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from press_grid import Grid, cell_integer, cell_number, cell_text, is_blank
from press_models import Diagnostic, DiagnosticKind, ShiftRecord
from press_times import normalize_time
from shared import (
    COL_DISCRIMINANT,
    HEADER_SCAN_FIRST_ROW,
    HEADER_SCAN_LAST_ROW,
    MIN_HEADER_MATCHES,
    SHIFT_HEADER_LABELS,
    SHIFT_NAMES,
    TEAM_PREFIXES,
    TEAMS,
    WORK_ORDER_MARKERS,
)


@dataclass
class ShiftTable:
    shifts: list[ShiftRecord] = field(default_factory=list)
    header_row: Optional[int] = None
    col_map: dict[str, str] = field(default_factory=dict)
    work_order_start: int = 0
    diagnostics: list[Diagnostic] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Header location
# ---------------------------------------------------------------------------
def _row_texts(grid, row):
    """(column, lowercased text) for each non-empty cell in a row."""
    out = []
    for col in grid.columns(row):
        text = cell_text(grid.cell(row, col)).lower()
        if text:
            out.append((col, text))
    return out


def count_header_matches(grid: Grid, row: int) -> int:
    """How many expected header labels appear in some cell of the row."""
    texts = [t for _, t in _row_texts(grid, row)]
    return sum(
        1 for label, _ in SHIFT_HEADER_LABELS
        if any(label.lower() in t for t in texts)
    )


def locate_header_row(grid: Grid) -> Optional[int]:
    """First row in the scan window that looks like the shift header."""
    last = min(HEADER_SCAN_LAST_ROW, len(grid) - 1)
    for row in range(HEADER_SCAN_FIRST_ROW, last + 1):
        if count_header_matches(grid, row) >= MIN_HEADER_MATCHES:
            return row
    return None


def build_col_map(grid: Grid, header_row: int) -> dict[str, str]:
    """Map field names to column letters; each column is claimed once."""
    texts = _row_texts(grid, header_row)
    col_map = {}
    claimed = set()
    for label, field_name in SHIFT_HEADER_LABELS:
        needle = label.lower()
        for col, text in texts:
            if col not in claimed and needle in text:
                col_map[field_name] = col
                claimed.add(col)
                break
    return col_map


# ---------------------------------------------------------------------------
# Value normalization
# ---------------------------------------------------------------------------
def normalize_shift_name(raw) -> Optional[str]:
    """'Earlies' / 'Lates' / 'Nights' if the text mentions one, else None."""
    s = str(raw or "").lower()
    for name in SHIFT_NAMES:
        if name.lower() in s:
            return name
    return None


def normalize_team(raw):
    """Normalize a team cell to 'A' / 'B' / 'C'.

    Returns (team, valid). When the value cannot be resolved the raw
    text is handed back with valid=False.
    """
    raw_text = str(raw or "").strip()
    s = raw_text
    low = s.lower()
    for prefix in TEAM_PREFIXES:
        if low.startswith(prefix):
            s = s[len(prefix):].strip()
            break
    if s:
        last = s[-1]
        standalone = len(s) == 1 or not s[-2].isalpha()
        if last in TEAMS or (standalone and last.upper() in TEAMS):
            return last.upper(), True
    first = next((ch for ch in s if ch.isalpha()), "").upper()
    if first in TEAMS:
        return first, True
    return raw_text, False


def _is_work_order_boundary(grid, row):
    cell = grid.cell(row, COL_DISCRIMINANT)
    text = cell_text(cell).lower()
    if any(marker in text for marker in WORK_ORDER_MARKERS):
        return True
    return cell_integer(cell) is not None


def _read_time(grid, row, col, label, diagnostics):
    if not col:
        return None
    cell = grid.cell(row, col)
    value = normalize_time(cell)
    if value is None and not is_blank(cell):
        diagnostics.append(Diagnostic(
            DiagnosticKind.UNPARSEABLE_TIME, row,
            f"{label} time {cell_text(cell)!r} could not be read",
        ))
    return value


def _read_number(grid, row, col):
    if not col:
        return None
    return cell_number(grid.cell(row, col))


# ---------------------------------------------------------------------------
# Shift table extraction
# ---------------------------------------------------------------------------
def extract_shifts(grid: Grid) -> ShiftTable:
    """Read shift rows below the header until the work-order section starts."""
    table = ShiftTable()
    header_row = locate_header_row(grid)
    if header_row is None:
        table.diagnostics.append(Diagnostic(
            DiagnosticKind.NO_HEADER_FOUND, None,
            f"No shift header in rows {HEADER_SCAN_FIRST_ROW + 1}-{HEADER_SCAN_LAST_ROW + 1}",
        ))
        return table

    table.header_row = header_row
    col_map = build_col_map(grid, header_row)
    table.col_map = col_map
    table.work_order_start = len(grid)

    for row in range(header_row + 1, len(grid)):
        if _is_work_order_boundary(grid, row):
            table.work_order_start = row
            break
        if grid.is_blank_row(row):
            continue

        shift_col = col_map.get("shift_name")
        shift_raw = cell_text(grid.cell(row, shift_col)) if shift_col else ""
        shift_name = normalize_shift_name(shift_raw)
        if shift_name is None:
            # Anything that is not a shift means the work orders have begun.
            table.diagnostics.append(Diagnostic(
                DiagnosticKind.INVALID_SHIFT_NAME, row,
                f"Shift {shift_raw!r} is not one of {', '.join(SHIFT_NAMES)}; shift table ends here",
            ))
            table.work_order_start = row
            break

        team_col = col_map.get("team")
        team_raw = cell_text(grid.cell(row, team_col)) if team_col else ""
        team, team_ok = normalize_team(team_raw)
        if not team_ok:
            table.diagnostics.append(Diagnostic(
                DiagnosticKind.INVALID_TEAM, row,
                f"Team {team!r} is not one of {', '.join(TEAMS)}; {shift_name} row skipped",
            ))
            continue

        start = _read_time(grid, row, col_map.get("start_time"), "Start", table.diagnostics)
        end = _read_time(grid, row, col_map.get("end_time"), "End", table.diagnostics)
        table.shifts.append(ShiftRecord(
            start_time=start,
            end_time=end,
            shift_name=shift_name,
            team=team,
            actual_hours=_read_number(grid, row, col_map.get("actual_hours")),
            make_ready_minutes=_read_number(grid, row, col_map.get("make_ready_minutes")),
            other_logged_minutes=_read_number(grid, row, col_map.get("other_logged_minutes")),
            row=row,
        ))

    return table
