"""
Cell grid for press production exports.

The first worksheet of a workbook is loaded into an immutable grid of
rows; each row maps column letters ("A", "B", ... "AA") to a CellValue.
Row index 0 is spreadsheet row 1, and blank rows are kept so indices
always line up with the sheet.

CellValue variants:
  NullCell      empty / missing
  NumberCell    int or float (Excel serials, counts, fractions of a day)
  TextCell      non-blank string, stored as written
  DateTimeCell  datetime (time-only cells land on the Excel epoch day)
"""

from __future__ import annotations

import math
import re
import zipfile
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union

import openpyxl
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

EXCEL_EPOCH = date(1899, 12, 30)
_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


@dataclass(frozen=True)
class NullCell:
    pass


@dataclass(frozen=True)
class NumberCell:
    value: float


@dataclass(frozen=True)
class TextCell:
    value: str


@dataclass(frozen=True)
class DateTimeCell:
    value: datetime


CellValue = Union[NullCell, NumberCell, TextCell, DateTimeCell]

NULL = NullCell()
_VARIANTS = (NullCell, NumberCell, TextCell, DateTimeCell)


def to_cell(raw) -> CellValue:
    """Wrap a raw Python / openpyxl value in its CellValue variant."""
    if raw is None:
        return NULL
    if isinstance(raw, bool):
        return TextCell(str(raw).upper())
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and math.isnan(raw):
            return NULL
        return NumberCell(raw)
    if isinstance(raw, datetime):
        return DateTimeCell(raw)
    if isinstance(raw, date):
        return DateTimeCell(datetime(raw.year, raw.month, raw.day))
    if isinstance(raw, time):
        return DateTimeCell(datetime.combine(EXCEL_EPOCH, raw))
    if isinstance(raw, timedelta):
        return NumberCell(raw.total_seconds() / 86400)
    s = str(raw)
    if not s.strip():
        return NULL
    return TextCell(s)


# ---------------------------------------------------------------------------
# Cell readers
# ---------------------------------------------------------------------------
def cell_text(cell: CellValue) -> str:
    """Cell content as stripped text ('' for null)."""
    if isinstance(cell, NullCell):
        return ""
    if isinstance(cell, TextCell):
        return cell.value.strip()
    if isinstance(cell, NumberCell):
        v = cell.value
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return str(v)
    if isinstance(cell, DateTimeCell):
        return cell.value.isoformat(sep=" ")
    raise TypeError(f"Unknown cell variant: {cell!r}")


def cell_number(cell: CellValue):
    """Numeric value of a cell, or None if it does not parse as a number."""
    if isinstance(cell, NumberCell):
        return cell.value
    if isinstance(cell, TextCell):
        s = cell.value.strip().replace(",", "")
        if _NUMBER_RE.match(s):
            return float(s)
        return None
    if isinstance(cell, (NullCell, DateTimeCell)):
        return None
    raise TypeError(f"Unknown cell variant: {cell!r}")


def cell_integer(cell: CellValue):
    """Integer value if the cell holds a whole number, else None."""
    if isinstance(cell, TextCell) and not cell.value.strip().lstrip("+-").isdigit():
        return None
    n = cell_number(cell)
    if n is None or not float(n).is_integer():
        return None
    return int(n)


def is_blank(cell: CellValue) -> bool:
    return cell_text(cell) == ""


# ---------------------------------------------------------------------------
# Grid
# ---------------------------------------------------------------------------
def _column_key(letter):
    return column_index_from_string(letter)


class Grid:
    """Immutable, column-letter keyed rows of a single worksheet."""

    def __init__(self, rows, sheet_name=None):
        frozen = []
        for row in rows:
            cells = {str(k).upper(): v if isinstance(v, _VARIANTS) else to_cell(v)
                     for k, v in dict(row).items()}
            ordered = sorted(cells.items(), key=lambda kv: _column_key(kv[0]))
            frozen.append(MappingProxyType(dict(ordered)))
        self._rows = tuple(frozen)
        self.sheet_name = sheet_name

    @classmethod
    def from_rows(cls, rows, sheet_name=None) -> "Grid":
        """Build a grid from plain values.

        Each row is either a mapping of column letter to value or a
        sequence read left-to-right from column A.
        """
        mapped = []
        for row in rows:
            if isinstance(row, Mapping):
                mapped.append(row)
            else:
                mapped.append({get_column_letter(i + 1): v for i, v in enumerate(row)})
        return cls(mapped, sheet_name=sheet_name)

    def __len__(self):
        return len(self._rows)

    def __iter__(self):
        return iter(self._rows)

    def cell(self, index: int, column: str) -> CellValue:
        if index < 0 or index >= len(self._rows):
            return NULL
        return self._rows[index].get(column, NULL)

    def columns(self, index: int) -> list[str]:
        """Column letters present in a row, in sheet order."""
        return list(self._rows[index].keys())

    def is_blank_row(self, index: int) -> bool:
        return all(is_blank(c) for c in self._rows[index].values())


def load_grid(filepath) -> Grid:
    """Load the first worksheet of an Excel workbook into a Grid."""
    path = Path(filepath)
    if path.suffix.lower() not in _EXCEL_SUFFIXES:
        raise ValueError(f"File must be an Excel workbook (.xlsx): {path.name}")
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        wb = openpyxl.load_workbook(path, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException) as e:
        raise ValueError(f"Could not open {path.name} as a workbook: {e}") from e
    try:
        if not wb.sheetnames:
            raise ValueError("Excel file contains no sheets")
        ws = wb[wb.sheetnames[0]]
        width = ws.max_column or 0
        rows = []
        for values in ws.iter_rows(min_row=1, max_row=ws.max_row, values_only=True):
            rows.append({get_column_letter(i + 1): to_cell(values[i] if i < len(values) else None)
                         for i in range(width)})
        return Grid(rows, sheet_name=ws.title)
    finally:
        wb.close()
