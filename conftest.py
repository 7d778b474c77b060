from datetime import datetime, time
from pathlib import Path
import shutil
import uuid

import openpyxl
import pytest

from press_grid import Grid


# Workbooks written by the tests stay under the project directory; pytest's
# default basetemp is not always writable where these suites run.
_BASE = Path(__file__).resolve().parent / ".test_tmp_local"


@pytest.fixture(scope="session")
def tmp_path_factory():
    class _Factory:
        def mktemp(self, basename: str, numbered: bool = True):
            _BASE.mkdir(parents=True, exist_ok=True)
            suffix = uuid.uuid4().hex[:8] if numbered else ""
            name = f"{basename}_{suffix}" if suffix else basename
            path = _BASE / name
            path.mkdir(parents=True, exist_ok=False)
            return path

    return _Factory()


@pytest.fixture
def tmp_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("pytest")
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)


# =====================================================================
# Press export fixtures
# =====================================================================

SHIFT_HEADER = ["Start", "End", "Shift", "Team", "Actual Line Hours", "Make Ready", "Other Logged"]


def sample_rows():
    """A day on one press: three shifts, three work orders.

    Row indices (0-based):
      2      shift header
      3-5    Earlies/A, Lates/B, Nights/C
      7      "Works Order" heading
      8-13   WO 1001 (07:00-12:00), events on 10-13
      14-16  WO 1002 (14:30-21:00)
      17-19  WO 1003 (23:00-05:00, wraps midnight)
    """
    return [
        ["Press LP05 - Daily Production"],
        [],
        SHIFT_HEADER,
        [0.25, 14 / 24, "Earlies", "Team A", 7.5, 45, 10],
        ["14:00", "22:00", "Lates", "Team B", 8, 30, 0],
        [datetime(2025, 11, 6, 22, 0), time(6, 0), "Nights", "C", 8, 0, 5],
        [],
        {"A": "Works Order", "B": "Good", "C": "LHE", "D": "Spoilage %", "F": "Type",
         "G": "Start", "H": "End", "O": "Comment", "P": "Minutes", "Q": "Units"},
        {"A": 1001, "B": 5000, "C": 12.5, "D": 2.1, "F": "Make Ready", "G": "06:30", "H": "07:00"},
        {"F": "Production", "G": "07:00", "H": "12:00"},
        {"O": "Changing Bulks", "P": 24},
        {"O": "Damaged edges", "Q": 6},
        {"O": "Camera faults", "P": 10, "Q": 3},
        {"O": "no numbers here"},
        {"A": 1002, "B": 3000, "C": 8, "D": 1.5, "F": "Make Ready", "G": "14:00", "H": "14:30"},
        {"F": "Production", "G": "14:30", "H": "21:00"},
        {"O": "Feeder crash", "P": 15},
        {"A": 1003, "B": 2000, "C": 4, "D": 0.5},
        {"F": "Production", "G": "23:00", "H": "05:00"},
        {"O": "Blanket change", "P": "20"},
    ]


@pytest.fixture
def sample_grid():
    return Grid.from_rows(sample_rows())


def write_workbook(path, rows):
    """Write grid-style rows (lists or column-letter dicts) to an .xlsx file."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Report"
    for r, row in enumerate(rows, start=1):
        if isinstance(row, dict):
            for col, value in row.items():
                ws[f"{col}{r}"] = value
        else:
            for c, value in enumerate(row, start=1):
                ws.cell(r, c, value)
    wb.save(str(path))
    return path
