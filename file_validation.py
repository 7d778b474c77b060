"""
Filename validation for press production exports.

Exports are named 857{PRESS}_{DD-MMM-YYYY}.xlsx, e.g.
"857LP05_06-Nov-2025.xlsx" → press "LP05", date "06-11-2025".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

from shared import get_valid_press_codes

_NAME_RE = re.compile(r"^857([A-Z0-9]+)_(\d{2}-[A-Za-z]{3}-\d{4})$", re.IGNORECASE)

_MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}


@dataclass(frozen=True)
class FileValidationResult:
    is_valid: bool
    press: Optional[str] = None
    date: Optional[str] = None  # DD-MM-YYYY
    error: Optional[str] = None


def _parse_sheet_date(date_str):
    """'06-Nov-2025' → ('06-11-2025', None) or (None, error)."""
    day_s, month_s, year_s = date_str.split("-")
    month = _MONTHS.get(month_s.lower())
    if month is None:
        return None, (
            "Invalid month. Use 3-letter month abbreviation (e.g., Jan, Feb, Mar). "
            f"Got: {month_s}"
        )
    day, year = int(day_s), int(year_s)
    if not 1 <= day <= 31:
        return None, "Day must be between 1 and 31"
    if not 2000 <= year <= 2100:
        return None, "Year must be between 2000 and 2100"
    try:
        date(year, month, day)
    except ValueError:
        return None, "Invalid date. Please check the day, month, and year values."
    return f"{day:02d}-{month:02d}-{year}", None


def validate_file_name(file_name: str) -> FileValidationResult:
    """Check an export filename and pull out (press, DD-MM-YYYY date)."""
    name = str(file_name or "").strip()
    if not name.lower().endswith(".xlsx"):
        return FileValidationResult(False, error="File must be a .xlsx file")

    m = _NAME_RE.match(name[:-len(".xlsx")])
    if not m:
        return FileValidationResult(
            False,
            error="Filename must match pattern: 857{PRESS}_{DD-MMM-YYYY}.xlsx "
                  "(e.g., 857LP05_06-Nov-2025.xlsx)",
        )

    press = m.group(1).upper()
    valid_codes = get_valid_press_codes()
    if press not in valid_codes:
        return FileValidationResult(
            False, press=press,
            error=f"Press code must be one of: {', '.join(valid_codes)}",
        )

    parsed, error = _parse_sheet_date(m.group(2))
    if error:
        return FileValidationResult(False, press=press, error=error)
    return FileValidationResult(True, press=press, date=parsed)
