"""
Shared constants and utilities for the Press Production Report parser
======================================================================
Single source of truth for the spreadsheet column contract, shift/team
vocabularies, press codes and downtime recommendations used across
parse_shifts.py, parse_work_orders.py, production_report.py and
ingest_router.py.
"""

import os

# ---------------------------------------------------------------------------
# Column contract: work-order section (fixed letters)
# ---------------------------------------------------------------------------
COL_DISCRIMINANT = "A"     # shift rows / work-order number
COL_GOOD_PRODUCTION = "B"
COL_LHE = "C"
COL_SPOILAGE_PCT = "D"
COL_ROW_LABEL = "F"        # "Make Ready" / "Production"
COL_INTERVAL_START = "G"
COL_INTERVAL_END = "H"
COL_COMMENT = "O"          # downtime / spoilage category
COL_MINUTES = "P"
COL_UNITS = "Q"

# ---------------------------------------------------------------------------
# Shift table header: located by fuzzy label match
# ---------------------------------------------------------------------------
# (label, field) pairs; a label matches a header cell when it is a
# case-insensitive substring of the cell text.
SHIFT_HEADER_LABELS = [
    ("Start", "start_time"),
    ("End", "end_time"),
    ("Shift", "shift_name"),
    ("Team", "team"),
    ("Actual Line Hours", "actual_hours"),
    ("Make Ready", "make_ready_minutes"),
    ("Other Logged", "other_logged_minutes"),
]
MIN_HEADER_MATCHES = 4
HEADER_SCAN_FIRST_ROW = 2
HEADER_SCAN_LAST_ROW = 11

WORK_ORDER_MARKERS = ("works order", "work order")

# ---------------------------------------------------------------------------
# Shift / team vocabulary
# ---------------------------------------------------------------------------
SHIFT_NAMES = ("Earlies", "Lates", "Nights")
TEAMS = ("A", "B", "C")
TEAM_PREFIXES = ("team ", "shift ")

MINUTES_PER_DAY = 1440

# ---------------------------------------------------------------------------
# Press codes
# ---------------------------------------------------------------------------
DEFAULT_PRESS_CODES = ["LA01", "LA02", "LP03", "LP04", "LP05", "CL01"]


def get_valid_press_codes():
    """Press codes accepted in filenames. PRESS_CODES (comma list) overrides."""
    raw = os.environ.get("PRESS_CODES", "")
    codes = [c.strip().upper() for c in raw.split(",") if c.strip()]
    return codes or list(DEFAULT_PRESS_CODES)


# ---------------------------------------------------------------------------
# Downtime category → maintenance recommendation
# ---------------------------------------------------------------------------
DEFAULT_RECOMMENDATION = "Investigate root cause and schedule maintenance"

RECOMMENDATIONS = {
    # Mechanical
    "mechanical breakdown": "Schedule immediate inspection",
    "mechanical": "Schedule mechanical inspection",
    "breakdown": "Schedule immediate inspection",
    # Feeder
    "feeder crash": "Check feeder alignment and sensors",
    "crash at feeder": "Check feeder alignment and sensors",
    "feeder": "Inspect feeder mechanism and alignment",
    # Cylinder
    "pimples": "Inspect cylinder cleaning system",
    "cylinder": "Inspect cylinder condition and cleaning system",
    "impression cylinder": "Inspect impression cylinder and cleaning system",
    "impression cylinder wash": "Review cylinder cleaning procedures",
    # Varnish
    "varnish fail": "Check varnish system and blanket tension",
    "varnish": "Inspect varnish application system",
    "varnish finish": "Check varnish finish quality and application",
    # Blanket
    "blanket": "Inspect blanket condition and tension",
    "blanket change": "Review blanket replacement schedule",
    "blanket / packing change": "Inspect blanket and packing condition",
    # Camera
    "camera faults": "Calibrate camera system and check sensors",
    "camera": "Inspect camera alignment and calibration",
    # Coating
    "coating": "Check coating application system",
    "coating drips": "Inspect coating application and quality",
    "material-coating": "Review material handling and coating process",
    # Bulks / setup
    "changing bulks": "Review bulk change procedures and efficiency",
    "bulks": "Optimize bulk change process",
    "setting up": "Review setup procedures and training",
    "start up": "Review startup procedures and efficiency",
    # Repro / plates
    "repro error": "Review repro and plate preparation process",
    "repro error / plates": "Check plate quality and repro procedures",
    "plates": "Inspect plate condition and preparation",
    # Damage
    "damaged edges": "Review material handling procedures",
    "damaged edges/bent corner": "Improve material handling and quality control",
    "bent corner": "Review material handling procedures",
    "grippers": "Inspect gripper mechanism and adjustment",
    # Operational
    "breaks": "Review break scheduling and coverage",
    "shutdown": "Review shutdown and startup procedures",
    "startup": "Review startup procedures and efficiency",
}


def recommend_action(category):
    """Map a downtime category to a recommended maintenance action."""
    if not category or not isinstance(category, str):
        return DEFAULT_RECOMMENDATION
    key = category.strip().lower()
    if not key:
        return DEFAULT_RECOMMENDATION
    if key in RECOMMENDATIONS:
        return RECOMMENDATIONS[key]
    for kw, action in RECOMMENDATIONS.items():
        if kw in key or key in kw:
            return action
    return DEFAULT_RECOMMENDATION
