"""Canonical dataframe validation/coercion for the persistence boundary."""

from __future__ import annotations

import pandas as pd

from production_report import DOWNTIME_COLUMNS, RUN_COLUMNS, SPOILAGE_COLUMNS


_REQUIRED_RUNS = [
    "press",
    "date",
    "work_order",
    "shift",
    "team",
    "team_identifier",
]

_NUMERIC_RUNS = [
    "good_production",
    "lhe_units",
    "spoilage_percentage",
    "make_ready_minutes",
    "production_minutes",
    "logged_downtime_minutes",
    "run_speed",
]


def _ensure_columns(df: pd.DataFrame, columns) -> pd.DataFrame:
    out = df.copy()
    for col in columns:
        if col not in out.columns:
            out[col] = pd.NA
    return out[list(columns)].copy()


def validate_and_coerce_run_frames(runs: pd.DataFrame, downtime: pd.DataFrame, spoilage: pd.DataFrame):
    """Ensure report frames satisfy the persistence layer's column contract."""
    warnings: list[str] = []

    missing = [c for c in _REQUIRED_RUNS if c not in runs.columns]
    if missing:
        raise ValueError(f"Production runs missing required columns: {', '.join(missing)}")

    r = _ensure_columns(runs, RUN_COLUMNS)
    d = _ensure_columns(downtime, DOWNTIME_COLUMNS)
    s = _ensure_columns(spoilage, SPOILAGE_COLUMNS)

    for col in ["shift", "team"]:
        r[col] = r[col].fillna("").astype(str).str.strip()

    for col in _NUMERIC_RUNS:
        before = r[col].notna().sum()
        r[col] = pd.to_numeric(r[col], errors="coerce")
        lost = before - r[col].notna().sum()
        if lost:
            warnings.append(f"`{col}` had {lost} non-numeric value(s); set to NaN.")

    d["minutes"] = pd.to_numeric(d["minutes"], errors="coerce").fillna(0)
    s["units"] = pd.to_numeric(s["units"], errors="coerce").fillna(0)
    r["logged_downtime_minutes"] = r["logged_downtime_minutes"].fillna(0)
    r["run_speed"] = r["run_speed"].fillna(0)

    unassigned = int((r["shift"] == "").sum())
    if unassigned:
        warnings.append(f"{unassigned} production run(s) have no shift/team assigned.")

    return r.reset_index(drop=True), d.reset_index(drop=True), s.reset_index(drop=True), warnings
