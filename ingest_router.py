"""Batch ingestion router for press production exports."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import pandas as pd

from canonical_schema import validate_and_coerce_run_frames
from file_validation import validate_file_name
from press_grid import load_grid
from press_models import NoWorkOrdersError, ProductionReport
from production_report import (
    DOWNTIME_COLUMNS,
    RUN_COLUMNS,
    SPOILAGE_COLUMNS,
    build_production_report,
    report_frames,
)

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class IngestMeta:
    files_seen: int = 0
    files_parsed: int = 0
    parser_chain: list[str] = field(default_factory=list)
    info_messages: list[str] = field(default_factory=list)
    warning_messages: list[str] = field(default_factory=list)

    def to_record(self) -> dict:
        return {
            "files_seen": self.files_seen,
            "files_parsed": self.files_parsed,
            "parser_chain": list(self.parser_chain),
            "warning_count": len(self.warning_messages),
        }


@dataclass
class IngestBundle:
    reports: list[ProductionReport]
    production_runs: pd.DataFrame
    downtime_events: pd.DataFrame
    spoilage_events: pd.DataFrame
    meta: IngestMeta


def _safe_upload_name(name: str) -> str:
    """Basename of an uploaded file with path tricks and odd characters removed."""
    base = re.split(r"[\\/]+", str(name or ""))[-1]
    base = _UNSAFE_CHARS_RE.sub("_", base)
    while ".." in base:
        base = base.replace("..", ".")
    base = base.lstrip(".")
    return base or "upload.xlsx"


def _write_uploaded_file(uploaded_file, tmp_dir: str) -> str:
    path = os.path.join(tmp_dir, _safe_upload_name(uploaded_file.name))
    with open(path, "wb") as f:
        f.write(uploaded_file.getbuffer())
    return path


def ingest_production_files(paths) -> IngestBundle:
    """Parse export files one after another into reports plus canonical frames."""
    meta = IngestMeta()
    reports: list[ProductionReport] = []
    seen_keys: dict[tuple[str, str], str] = {}

    for raw_path in paths or []:
        path = Path(raw_path)
        meta.files_seen += 1

        check = validate_file_name(path.name)
        if not check.is_valid:
            meta.warning_messages.append(f"Skipped {path.name}: {check.error}")
            continue
        meta.parser_chain.append("file_validation.validate_file_name")

        key = (check.press, check.date)
        if key in seen_keys:
            meta.warning_messages.append(
                f"Skipped {path.name}: {check.press} {check.date} already ingested from {seen_keys[key]}"
            )
            continue

        try:
            grid = load_grid(path)
            meta.parser_chain.append("press_grid.load_grid")
            report = build_production_report(check.press, check.date, grid)
            meta.parser_chain.append("production_report.build_production_report")
        except NoWorkOrdersError as e:
            meta.warning_messages.append(f"Could not parse {path.name}: {e}")
            continue
        except (OSError, ValueError) as e:
            meta.warning_messages.append(f"Could not load {path.name}: {e}")
            continue

        seen_keys[key] = path.name
        reports.append(report)
        meta.files_parsed += 1
        meta.info_messages.append(
            f"Parsed: {path.name} - {check.press} {check.date} "
            f"({len(report.shifts)} shifts, {len(report.work_orders)} work orders)"
        )
        for d in report.diagnostics:
            where = f" row {d.row + 1}" if d.row is not None else ""
            meta.warning_messages.append(f"{path.name}{where}: {d.message}")

    if reports:
        frames = [report_frames(r) for r in reports]
        runs = pd.concat([f["production_runs"] for f in frames], ignore_index=True)
        downtime = pd.concat([f["downtime_events"] for f in frames], ignore_index=True)
        spoilage = pd.concat([f["spoilage_events"] for f in frames], ignore_index=True)
    else:
        runs = pd.DataFrame(columns=RUN_COLUMNS)
        downtime = pd.DataFrame(columns=DOWNTIME_COLUMNS)
        spoilage = pd.DataFrame(columns=SPOILAGE_COLUMNS)

    runs, downtime, spoilage, schema_warnings = validate_and_coerce_run_frames(runs, downtime, spoilage)
    meta.warning_messages.extend(schema_warnings)

    return IngestBundle(
        reports=reports,
        production_runs=runs,
        downtime_events=downtime,
        spoilage_events=spoilage,
        meta=meta,
    )


def ingest_uploaded_files(uploaded_files, tmp_dir: str) -> IngestBundle:
    """Write uploaded file objects (name + getbuffer()) to tmp_dir and ingest them."""
    paths = [_write_uploaded_file(f, tmp_dir) for f in uploaded_files or []]
    return ingest_production_files(paths)
