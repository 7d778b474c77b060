"""CLI for the press production report parser."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from ingest_router import ingest_production_files
from press_grid import load_grid
from press_models import NoWorkOrdersError
from production_report import build_production_report, report_frames


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Parse press production exports (857{PRESS}_{DD-MMM-YYYY}.xlsx)")
    p.add_argument("files", nargs="+", help="Export workbooks to parse, processed in order")
    p.add_argument("--press", help="Press code; skips filename validation (requires --date, one file)")
    p.add_argument("--date", help="Report date DD-MM-YYYY (used with --press)")
    p.add_argument("--csv-dir", help="Also write production_runs / downtime_events / spoilage_events CSVs here")
    return p


def _write_csvs(frames, csv_dir):
    out = Path(csv_dir)
    out.mkdir(parents=True, exist_ok=True)
    for name, df in frames.items():
        df.to_csv(out / f"{name}.csv", index=False)


def main(argv=None) -> None:
    args = _build_parser().parse_args(argv)

    if args.press or args.date:
        if not (args.press and args.date):
            raise SystemExit("--press and --date must be given together")
        if len(args.files) != 1:
            raise SystemExit("--press/--date apply to exactly one file")
        try:
            report = build_production_report(args.press, args.date, load_grid(args.files[0]))
        except NoWorkOrdersError as e:
            print(json.dumps({"error": str(e), "diagnostics": [d.to_record() for d in e.diagnostics]},
                             indent=2, default=str))
            raise SystemExit(1)
        if args.csv_dir:
            _write_csvs(report_frames(report), args.csv_dir)
        print(json.dumps(report.to_record(), indent=2, default=str))
        return

    bundle = ingest_production_files(args.files)
    if args.csv_dir:
        _write_csvs({
            "production_runs": bundle.production_runs,
            "downtime_events": bundle.downtime_events,
            "spoilage_events": bundle.spoilage_events,
        }, args.csv_dir)

    result = {
        "meta": bundle.meta.to_record(),
        "info": bundle.meta.info_messages,
        "warnings": bundle.meta.warning_messages,
        "reports": [r.to_record() for r in bundle.reports],
    }
    print(json.dumps(result, indent=2, default=str))
    if not bundle.reports:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
