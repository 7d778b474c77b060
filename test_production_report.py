"""
Tests for production_report.py: end-to-end report assembly and frames.

Run: python -m pytest test_production_report.py -v
"""

import json

import numpy as np
import pytest

from conftest import SHIFT_HEADER
from press_grid import Grid
from press_models import DiagnosticKind, NoWorkOrdersError
from production_report import (
    DOWNTIME_COLUMNS,
    RUN_COLUMNS,
    build_production_report,
    report_frames,
    team_identifier,
)


# =====================================================================
# build_production_report
# =====================================================================

class TestBuildReport:

    @pytest.fixture
    def report(self, sample_grid):
        return build_production_report("LP05", "06-11-2025", sample_grid)

    def test_header_fields(self, report):
        assert report.press == "LP05"
        assert report.date == "06-11-2025"
        assert len(report.shifts) == 3
        assert report.diagnostics == ()

    def test_work_orders_in_sheet_order(self, report):
        assert [r.work_order.work_order_number for r in report.work_orders] == [1001, 1002, 1003]

    def test_shift_assignment(self, report):
        labels = [r.shift.label for r in report.work_orders]
        assert labels == ["Earlies/A", "Lates/B", "Nights/C"]
        assert [r.shift_overlap_minutes for r in report.work_orders] == [300, 390, 360]

    def test_assigned_shift_is_one_of_report_shifts(self, report):
        for run in report.work_orders:
            assert any(run.shift is s for s in report.shifts)

    def test_events_belong_to_their_work_order(self, report):
        first, second, third = report.work_orders
        assert [(e.category, e.minutes) for e in first.downtime] == [
            ("Changing Bulks", 24), ("Camera faults", 10),
        ]
        assert [(e.category, e.units) for e in first.spoilage] == [
            ("Damaged edges", 6), ("Camera faults", 3),
        ]
        assert [e.category for e in second.downtime] == ["Feeder crash"]
        assert second.spoilage == ()
        assert third.total_downtime_minutes == 20

    def test_anchor_rows(self, report):
        assert [r.anchor_row for r in report.work_orders] == [9, 15, 18]

    def test_run_speed(self, report):
        # (5000 / (300 - 34)) * 60, (3000 / (390 - 15)) * 60, (2000 / (360 - 20)) * 60
        assert [r.run_speed for r in report.work_orders] == [1127.82, 480.0, 352.94]

    def test_to_record_is_json_ready(self, report):
        record = report.to_record()
        text = json.dumps(record)
        assert "Changing Bulks" in text
        assert record["work_orders"][0]["shift"] == "Earlies/A"
        assert record["work_orders"][2]["production"] == {"start": "23:00", "end": "05:00"}
        assert record["work_orders"][0]["downtime_minutes"] == 34
        assert record["work_orders"][0]["spoilage_units"] == 9


class TestReportEdgeCases:

    def test_no_work_orders_raises(self):
        grid = Grid.from_rows([["Title"], [], SHIFT_HEADER, ["06:00", "14:00", "Earlies", "A"]])
        with pytest.raises(NoWorkOrdersError) as excinfo:
            build_production_report("LP05", "06-11-2025", grid)
        assert str(excinfo.value) == "No work orders found"
        kinds = [d.kind for d in excinfo.value.diagnostics]
        assert kinds[-1] == DiagnosticKind.NO_WORK_ORDERS

    def test_no_work_orders_is_a_value_error(self):
        with pytest.raises(ValueError):
            build_production_report("LP05", "06-11-2025", Grid.from_rows([]))

    def test_missing_header_still_reports_work_orders(self):
        grid = Grid.from_rows([
            {"A": "Works Order"},
            {"A": 1, "B": 600},
            {"F": "Production", "G": "06:00", "H": "07:00"},
        ])
        report = build_production_report("LA01", "01-01-2025", grid)
        assert report.shifts == ()
        assert report.work_orders[0].shift is None
        assert report.work_orders[0].run_speed == 600.0
        assert report.diagnostics_of(DiagnosticKind.NO_HEADER_FOUND)

    def test_missing_anchor(self):
        grid = Grid.from_rows([
            {"A": "Works Order"},
            {"A": 1, "B": 10, "F": "Make Ready", "G": "06:00", "H": "06:30"},
            {"O": "Breaks", "P": 30},
            {"A": 2, "B": 5},
            {"F": "Production", "G": "06:00", "H": "07:00"},
            {"O": "Camera faults", "P": 5},
        ])
        report = build_production_report("LA01", "01-01-2025", grid)
        first, second = report.work_orders
        assert first.anchor_row is None
        assert first.downtime == ()
        assert first.run_speed == 0.0
        assert [e.category for e in second.downtime] == ["Camera faults"]

        missing = report.diagnostics_of(DiagnosticKind.MISSING_ANCHOR)
        assert len(missing) == 1
        assert missing[0].row == 1

    def test_duplicate_work_orders_keep_own_events(self):
        grid = Grid.from_rows([
            {"A": "Works Order"},
            {"A": 5, "B": 100},
            {"F": "Production", "G": "06:30", "H": "08:00"},
            {"O": "Changing Bulks", "P": 24},
            {"A": 7, "B": 50},
            {"F": "Production", "G": "08:00", "H": "09:00"},
            {"A": 5, "B": 200},
            {"F": "Production", "G": "09:00", "H": "11:00"},
            {"O": "Damaged edges", "Q": 6},
        ])
        report = build_production_report("LA02", "01-01-2025", grid)
        first, middle, last = report.work_orders
        assert [r.anchor_row for r in report.work_orders] == [2, 5, 7]
        assert [e.category for e in first.downtime] == ["Changing Bulks"]
        assert middle.downtime == () and middle.spoilage == ()
        assert last.downtime == ()
        assert [e.category for e in last.spoilage] == ["Damaged edges"]

    def test_no_shift_overlap_leaves_run_unassigned(self):
        grid = Grid.from_rows([
            ["Title"],
            [],
            SHIFT_HEADER,
            ["06:00", "14:00", "Earlies", "A"],
            {"A": 1, "B": 100},
            {"F": "Production", "G": "15:00", "H": "16:00"},
        ])
        run = build_production_report("LP03", "01-01-2025", grid).work_orders[0]
        assert run.shift is None
        assert run.shift_overlap_minutes == 0


# =====================================================================
# Frames
# =====================================================================

class TestReportFrames:

    def test_team_identifier(self):
        assert team_identifier("LP05", "Earlies", "A") == "LP05_Earlies_A"
        assert team_identifier("LP05", "", None) == "LP05_Unknown_Unknown"

    def test_frame_shapes(self, sample_grid):
        frames = report_frames(build_production_report("LP05", "06-11-2025", sample_grid))
        runs = frames["production_runs"]
        assert list(runs.columns) == RUN_COLUMNS
        assert list(frames["downtime_events"].columns) == DOWNTIME_COLUMNS
        assert len(runs) == 3
        assert len(frames["downtime_events"]) == 4
        assert len(frames["spoilage_events"]) == 2

    def test_run_rows(self, sample_grid):
        runs = report_frames(build_production_report("LP05", "06-11-2025", sample_grid))["production_runs"]
        first = runs.iloc[0]
        assert first["work_order"] == "1001"
        assert first["team_identifier"] == "LP05_Earlies_A"
        assert first["make_ready_minutes"] == 30
        assert first["production_minutes"] == 300
        assert first["logged_downtime_minutes"] == 34
        assert runs.iloc[2]["production_minutes"] == 360
        assert np.isnan(runs.iloc[2]["make_ready_minutes"])

    def test_downtime_rows_carry_recommendation(self, sample_grid):
        downtime = report_frames(build_production_report("LP05", "06-11-2025", sample_grid))["downtime_events"]
        bulks = downtime[downtime["category"] == "Changing Bulks"].iloc[0]
        assert bulks["recommendation"] == "Review bulk change procedures and efficiency"
        assert bulks["team_identifier"] == "LP05_Earlies_A"
        feeder = downtime[downtime["category"] == "Feeder crash"].iloc[0]
        assert feeder["shift"] == "Lates"

    def test_unassigned_run_gets_unknown_identifier(self):
        grid = Grid.from_rows([{"A": 1, "F": "Production", "G": "06:00", "H": "07:00"}])
        runs = report_frames(build_production_report("CL01", "01-01-2025", grid))["production_runs"]
        assert runs.iloc[0]["team_identifier"] == "CL01_Unknown_Unknown"
        assert runs.iloc[0]["shift"] == ""
