from __future__ import annotations

import io
from datetime import date, datetime, timezone

import pytest
from openpyxl import load_workbook

from src.readyroom.readyroom.attendance.model import AttendanceRecord
from src.readyroom.readyroom.core.enums import RollCallResponse
from src.readyroom.readyroom.cycles.model import Cycle, Event
from src.readyroom.readyroom.reports.aggregator import build_pilot_rows, build_qualification_rows, build_squadron_rows
from src.readyroom.readyroom.reports.excel_writer import (
    build_workbook,
    report_filename,
    sheet_title,
    workbook_bytes,
)
from src.readyroom.readyroom.reports.model import CycleSheetData
from src.readyroom.readyroom.roster.model import Pilot, Qualification

UTC = timezone.utc
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=UTC)


def _sheet_data(cycle_name: str = "Cycle 1") -> CycleSheetData:
    cycle = Cycle(cycle_id="c1", name=cycle_name, start_date=date(2026, 3, 1), end_date=date(2026, 3, 31))
    events = [
        Event(event_id="e1", name="Case I Recovery Practice", start_datetime=datetime(2026, 3, 10, 19, 0, tzinfo=UTC)),
        Event(event_id="e2", name="Strike Package Bravo", start_datetime=datetime(2026, 3, 20, 19, 0, tzinfo=UTC)),
    ]
    pilots = [
        Pilot(
            pilot_id="p1",
            callsign="Nubs",
            board_number="100",
            qualifications=(Qualification("q1", "Flight Lead", 1),),
            squadron_id="s1",
            squadron_name="VFA-1",
        ),
        Pilot(pilot_id="p2", callsign="Jester", board_number="200"),
    ]
    records = [
        AttendanceRecord("p1", "e1", RollCallResponse.PRESENT),
        AttendanceRecord("p1", "e2", RollCallResponse.ABSENT),
    ]
    return CycleSheetData(
        cycle=cycle,
        events=events,
        pilots=pilots,
        pilot_rows=build_pilot_rows(pilots, events, records),
        qualification_rows=build_qualification_rows(pilots, events, records),
        squadron_rows=build_squadron_rows(pilots, events, records),
    )


def _roundtrip(data: CycleSheetData):
    wb = load_workbook(io.BytesIO(workbook_bytes(build_workbook(data, now=NOW))))
    return wb.worksheets[0]


def _is_muted(cell) -> bool:
    color = cell.font.color
    return color is not None and str(color.rgb).upper().endswith("D1D5DB")


def test_layout_rows_and_sections():
    ws = _roundtrip(_sheet_data())

    assert ws.title == "Cycle 1"
    assert [ws.cell(row=1, column=c).value for c in range(1, 4)] == ["Board # - Callsign", "Event 1", "Event 2"]
    assert [ws.cell(row=2, column=c).value for c in (2, 3)] == ["03/10/2026", "03/20/2026"]

    assert ws["A3"].value == "100 - Nubs"
    assert ws["B3"].value == "X"
    assert ws["C3"].value in (None, "")
    assert ws["A4"].value == "200 - Jester"
    assert [ws["B4"].value, ws["C4"].value] == ["?", "?"]

    assert ws["A5"].value is None
    assert ws["A6"].value == "QUALIFICATION BREAKDOWN"
    assert [ws["A7"].value, ws["B7"].value, ws["C7"].value] == ["Flight Lead", 1, 0]

    assert ws["A8"].value is None
    assert ws["A9"].value == "SQUADRON BREAKDOWN"
    assert [ws["A10"].value, ws["B10"].value, ws["C10"].value] == ["VFA-1", 1, 0]


def test_future_event_columns_are_muted():
    ws = _roundtrip(_sheet_data())

    assert not _is_muted(ws["B2"])
    assert not _is_muted(ws["B3"])
    assert _is_muted(ws["C2"])
    assert _is_muted(ws["C3"])
    assert _is_muted(ws["C4"])


def test_markers_and_counts_are_centered():
    ws = _roundtrip(_sheet_data())

    assert ws["B3"].alignment.horizontal == "center"
    assert ws["B7"].alignment.horizontal == "center"
    assert ws["C10"].alignment.horizontal == "center"


def test_event_headers_carry_full_event_names():
    ws = _roundtrip(_sheet_data())

    assert ws["B1"].comment.text == "Case I Recovery Practice"
    assert ws["C1"].comment.text == "Strike Package Bravo"


def test_column_widths():
    ws = _roundtrip(_sheet_data())

    assert ws.column_dimensions["A"].width == 20
    assert ws.column_dimensions["B"].width == 12
    assert ws.column_dimensions["C"].width == 12


@pytest.mark.parametrize(
    "name, expected",
    [
        ("A" * 31, "A" * 31),
        ("Training Cycle 2026 Spring Block Two Ext", "Training Cycle 2026 Spring Bloc"),
        ("Cycle 1", "Cycle 1"),
    ],
)
def test_sheet_title_truncation(name, expected):
    assert sheet_title(name) == expected
    assert len(sheet_title("x" * 40)) == 31


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Cycle 1: Spring/26", "Cycle 1_ Spring_26"),
        ("[Q2] Block *A*?", "_Q2_ Block _A__"),
        ("Pilot's Cycle", "Pilot's Cycle"),
        ("'Spring' Cycle", "Spring' Cycle"),
        ("", "Attendance"),
        ("''", "Attendance"),
    ],
)
def test_sheet_title_replaces_characters_excel_rejects(name, expected):
    assert sheet_title(name) == expected


def test_sheet_title_trims_apostrophe_left_at_the_cut():
    name = "A" * 30 + "'s Spring Block"

    title = sheet_title(name)

    assert title == "A" * 30
    assert not title.endswith("'")


def test_sheet_title_with_apostrophe_is_accepted_by_workbook():
    ws = _roundtrip(_sheet_data("Pilot's Cycle"))

    assert ws.title == "Pilot's Cycle"


def test_long_cycle_name_is_truncated_in_workbook():
    name = "Training Cycle 2026 Spring Block Two Ext"
    assert len(name) == 40

    ws = _roundtrip(_sheet_data(name))

    assert ws.title == name[:31]


def test_report_filename_replaces_non_alphanumerics():
    assert report_filename("Cycle 1: Spring/26") == "Attendance_Cycle_1__Spring_26.xlsx"
