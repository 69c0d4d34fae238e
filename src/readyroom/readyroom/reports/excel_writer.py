"""Cycle attendance workbook writer (openpyxl).

Layout (1-based Excel rows):
    1           header: "Board # - Callsign", "Event 1" .. "Event N"
    2           event dates (MM/DD/YYYY)
    3 .. 2+P    one row per pilot with X / '' / ? markers
    blank
    "QUALIFICATION BREAKDOWN" + one row per qualification
    blank
    "SQUADRON BREAKDOWN" + one row per squadron

Columns for events that start after generation time are rendered in a muted
grey, on the date row and on every pilot row.
"""

from __future__ import annotations

import io
import re
from datetime import datetime
from typing import Optional

from openpyxl import Workbook
from openpyxl.comments import Comment
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from ..common.datetime_utils import format_event_date, now_utc, parse_timestamp
from ..core.constants import MAX_SHEET_NAME_LENGTH, REPORT_FILE_EXTENSION
from .model import CycleSheetData

LABEL_HEADER = "Board # - Callsign"
QUALIFICATION_HEADER = "QUALIFICATION BREAKDOWN"
SQUADRON_HEADER = "SQUADRON BREAKDOWN"
COMMENT_AUTHOR = "ReadyRoom"

LABEL_COLUMN_WIDTH = 20
EVENT_COLUMN_WIDTH = 12
COLOR_FUTURE_EVENT = "D1D5DB"

CENTER = Alignment(horizontal="center", vertical="center")
FUTURE_FONT = Font(color=COLOR_FUTURE_EVENT)

# Characters Excel does not allow in sheet titles.
_INVALID_TITLE_CHARS = re.compile(r"[\\*?:/\[\]]")


def sheet_title(cycle_name: str) -> str:
    """Worksheet title: cycle name hard-truncated to 31 characters.

    Excel rejects a title that starts or ends with an apostrophe, so those are
    trimmed after truncation.
    """

    title = _INVALID_TITLE_CHARS.sub("_", cycle_name or "")[:MAX_SHEET_NAME_LENGTH]
    return title.strip("'") or "Attendance"


def report_filename(cycle_name: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9]", "_", cycle_name or "")
    return f"Attendance_{safe}.{REPORT_FILE_EXTENSION}"


def _future_columns(data: CycleSheetData, now: datetime) -> set[int]:
    return {
        idx
        for idx, event in enumerate(data.events, start=2)
        if parse_timestamp(event.start_datetime) > now
    }


def _write_header(ws: Worksheet, data: CycleSheetData) -> None:
    ws.cell(row=1, column=1, value=LABEL_HEADER)
    for idx, event in enumerate(data.events, start=2):
        cell = ws.cell(row=1, column=idx, value=f"Event {idx - 1}")
        cell.alignment = CENTER
        cell.comment = Comment(event.name, COMMENT_AUTHOR)


def _write_dates(ws: Worksheet, data: CycleSheetData, future: set[int], tz_name: str) -> None:
    ws.cell(row=2, column=1, value="")
    for idx, event in enumerate(data.events, start=2):
        cell = ws.cell(row=2, column=idx, value=format_event_date(event.start_datetime, tz_name))
        cell.alignment = CENTER
        if idx in future:
            cell.font = FUTURE_FONT


def _write_pilots(ws: Worksheet, data: CycleSheetData, future: set[int], start_row: int) -> int:
    row = start_row
    for pilot_row in data.pilot_rows:
        ws.cell(row=row, column=1, value=pilot_row.display_name)
        for idx, event in enumerate(data.events, start=2):
            marker = pilot_row.attendance.get(event.event_id)
            cell = ws.cell(row=row, column=idx, value=marker.value if marker is not None else "")
            cell.alignment = CENTER
            if idx in future:
                cell.font = FUTURE_FONT
        row += 1
    return row


def _write_counts(ws: Worksheet, data: CycleSheetData, title: str, rows, start_row: int) -> int:
    ws.cell(row=start_row, column=1, value=title)
    row = start_row + 1
    for count_row in rows:
        ws.cell(row=row, column=1, value=count_row.name)
        for idx, event in enumerate(data.events, start=2):
            cell = ws.cell(row=row, column=idx, value=int(count_row.attendance.get(event.event_id, 0)))
            cell.alignment = CENTER
        row += 1
    return row


def _apply_column_widths(ws: Worksheet, event_count: int) -> None:
    ws.column_dimensions["A"].width = LABEL_COLUMN_WIDTH
    for idx in range(2, event_count + 2):
        ws.column_dimensions[get_column_letter(idx)].width = EVENT_COLUMN_WIDTH


def build_workbook(data: CycleSheetData, *, now: Optional[datetime] = None, tz_name: str = "UTC") -> Workbook:
    now = parse_timestamp(now or now_utc())
    future = _future_columns(data, now)

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title(data.cycle.name)

    _write_header(ws, data)
    _write_dates(ws, data, future, tz_name)
    next_row = _write_pilots(ws, data, future, start_row=3)

    # One blank separator row before each breakdown section.
    next_row = _write_counts(ws, data, QUALIFICATION_HEADER, data.qualification_rows, next_row + 1)
    _write_counts(ws, data, SQUADRON_HEADER, data.squadron_rows, next_row + 1)

    _apply_column_widths(ws, len(data.events))
    return wb


def workbook_bytes(wb: Workbook) -> bytes:
    # In-memory only; reports are streamed back, never stored server-side.
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()
