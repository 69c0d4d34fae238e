from __future__ import annotations

import csv
import re
from typing import Sequence

import pandas as pd

from ..common.datetime_utils import parse_timestamp
from .model import EventSummary

SUMMARY_COLUMNS = [
    "Event Name",
    "Event Date",
    "Attendance Count",
    "Total Pilots",
    "Attendance %",
    "No Show Count",
    "Last Minute Snivel Count",
]


def summaries_to_frame(summaries: Sequence[EventSummary]) -> pd.DataFrame:
    rows = [
        {
            "Event Name": s.event_name,
            "Event Date": parse_timestamp(s.event_date).strftime("%Y-%m-%d %H:%M"),
            "Attendance Count": s.attendance_count,
            "Total Pilots": s.total_pilots,
            "Attendance %": f"{s.attendance_percentage}%",
            "No Show Count": s.no_show_count,
            "Last Minute Snivel Count": s.last_minute_snivel_count,
        }
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def summaries_to_csv(summaries: Sequence[EventSummary]) -> bytes:
    df = summaries_to_frame(summaries)
    # utf-8-sig so Excel opens accented callsigns/event names correctly.
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n").encode("utf-8-sig")


def summary_filename(cycle_name: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9]", "_", cycle_name or "")
    return f"Attendance_Summary_{safe}.csv"
