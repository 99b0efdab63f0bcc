"""
Activity Feed Parser
=====================
Turns the CSV export of the field-activity sheet into ActivityRecord objects.

Fixed column layout (0-based):
    0  employee id          7  activity date
    1  employee             8  status
    2  manager              9  hi-po flag
    3  zone                 10 (unused)
    4  city                 11 timestamp, "H:MM AM/PM"
    5  cluster head         12 activity type (OB / RV / SP)
    6  pipeline             13 date used for daily bucketing

Row 0 is the header. Blank lines and lines with fewer than 13 fields are
skipped; a missing trailing column reads as "". Parsing never raises.

Exports:
    process_csv, MIN_COLUMNS
"""
from __future__ import annotations

import re
from typing import List

from models.activity_models import ActivityRecord
from scripts.lib.logger import setup_logger
from scripts.lib.parsing import normalize_text, parse_csv_line

logger = setup_logger("activity_parser")

MIN_COLUMNS = 13

_LINE_BREAK_RE = re.compile(r"\r?\n")


def _col(cols: List[str], index: int) -> str:
    """Trimmed column value, or "" when the line is too short."""
    if index < len(cols):
        return cols[index].strip()
    return ""


def _parse_row(cols: List[str]) -> ActivityRecord:
    return ActivityRecord(
        emp_id=_col(cols, 0),
        employee=normalize_text(_col(cols, 1)),
        manager=normalize_text(_col(cols, 2)),
        zone=normalize_text(_col(cols, 3)),
        city=normalize_text(_col(cols, 4)),
        cluster_head=normalize_text(_col(cols, 5)),
        pipeline=_col(cols, 6),
        activity_date=_col(cols, 7),
        status=_col(cols, 8).upper(),
        hi_po=_col(cols, 9).lower(),
        timestamp_str=_col(cols, 11),
        activity_type=_col(cols, 12).upper(),
        date=_col(cols, 13),
    )


def process_csv(csv_text: str) -> List[ActivityRecord]:
    """Parse full CSV text into records, preserving row order."""
    if not csv_text:
        return []

    lines = _LINE_BREAK_RE.split(csv_text)
    records: List[ActivityRecord] = []
    skipped = 0

    for line in lines[1:]:
        if not line.strip():
            continue

        cols = parse_csv_line(line)
        if len(cols) < MIN_COLUMNS:
            skipped += 1
            continue

        records.append(_parse_row(cols))

    if skipped:
        logger.debug("Skipped %d short line(s) while parsing feed", skipped)
    logger.debug("Parsed %d record(s) from %d line(s)", len(records), len(lines))
    return records
