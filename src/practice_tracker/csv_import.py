"""
CSV import for Practice Tracker.

PURPOSE: Turn time-tracker CSV exports into RawSession records.
AI CONTEXT: This is the validation boundary - malformed rows are reported
here so the analytics core only ever sees well-formed sessions.

SUPPORTED INPUT:
- Separators: ';', ',' or TAB, detected from the header line
- Columns (case-insensitive, partial match):
    * start time: header containing "start" and "time"
    * duration:   header containing "duration" and "hours"
- Start times: "1. Feb 2024 at 18:00:00" with German or English month
  names, or ISO 8601
- Durations: European decimals ("2,5" -> 2.5 hours)

Bad rows are collected in CsvImportResult.errors; only structural problems
(missing columns, no data rows) raise CsvImportError.
"""

from __future__ import annotations

import csv
import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime

from .models import RawSession

__all__ = [
    "CsvImportError",
    "CsvImportResult",
    "detect_separator",
    "parse_csv",
    "parse_european_decimal",
    "parse_localized_date",
]

logger = logging.getLogger(__name__)

MONTHS: dict[str, int] = {
    "jan": 1, "januar": 1, "january": 1,
    "feb": 2, "februar": 2, "february": 2,
    "mar": 3, "mär": 3, "märz": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5, "mai": 5,
    "jun": 6, "juni": 6, "june": 6,
    "jul": 7, "juli": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "okt": 10, "oktober": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "dez": 12, "dezember": 12, "december": 12,
}  # fmt: skip

_DATE_PATTERN = re.compile(
    r"^(\d{1,2})\.\s*(\w+)\s+(\d{4})\s+at\s+(\d{1,2}):(\d{2}):(\d{2})$", re.IGNORECASE
)


class CsvImportError(ValueError):
    """Raised when a CSV file cannot be imported at all."""


@dataclass
class CsvImportResult:
    """Sessions parsed from a CSV file plus per-row error messages."""

    sessions: list[RawSession] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def parse_localized_date(value: str) -> datetime | None:
    """
    Parse a time-tracker start time.

    Args:
        value: "D. Mon YYYY at HH:MM:SS" (e.g. "3. Mär 2024 at 07:15:00"),
            or an ISO 8601 timestamp.

    Returns:
        Parsed datetime (naive = local wall-clock time), or None if the
        value is empty, uses an unknown month or is not a valid date.

    Example:
        >>> parse_localized_date("1. Okt 2024 at 18:00:00")
        datetime.datetime(2024, 10, 1, 18, 0)
    """
    if not value or not value.strip():
        return None

    match = _DATE_PATTERN.match(value.strip().lower())
    if match:
        day, month_name, year, hour, minute, second = match.groups()
        month = MONTHS.get(month_name)
        if month is None:
            logger.warning(f"Unknown month name '{month_name}'")
            return None
        try:
            return datetime(int(year), month, int(day), int(hour), int(minute), int(second))
        except ValueError:
            return None

    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_european_decimal(value: str) -> float | None:
    """
    Parse a decimal that may use a comma as decimal separator.

    Returns None for blanks, garbage and non-finite values ("nan", "inf").

    Example:
        >>> parse_european_decimal("2,50000")
        2.5
    """
    if not value or not value.strip():
        return None
    try:
        number = float(value.strip().replace(",", ".", 1))
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def detect_separator(header_line: str) -> str:
    """
    Pick the field separator from the header line.

    Headers carry no decimal numbers, so the most frequent candidate wins.
    Ties prefer ';' over TAB over ','.

    Args:
        header_line: First line of the file.

    Returns:
        ';', '\\t' or ','.
    """
    semicolons = header_line.count(";")
    commas = header_line.count(",")
    tabs = header_line.count("\t")

    if semicolons >= commas and semicolons >= tabs and semicolons > 0:
        return ";"
    if tabs >= commas and tabs > 0:
        return "\t"
    return ","


def _find_column(headers: list[str], *words: str) -> int | None:
    for index, header in enumerate(headers):
        lowered = header.lower()
        if all(word in lowered for word in words):
            return index
    return None


def parse_csv(content: str) -> CsvImportResult:
    """
    Parse a CSV export into practice sessions.

    Business context: Users migrate years of history from their previous
    time tracker. One unreadable row must not block the whole import, so
    row problems are reported instead of raised.

    Args:
        content: Full file content (CRLF or LF line endings).

    Returns:
        CsvImportResult with one RawSession (source "csv_import") per valid
        row and a message per skipped row.

    Raises:
        CsvImportError: If there is no data row, or the start time or
            duration column is missing.

    Example:
        >>> text = "Start time;Duration in hours\\n1. Feb 2024 at 18:00:00;1,5\\n"
        >>> parse_csv(text).sessions[0].duration_seconds
        5400
    """
    lines = [line for line in content.splitlines() if line.strip()]
    if len(lines) < 2:
        raise CsvImportError("CSV file must have headers and at least one data row")

    separator = detect_separator(lines[0])
    rows = list(csv.reader(lines, delimiter=separator))
    headers = [h.strip() for h in rows[0]]
    logger.debug(f"CSV separator {separator!r}, headers: {headers}")

    start_idx = _find_column(headers, "start", "time")
    if start_idx is None:
        raise CsvImportError(f'Could not find "Start time" column. Found headers: {", ".join(headers)}')
    duration_idx = _find_column(headers, "duration", "hours")
    if duration_idx is None:
        raise CsvImportError(
            f'Could not find "Duration in hours" column. Found headers: {", ".join(headers)}'
        )

    result = CsvImportResult()
    needed = max(start_idx, duration_idx) + 1
    for row_number, row in enumerate(rows[1:], start=2):
        values = [v.strip() for v in row]
        if len(values) < needed:
            result.errors.append(f"Row {row_number}: Got {len(values)} columns, need at least {needed}")
            continue

        started = parse_localized_date(values[start_idx])
        if started is None:
            result.errors.append(f'Row {row_number}: Could not parse date "{values[start_idx]}"')
            continue

        hours = parse_european_decimal(values[duration_idx])
        if hours is None or hours < 0:
            result.errors.append(f'Row {row_number}: Could not parse duration "{values[duration_idx]}"')
            continue

        result.sessions.append(
            RawSession(
                started_at=started.isoformat(),
                duration_seconds=round(hours * 3600),
                source="csv_import",
            )
        )

    logger.info(f"Parsed {len(result.sessions)} sessions, {len(result.errors)} errors")
    if result.errors:
        logger.warning(f"First CSV errors: {result.errors[:5]}")
    return result
