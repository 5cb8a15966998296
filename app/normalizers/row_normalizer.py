"""
app/normalizers/row_normalizer.py

Turns loosely formatted spreadsheet rows into typed values.

Published sheets are maintained by hand: banner rows sit above the real
header, one date often heads several rows, and times are typed as `21:30`,
`21;30` or `9:30`. Everything here returns None for a value it cannot read so
the caller can drop a single row instead of failing the batch.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from app.domain.source_rows import NormalizationResult, NormalizedRow, SlotCell
from app.domain.time_range import TimeRange
from app.parsing.tabular import is_blank_row

logger = logging.getLogger(__name__)

HEADER_SCAN_LIMIT = 25
DATE_COLUMNS: tuple[str, ...] = ("date", "deadline", "event_date")
_SENTINEL_CELLS = {"____"}
_EMPTY_SLOT_MARKERS = {"", "-", "—", "–", "n/a"}

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_NUMERIC_DATE = re.compile(r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4}|\d{2})\.?$")
_MONTH_NAME_DATE = re.compile(r"^(\d{1,2})[\s\-/.]+([A-Za-z]{3,9})\.?[\s\-/.,]+(\d{4}|\d{2})$")
_CLOCK = re.compile(r"^(\d{1,2})[:;](\d{2})$")
_SLOT_CELL = re.compile(
    r"^(?P<name>.+?)\s+(?P<start>\d{1,2}[:;]\d{2})\s*[-–—]\s*(?P<end>\d{1,2}[:;]\d{2})"
)
_WHITESPACE = re.compile(r"\s+")

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def normalize_header(name: str) -> str:
    return _WHITESPACE.sub("_", (name or "").strip().lower())


def _expand_year(raw: str) -> int:
    year = int(raw)
    return 2000 + year if len(raw) == 2 else year


def _safe_date(year: int, month: int, day: int) -> dt.date | None:
    try:
        return dt.date(year, month, day)
    except ValueError:
        return None


def parse_date(raw: str | None) -> dt.date | None:
    """
    Parse ISO, day-first numeric and day-month-name dates.

    Two-digit years are read as 20xx.
    """

    value = (raw or "").strip()
    if not value:
        return None

    match = _ISO_DATE.match(value)
    if match:
        return _safe_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    match = _NUMERIC_DATE.match(value)
    if match:
        return _safe_date(_expand_year(match.group(3)), int(match.group(2)), int(match.group(1)))

    match = _MONTH_NAME_DATE.match(value)
    if match:
        month = _MONTHS.get(match.group(2)[:3].lower())
        if month is None:
            return None
        return _safe_date(_expand_year(match.group(3)), month, int(match.group(1)))

    return None


def parse_clock(raw: str | None) -> int | None:
    """
    Parse `HH:MM` (or the `HH;MM` typo) into minutes after midnight.
    """

    match = _CLOCK.match((raw or "").strip())
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes > 59:
        return None
    if hours == 24 and minutes == 0:
        return 0
    if hours > 23:
        return None
    return hours * 60 + minutes


def parse_slot_cell(cell: str | None) -> SlotCell | None:
    """
    Split ``[prefix] <name> <start> - <end>`` into a name and a time range.

    A cell with a name but no readable range keeps the name. A cell without
    any letters (a bare ``21:30 - 23:00``) names nobody and is ignored.
    """

    value = _WHITESPACE.sub(" ", (cell or "").strip())
    if value.lower() in _EMPTY_SLOT_MARKERS or not any(ch.isalpha() for ch in value):
        return None

    match = _SLOT_CELL.match(value)
    if match:
        name = match.group("name").strip()
        start = parse_clock(match.group("start"))
        end = parse_clock(match.group("end"))
        if start is not None and end is not None:
            return SlotCell(name=name, time_range=TimeRange.from_clock_minutes(start, end))
        return SlotCell(name=name)

    return SlotCell(name=value)


@dataclass(frozen=True)
class HeaderSpec:
    """
    How to recognize the real header row of one feed's sheet.
    """

    is_marker_column: Callable[[str], bool]
    date_columns: tuple[str, ...] = DATE_COLUMNS
    scan_limit: int = HEADER_SCAN_LIMIT

    def matches(self, columns: Sequence[str]) -> bool:
        has_date = any(column in self.date_columns for column in columns)
        return has_date and any(self.is_marker_column(column) for column in columns)


def locate_header(rows: Sequence[Sequence[str]], spec: HeaderSpec) -> tuple[int, list[str]] | None:
    """
    Return (row index, normalized column names) of the first matching header.
    """

    for index, row in enumerate(rows[: spec.scan_limit]):
        columns = [normalize_header(cell) for cell in row]
        if spec.matches(columns):
            return index, columns
    return None


class RowNormalizer:
    """
    Maps raw rows under a located header to dated `NormalizedRow`s.
    """

    def __init__(self, header_spec: HeaderSpec) -> None:
        self._header_spec = header_spec

    def normalize(self, rows: Sequence[Sequence[str]]) -> NormalizationResult:
        located = locate_header(rows, self._header_spec)
        if located is None:
            return NormalizationResult(header_found=False)

        header_index, columns = located
        normalized: list[NormalizedRow] = []
        dropped = 0
        last_date: dt.date | None = None

        for index in range(header_index + 1, len(rows)):
            row = rows[index]
            if is_blank_row(list(row)) or (row and row[0].strip() in _SENTINEL_CELLS):
                continue

            cells = self._label_cells(columns, row)
            raw_date = next(
                (cells[name] for name in self._header_spec.date_columns if cells.get(name)),
                "",
            )

            carried = False
            if raw_date:
                row_date = parse_date(raw_date)
                if row_date is None:
                    dropped += 1
                    logger.debug("Dropping row with unreadable date row=%s value=%r", index + 1, raw_date)
                    continue
                last_date = row_date
            elif last_date is not None:
                row_date = last_date
                carried = True
            else:
                dropped += 1
                logger.debug("Dropping row with no date context row=%s", index + 1)
                continue

            normalized.append(
                NormalizedRow(
                    row_number=index + 1,
                    date=row_date,
                    cells=cells,
                    date_carried=carried,
                )
            )

        return NormalizationResult(header_found=True, rows=normalized, dropped_rows=dropped)

    @staticmethod
    def _label_cells(columns: Sequence[str], row: Sequence[str]) -> dict[str, str]:
        cells: dict[str, str] = {}
        for position, column in enumerate(columns):
            if not column:
                continue
            value = row[position].strip() if position < len(row) else ""
            # Duplicate header names: the first non-blank cell wins.
            if not cells.get(column):
                cells[column] = value
        return cells
