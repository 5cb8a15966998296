"""
app/domain/source_rows.py

Typed views of spreadsheet rows between parsing and record building.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from app.domain.time_range import TimeRange


@dataclass(frozen=True)
class NormalizedRow:
    """
    One data row keyed by normalized header name, with its resolved date.
    """

    row_number: int
    date: dt.date
    cells: dict[str, str]
    date_carried: bool = False

    def pick(self, *columns: str) -> str | None:
        """
        Return the first non-blank cell among `columns`.
        """

        for column in columns:
            value = self.cells.get(column)
            if value is not None and value.strip():
                return value.strip()
        return None

    def pick_prefixed(self, *prefixes: str) -> str | None:
        """
        Like `pick`, for headers that vary in their tail (``title/ideas``).
        """

        for column, value in self.cells.items():
            if column.startswith(prefixes) and value.strip():
                return value.strip()
        return None


@dataclass(frozen=True)
class SlotCell:
    """
    A participant cell such as ``DJ Amor 21:30 - 23:00``.

    `time_range` is None when the cell carries a name only.
    """

    name: str
    time_range: TimeRange | None = None


@dataclass(frozen=True)
class NormalizationResult:
    """
    Rows that survived normalization plus what was dropped on the way.
    """

    header_found: bool
    rows: list[NormalizedRow] = field(default_factory=list)
    dropped_rows: int = 0
