"""
app/domain/time_range.py

Minute-of-day ranges parsed from spreadsheet slot cells.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

MINUTES_PER_DAY = 1440


@dataclass(frozen=True)
class TimeRange:
    """
    A set time as minute offsets from the start of the booking day.

    `end` may exceed 1440 when the set runs past midnight.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        if not 0 <= self.start < MINUTES_PER_DAY:
            raise ValueError(f"start must be within one day, got {self.start}.")
        if not self.start <= self.end <= self.start + MINUTES_PER_DAY:
            raise ValueError(f"end must follow start within one day, got {self.start}-{self.end}.")

    @classmethod
    def from_clock_minutes(cls, start: int, end: int) -> TimeRange:
        """
        Build a range from two clock readings; an earlier end wraps past midnight.
        """

        if end < start:
            end += MINUTES_PER_DAY
        return cls(start=start, end=end)

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def duration_hours(self) -> Decimal:
        hours = Decimal(self.duration_minutes) / Decimal(60)
        return hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    @property
    def start_time(self) -> dt.time:
        return _minutes_to_time(self.start)

    @property
    def end_time(self) -> dt.time:
        return _minutes_to_time(self.end)

    @property
    def start_clock(self) -> str:
        return self.start_time.strftime("%H:%M:%S")

    @property
    def end_clock(self) -> str:
        return self.end_time.strftime("%H:%M:%S")


def _minutes_to_time(minutes: int) -> dt.time:
    wrapped = minutes % MINUTES_PER_DAY
    return dt.time(hour=wrapped // 60, minute=wrapped % 60)
