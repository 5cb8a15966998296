"""
app/domain/dj_booking.py

Canonical DJ set parsed from the bookings sheet.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.domain.time_range import TimeRange


@dataclass(frozen=True)
class DJBookingCandidate:
    """
    One DJ set with its derived fee, ready to merge into `dj_payments`.
    """

    sync_key: str
    date: dt.date
    event_name: str
    event_type: str
    dj_name: str
    dj_type: str
    time_range: TimeRange
    base_rate_vnd: int
    multiplier: Decimal
    amount_vnd: int
    payer_type: str
    status: str
    initial_payment_status: str
    is_owner: bool = False
    source_row: int | None = None

    @property
    def duration_hours(self) -> Decimal:
        return self.time_range.duration_hours

    def source_values(self) -> dict[str, Any]:
        """
        Column values the feed is allowed to write, including the computed fee.
        """

        return {
            "date": self.date,
            "event_name": self.event_name,
            "event_type": self.event_type,
            "dj_name": self.dj_name,
            "dj_type": self.dj_type,
            "set_start": self.time_range.start_time,
            "set_end": self.time_range.end_time,
            "duration_hours": self.duration_hours,
            "base_rate_vnd": self.base_rate_vnd,
            "multiplier": self.multiplier,
            "payer_type": self.payer_type,
            "status": self.status,
            "amount_vnd": self.amount_vnd,
        }
