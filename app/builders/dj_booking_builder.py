"""
app/builders/dj_booking_builder.py

Builds `dj_payments` candidates from the "week at a glance" bookings sheet.

Each dated row names an event and up to three DJ slots
(``DJ Amor 21:30 - 23:00``). Every slot with a readable time range becomes its
own candidate with a fee of hours x base rate x event multiplier. Owners are
checked before any other classification: they always play for a zero fee with
payment marked not applicable.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

from app.builders.base import FeedRecordBuilder, RowBuild
from app.classifiers.dj import (
    ParticipantRoster,
    classify_event_type,
    classify_participant_type,
    classify_payer,
    compute_amount,
    multiplier_for,
    participant_key,
)
from app.classifiers.rules import fold_text
from app.config import DJBookingFeedSettings
from app.domain.dj_booking import DJBookingCandidate
from app.domain.field_ownership import FieldOwnership
from app.domain.source_rows import NormalizedRow, SlotCell
from app.domain.time_range import TimeRange
from app.normalizers.row_normalizer import HeaderSpec, parse_slot_cell
from db.models.dj_payment import (
    DJ_PAYMENT_IDENTITY_FIELDS,
    DJ_PAYMENT_OPERATOR_FIELDS,
    DJ_PAYMENT_RECOMPUTED_FIELDS,
    DJ_PAYMENT_SOURCE_FIELDS,
    DJSetStatus,
    DJType,
    PayerType,
    PaymentStatus,
)

logger = logging.getLogger(__name__)

DJ_FEED_NAME = "dj_bookings"

SLOT_COLUMNS: tuple[tuple[str, ...], ...] = (
    ("dj_1", "dj1", "dj_01"),
    ("dj_2", "dj2", "dj_02"),
    ("dj_3", "dj3", "dj_03"),
)
EVENT_COLUMNS: tuple[str, ...] = ("event", "event_name", "name", "title")
LAYOUT_COLUMNS: tuple[str, ...] = ("layout", "mode", "format", "club_lounge")
CANCELLED_STATUSES = {"cancel", "cancelled", "canceled"}
DEFAULT_EVENT_NAME = "Event"

_SLOT_COLUMN = re.compile(r"^dj_?\d+$")

DJ_PAYMENT_OWNERSHIP = FieldOwnership(
    table="dj_payments",
    source_fields=DJ_PAYMENT_SOURCE_FIELDS,
    operator_fields=DJ_PAYMENT_OPERATOR_FIELDS,
    recomputed_fields=DJ_PAYMENT_RECOMPUTED_FIELDS,
    identity_fields=DJ_PAYMENT_IDENTITY_FIELDS,
)

DJ_HEADER_SPEC = HeaderSpec(
    is_marker_column=lambda column: bool(_SLOT_COLUMN.match(column)) or column.startswith("dj_"),
)


def build_dj_sync_key(date: dt.date, event_name: str, dj_name: str, time_range: TimeRange) -> str:
    return ":".join(
        (
            date.isoformat(),
            fold_text(event_name)[:30],
            fold_text(dj_name),
            time_range.start_clock,
        )
    )


class DJBookingBuilder(FeedRecordBuilder):
    """
    Record builder for the DJ bookings feed.
    """

    feed_name = DJ_FEED_NAME
    ownership = DJ_PAYMENT_OWNERSHIP

    def __init__(
        self,
        *,
        roster: ParticipantRoster,
        base_rate_vnd: int,
        min_date: dt.date | None = None,
    ) -> None:
        super().__init__(DJ_HEADER_SPEC)
        self._roster = roster
        self._base_rate_vnd = base_rate_vnd
        self._min_date = min_date

    @classmethod
    def from_settings(cls, settings: DJBookingFeedSettings) -> DJBookingBuilder:
        return cls(
            roster=ParticipantRoster.from_names(
                owner_names=settings.owner_names,
                foreign_names=settings.foreign_names,
                known_names=settings.known_names,
            ),
            base_rate_vnd=settings.base_rate_vnd,
            min_date=settings.min_date,
        )

    def insert_payload(self, candidate: DJBookingCandidate) -> dict[str, Any]:
        return {
            **candidate.source_values(),
            "sync_key": candidate.sync_key,
            "payment_status": candidate.initial_payment_status,
            "amount_override": False,
            "receipt_uploaded": False,
            "synced_from_source": True,
        }

    def _build_row(self, row: NormalizedRow, *, today: dt.date) -> RowBuild:
        if self._min_date is not None and row.date < self._min_date:
            return RowBuild()

        status_raw = (row.pick("status") or "").lower()
        if status_raw in CANCELLED_STATUSES:
            logger.debug("Ignoring cancelled event row=%s", row.row_number)
            return RowBuild()

        event_name = row.pick(*EVENT_COLUMNS) or DEFAULT_EVENT_NAME
        event_type = classify_event_type(event_name, row.pick(*LAYOUT_COLUMNS))
        status = DJSetStatus.SCHEDULED if row.date > today else DJSetStatus.DONE

        result = RowBuild()
        for columns in SLOT_COLUMNS:
            slot = parse_slot_cell(row.pick(*columns))
            if slot is None:
                continue
            result.participants.append(slot.name)
            if slot.time_range is None:
                result.skipped_slots += 1
                logger.info(
                    "Skipping DJ slot without a set time row=%s dj=%r",
                    row.row_number,
                    slot.name,
                )
                continue
            result.candidates.append(
                self._build_candidate(
                    row=row,
                    slot=slot,
                    time_range=slot.time_range,
                    event_name=event_name,
                    event_type=event_type,
                    status=status,
                )
            )
        return result

    def _build_candidate(
        self,
        *,
        row: NormalizedRow,
        slot: SlotCell,
        time_range: TimeRange,
        event_name: str,
        event_type: str,
        status: str,
    ) -> DJBookingCandidate:
        multiplier = multiplier_for(event_type)

        # Owner rule overrides payer, type and fee before generic classification runs.
        if self._roster.is_owner(slot.name):
            payer_type = PayerType.COMPANY
            dj_type = DJType.LOCAL
            amount = 0
            payment_status = PaymentStatus.NOT_APPLICABLE
            is_owner = True
        else:
            payer_type = classify_payer(slot.name, self._roster)
            dj_type = classify_participant_type(slot.name, self._roster)
            amount = compute_amount(time_range.duration_minutes, self._base_rate_vnd, multiplier)
            payment_status = PaymentStatus.UNPAID
            is_owner = False

        return DJBookingCandidate(
            sync_key=build_dj_sync_key(row.date, event_name, slot.name, time_range),
            date=row.date,
            event_name=event_name,
            event_type=event_type,
            dj_name=slot.name,
            dj_type=dj_type,
            time_range=time_range,
            base_rate_vnd=self._base_rate_vnd,
            multiplier=multiplier,
            amount_vnd=amount,
            payer_type=payer_type,
            status=status,
            initial_payment_status=payment_status,
            is_owner=is_owner,
            source_row=row.row_number,
        )

    def _unrecognized(self, participants: list[str]) -> list[str]:
        seen: set[str] = set()
        unknown: list[str] = []
        for name in participants:
            key = participant_key(name)
            if key in seen or self._roster.is_known(name):
                continue
            seen.add(key)
            unknown.append(name)
        return unknown
