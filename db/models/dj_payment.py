"""
db/models/dj_payment.py

One DJ set per row: scheduling facts imported from the bookings sheet plus the
payment workflow state operators maintain in the dashboard.
"""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, Date, Index, Numeric, String, Text, Time, false
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, SourceSyncMixin, TimestampMixin


class DJEventType:
    DEFAULT = "default"
    TET = "tet"
    NEW_YEAR = "new_year"
    PARTNERSHIP = "partnership"


class DJType:
    FOREIGNER = "foreigner"
    LOCAL = "local"


class PayerType:
    OWNER_PERSONAL = "owner_personal"
    COMPANY = "company"


class DJSetStatus:
    SCHEDULED = "scheduled"
    DONE = "done"


class PaymentStatus:
    PAID = "paid"
    UNPAID = "unpaid"
    NOT_APPLICABLE = "na"


# Written by the feed on every sync.
DJ_PAYMENT_SOURCE_FIELDS: frozenset[str] = frozenset(
    {
        "date",
        "event_type",
        "dj_type",
        "set_start",
        "set_end",
        "duration_hours",
        "base_rate_vnd",
        "multiplier",
        "payer_type",
        "status",
    }
)

# Written on insert only; both are folded into the sync key.
DJ_PAYMENT_IDENTITY_FIELDS: frozenset[str] = frozenset({"event_name", "dj_name"})

# Recomputed by the feed only while amount_override is false.
DJ_PAYMENT_RECOMPUTED_FIELDS: frozenset[str] = frozenset({"amount_vnd"})

# Owned by operators once the row exists; never part of a sync update.
DJ_PAYMENT_OPERATOR_FIELDS: frozenset[str] = frozenset(
    {
        "payment_status",
        "amount_override",
        "receipt_uploaded",
        "notes",
    }
)


class DJPayment(Base, SourceSyncMixin, TimestampMixin):
    __tablename__ = "dj_payments"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    event_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DJEventType.DEFAULT,
        comment="default, tet, new_year, partnership",
    )
    dj_name: Mapped[str] = mapped_column(String(120), nullable=False)
    dj_type: Mapped[str | None] = mapped_column(String(16), nullable=True)
    set_start: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    set_end: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    duration_hours: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    base_rate_vnd: Mapped[int] = mapped_column(BigInteger, nullable=False)
    multiplier: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False, default=Decimal("1.0"))
    amount_vnd: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    amount_override: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    payer_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=DJSetStatus.SCHEDULED)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default=PaymentStatus.UNPAID)
    receipt_uploaded: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_dj_payments_date", "date"),
        Index("ix_dj_payments_dj_name", "dj_name"),
        Index("ix_dj_payments_payment_status", "payment_status"),
    )
