"""create dj_payments and content_posts tables

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "dj_payments",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("event_name", sa.String(length=255), nullable=False),
        sa.Column("event_type", sa.String(length=32), nullable=False, comment="default, tet, new_year, partnership"),
        sa.Column("dj_name", sa.String(length=120), nullable=False),
        sa.Column("dj_type", sa.String(length=16), nullable=True),
        sa.Column("set_start", sa.Time(), nullable=True),
        sa.Column("set_end", sa.Time(), nullable=True),
        sa.Column("duration_hours", sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column("base_rate_vnd", sa.BigInteger(), nullable=False),
        sa.Column("multiplier", sa.Numeric(precision=4, scale=2), nullable=False),
        sa.Column("amount_vnd", sa.BigInteger(), nullable=True),
        sa.Column("amount_override", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("payer_type", sa.String(length=32), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("payment_status", sa.String(length=16), nullable=False),
        sa.Column("receipt_uploaded", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "sync_key",
            sa.String(length=255),
            nullable=True,
            comment="Deterministic merge key built from the source row",
        ),
        sa.Column("synced_from_source", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sync_key"),
    )
    op.create_index("ix_dj_payments_date", "dj_payments", ["date"], unique=False)
    op.create_index("ix_dj_payments_dj_name", "dj_payments", ["dj_name"], unique=False)
    op.create_index("ix_dj_payments_payment_status", "dj_payments", ["payment_status"], unique=False)

    op.create_table(
        "content_posts",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("scheduled_date", sa.Date(), nullable=False),
        sa.Column("scheduled_time", sa.Time(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("pillar", sa.String(length=32), nullable=False),
        sa.Column("platform", sa.String(length=16), nullable=False, comment="instagram, facebook, tiktok, all"),
        sa.Column("content_type", sa.String(length=16), nullable=True),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("media_url", sa.Text(), nullable=True),
        sa.Column("brief_url", sa.Text(), nullable=True),
        sa.Column("link_air", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("source_notes", sa.Text(), nullable=True),
        sa.Column("assigned_to", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "sync_key",
            sa.String(length=255),
            nullable=True,
            comment="Deterministic merge key built from the source row",
        ),
        sa.Column("synced_from_source", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sync_key"),
    )
    op.create_index("ix_content_posts_scheduled_date", "content_posts", ["scheduled_date"], unique=False)
    op.create_index("ix_content_posts_platform", "content_posts", ["platform"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_content_posts_platform", table_name="content_posts")
    op.drop_index("ix_content_posts_scheduled_date", table_name="content_posts")
    op.drop_table("content_posts")
    op.drop_index("ix_dj_payments_payment_status", table_name="dj_payments")
    op.drop_index("ix_dj_payments_dj_name", table_name="dj_payments")
    op.drop_index("ix_dj_payments_date", table_name="dj_payments")
    op.drop_table("dj_payments")
