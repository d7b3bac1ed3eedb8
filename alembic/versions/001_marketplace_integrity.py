"""marketplace integrity schema

Revision ID: 001_marketplace_integrity
Revises:
Create Date: 2026-10-19

Marketplace collaborator tables (events, event days, conversations, messages,
quotes) plus the integrity signal log, per-event scores, review cases and the
singleton config row.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

revision: str = "001_marketplace_integrity"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "marketplace_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_name", sa.String(length=255), nullable=True),
        sa.Column("event_type", sa.String(length=64), nullable=True),
        sa.Column("location_postcode", sa.String(length=16), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("source", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_marketplace_events_source_type", "marketplace_events", ["source", "event_type"]
    )

    op.create_table(
        "event_days",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["marketplace_events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_event_days_event_date", "event_days", ["event_id", "event_date"])

    op.create_table(
        "marketplace_conversations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=True),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("client_user_id", sa.Uuid(), nullable=True),
        sa.Column("last_message_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["marketplace_events.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_marketplace_conversations_company_last_message",
        "marketplace_conversations",
        ["company_id", "last_message_at"],
    )

    op.create_table(
        "marketplace_messages",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("conversation_id", sa.Uuid(), nullable=False),
        sa.Column("sender_user_id", sa.Uuid(), nullable=True),
        sa.Column("body", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["marketplace_conversations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_marketplace_messages_conversation_id", "marketplace_messages", ["conversation_id"]
    )

    op.create_table(
        "marketplace_quotes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["event_id"], ["marketplace_events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_marketplace_quotes_event_company",
        "marketplace_quotes",
        ["event_id", "company_id", "submitted_at"],
    )

    op.create_table(
        "marketplace_integrity_signals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("related_event_id", sa.Uuid(), nullable=True),
        sa.Column("related_conversation_id", sa.Uuid(), nullable=True),
        sa.Column("company_id", sa.Uuid(), nullable=True),
        sa.Column("actor_user_id", sa.Uuid(), nullable=False),
        sa.Column("signal_type", sa.String(length=64), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("weight", sa.Integer(), nullable=False),
        sa.Column("details", JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "confidence >= 0 AND confidence <= 1", name="ck_integrity_signals_confidence_range"
        ),
        sa.ForeignKeyConstraint(["event_id"], ["marketplace_events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_integrity_signals_event_created",
        "marketplace_integrity_signals",
        ["event_id", "created_at"],
    )
    op.create_index(
        "ix_integrity_signals_company", "marketplace_integrity_signals", ["company_id"]
    )

    op.create_table(
        "marketplace_integrity_scores",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("company_id", sa.Uuid(), nullable=True),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("risk_band", sa.String(length=16), nullable=False),
        sa.Column("contributing_signal_count", sa.Integer(), nullable=False),
        sa.Column("top_signal_types", JSONB(), nullable=False),
        sa.Column("latest_signal_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("escalation_metadata", JSONB(), nullable=True),
        sa.Column("computed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_by", sa.Uuid(), nullable=True),
        sa.CheckConstraint(
            "score >= 0 AND score <= 1000", name="ck_integrity_scores_score_range"
        ),
        sa.ForeignKeyConstraint(["event_id"], ["marketplace_events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("event_id", name="uq_integrity_scores_event_id"),
    )
    op.create_index(
        "ix_integrity_scores_band_score",
        "marketplace_integrity_scores",
        ["risk_band", "score"],
    )

    op.create_table(
        "marketplace_integrity_cases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=True),
        sa.Column("company_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("opened_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_integrity_cases_company_status",
        "marketplace_integrity_cases",
        ["company_id", "status", "closed_at"],
    )

    op.create_table(
        "marketplace_integrity_config",
        sa.Column("singleton_key", sa.String(length=64), nullable=False),
        sa.Column("medium_risk_threshold", sa.Integer(), nullable=False),
        sa.Column("high_risk_threshold", sa.Integer(), nullable=False),
        sa.Column("repeat_offender_case_window_days", sa.Integer(), nullable=False),
        sa.Column("repeat_offender_confirmed_case_threshold", sa.Integer(), nullable=False),
        sa.Column("repeat_offender_score_boost", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("singleton_key"),
    )


def downgrade() -> None:
    op.drop_table("marketplace_integrity_config")
    op.drop_index("ix_integrity_cases_company_status", table_name="marketplace_integrity_cases")
    op.drop_table("marketplace_integrity_cases")
    op.drop_index("ix_integrity_scores_band_score", table_name="marketplace_integrity_scores")
    op.drop_table("marketplace_integrity_scores")
    op.drop_index("ix_integrity_signals_company", table_name="marketplace_integrity_signals")
    op.drop_index(
        "ix_integrity_signals_event_created", table_name="marketplace_integrity_signals"
    )
    op.drop_table("marketplace_integrity_signals")
    op.drop_index("ix_marketplace_quotes_event_company", table_name="marketplace_quotes")
    op.drop_table("marketplace_quotes")
    op.drop_index("ix_marketplace_messages_conversation_id", table_name="marketplace_messages")
    op.drop_table("marketplace_messages")
    op.drop_index(
        "ix_marketplace_conversations_company_last_message",
        table_name="marketplace_conversations",
    )
    op.drop_table("marketplace_conversations")
    op.drop_index("ix_event_days_event_date", table_name="event_days")
    op.drop_table("event_days")
    op.drop_index("ix_marketplace_events_source_type", table_name="marketplace_events")
    op.drop_table("marketplace_events")
