"""IntegrityScore model: per-event aggregate risk score (one row per event)."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from leakguard.db.session import Base, JSONType


class IntegrityScore(Base):
    """Aggregate of all IntegritySignals for an event; overwritten on every recompute."""

    __tablename__ = "marketplace_integrity_scores"

    __table_args__ = (
        UniqueConstraint("event_id", name="uq_integrity_scores_event_id"),
        CheckConstraint("score >= 0 AND score <= 1000", name="ck_integrity_scores_score_range"),
        Index("ix_integrity_scores_band_score", "risk_band", "score"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("marketplace_events.id", ondelete="CASCADE"), nullable=False
    )
    company_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_band: Mapped[str] = mapped_column(String(16), nullable=False)
    contributing_signal_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    top_signal_types: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)
    latest_signal_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # repeat_offender_count and repeat_boost applied on the last recompute
    escalation_metadata: Mapped[dict | None] = mapped_column(JSONType, nullable=True)
    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
