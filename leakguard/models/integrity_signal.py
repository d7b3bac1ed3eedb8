"""IntegritySignal model: append-only disintermediation evidence log."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import CheckConstraint, DateTime, Float, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leakguard.db.session import Base, JSONType


class IntegritySignal(Base):
    """One weighted observation of off-platform leakage tied to a transaction.

    Rows are never updated or deleted by the engine; scores are derived from them.
    """

    __tablename__ = "marketplace_integrity_signals"

    __table_args__ = (
        CheckConstraint(
            "confidence >= 0 AND confidence <= 1", name="ck_integrity_signals_confidence_range"
        ),
        Index("ix_integrity_signals_event_created", "event_id", "created_at"),
        Index("ix_integrity_signals_company", "company_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("marketplace_events.id", ondelete="CASCADE"), nullable=False
    )
    related_event_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    related_conversation_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    company_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    actor_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    signal_type: Mapped[str] = mapped_column(String(64), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
    details: Mapped[dict] = mapped_column(JSONType, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
