"""IntegrityCase model: reviewer case opened from a risky score."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leakguard.db.session import Base

CASE_STATUS_RESOLVED_CONFIRMED = "resolved_confirmed"


class IntegrityCase(Base):
    """Review case. Owned by the review workflow; the engine only counts confirmed cases."""

    __tablename__ = "marketplace_integrity_cases"

    __table_args__ = (Index("ix_integrity_cases_company_status", "company_id", "status", "closed_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    company_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="open", nullable=False)
    opened_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
