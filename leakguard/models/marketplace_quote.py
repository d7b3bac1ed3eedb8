"""MarketplaceQuote model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leakguard.db.session import Base

QUOTE_STATUS_WITHDRAWN = "withdrawn"


class MarketplaceQuote(Base):
    """A company's quote on a marketplace event (draft, submitted, awarded, declined, withdrawn)."""

    __tablename__ = "marketplace_quotes"

    __table_args__ = (
        Index("ix_marketplace_quotes_event_company", "event_id", "company_id", "submitted_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("marketplace_events.id", ondelete="CASCADE"), nullable=False
    )
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
