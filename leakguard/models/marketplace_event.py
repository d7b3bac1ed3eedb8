"""MarketplaceEvent model: marketplace listings and direct bookings."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leakguard.db.session import Base

EVENT_SOURCE_MARKETPLACE = "marketplace"
EVENT_SOURCE_DIRECT = "direct"


class MarketplaceEvent(Base):
    """An event needing staff: posted on the marketplace or booked directly with a company."""

    __tablename__ = "marketplace_events"

    __table_args__ = (Index("ix_marketplace_events_source_type", "source", "event_type"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    event_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    event_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    location_postcode: Mapped[str | None] = mapped_column(String(16), nullable=True)
    status: Mapped[str] = mapped_column(String(32), default="open", nullable=False)
    source: Mapped[str] = mapped_column(
        String(32), default=EVENT_SOURCE_MARKETPLACE, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    days: Mapped[list[EventDay]] = relationship(
        "EventDay", back_populates="event", cascade="all, delete-orphan"
    )
