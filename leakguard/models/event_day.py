"""EventDay model."""

from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leakguard.db.session import Base


class EventDay(Base):
    """One scheduled day of an event. An event's first day is its earliest event_date."""

    __tablename__ = "event_days"

    __table_args__ = (Index("ix_event_days_event_date", "event_id", "event_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    event_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("marketplace_events.id", ondelete="CASCADE"), nullable=False
    )
    event_date: Mapped[date] = mapped_column(Date, nullable=False)

    event: Mapped["MarketplaceEvent"] = relationship("MarketplaceEvent", back_populates="days")
