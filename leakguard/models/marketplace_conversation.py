"""MarketplaceConversation model."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from leakguard.db.session import Base


class MarketplaceConversation(Base):
    """Message thread between a client and a staffing company about a marketplace event."""

    __tablename__ = "marketplace_conversations"

    __table_args__ = (
        Index("ix_marketplace_conversations_company_last_message", "company_id", "last_message_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # SET NULL keeps the thread when its listing is deleted
    event_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("marketplace_events.id", ondelete="SET NULL"), nullable=True
    )
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    client_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    last_message_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
