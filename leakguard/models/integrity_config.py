"""IntegrityConfig model: operator-tunable thresholds (singleton row)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from leakguard.db.session import Base

INTEGRITY_CONFIG_SINGLETON_KEY = "marketplace_integrity"


class IntegrityConfig(Base):
    """Singleton configuration for risk bands and repeat-offender escalation."""

    __tablename__ = "marketplace_integrity_config"

    singleton_key: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=INTEGRITY_CONFIG_SINGLETON_KEY
    )
    medium_risk_threshold: Mapped[int] = mapped_column(Integer, default=35, nullable=False)
    high_risk_threshold: Mapped[int] = mapped_column(Integer, default=70, nullable=False)
    repeat_offender_case_window_days: Mapped[int] = mapped_column(
        Integer, default=180, nullable=False
    )
    repeat_offender_confirmed_case_threshold: Mapped[int] = mapped_column(
        Integer, default=2, nullable=False
    )
    repeat_offender_score_boost: Mapped[int] = mapped_column(Integer, default=20, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )
