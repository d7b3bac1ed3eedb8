"""Integrity config resolver: singleton DB row over environment defaults."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from leakguard.config import get_settings
from leakguard.models.integrity_config import (
    INTEGRITY_CONFIG_SINGLETON_KEY,
    IntegrityConfig,
)
from leakguard.services.integrity.errors import IntegrityStorageError

if TYPE_CHECKING:
    from sqlalchemy.orm import Session


@dataclass(frozen=True)
class ResolvedIntegrityConfig:
    """Thresholds used by a single recompute."""

    medium_risk_threshold: int
    high_risk_threshold: int
    repeat_offender_case_window_days: int
    repeat_offender_confirmed_case_threshold: int
    repeat_offender_score_boost: int


def default_integrity_config() -> ResolvedIntegrityConfig:
    """Environment-backed defaults (35/70 bands, 180d/2 cases/+20 boost)."""
    settings = get_settings()
    return ResolvedIntegrityConfig(
        medium_risk_threshold=settings.integrity_medium_risk_threshold,
        high_risk_threshold=settings.integrity_high_risk_threshold,
        repeat_offender_case_window_days=settings.integrity_repeat_offender_window_days,
        repeat_offender_confirmed_case_threshold=settings.integrity_repeat_offender_case_threshold,
        repeat_offender_score_boost=settings.integrity_repeat_offender_score_boost,
    )


def get_integrity_config(db: Session) -> ResolvedIntegrityConfig:
    """Return the operator config row if present, else environment defaults.

    Raises IntegrityStorageError when the config table cannot be read.
    """
    try:
        row = db.get(IntegrityConfig, INTEGRITY_CONFIG_SINGLETON_KEY)
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to read integrity config: {exc}") from exc

    if row is None:
        return default_integrity_config()

    return ResolvedIntegrityConfig(
        medium_risk_threshold=row.medium_risk_threshold,
        high_risk_threshold=row.high_risk_threshold,
        repeat_offender_case_window_days=row.repeat_offender_case_window_days,
        repeat_offender_confirmed_case_threshold=row.repeat_offender_confirmed_case_threshold,
        repeat_offender_score_boost=row.repeat_offender_score_boost,
    )
