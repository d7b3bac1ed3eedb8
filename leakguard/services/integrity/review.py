"""Read side for reviewers: scores, evidence and the risk overview."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leakguard.models.integrity_score import IntegrityScore
from leakguard.services.integrity.constants import RiskBand
from leakguard.services.integrity.errors import IntegrityStorageError


def get_integrity_score(db: Session, event_id: uuid.UUID) -> IntegrityScore | None:
    """Return the event's score row, or None if it was never computed."""
    try:
        return db.query(IntegrityScore).filter(IntegrityScore.event_id == event_id).first()
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to read integrity scores: {exc}") from exc


def integrity_overview(db: Session, limit: int = 20) -> dict[str, Any]:
    """Counts per risk band and the highest-scoring events.

    Returns:
        dict with band_counts ({low, medium, high}), total_scored and
        top_events (IntegrityScore rows, score desc then most recent).
    """
    try:
        band_rows = (
            db.query(IntegrityScore.risk_band, func.count(IntegrityScore.id))
            .group_by(IntegrityScore.risk_band)
            .all()
        )
        top_events = (
            db.query(IntegrityScore)
            .order_by(IntegrityScore.score.desc(), IntegrityScore.computed_at.desc())
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to read integrity scores: {exc}") from exc

    band_counts = {band.value: 0 for band in RiskBand}
    for band, count in band_rows:
        band_counts[band] = int(count)
    return {
        "band_counts": band_counts,
        "total_scored": sum(band_counts.values()),
        "top_events": top_events,
    }
