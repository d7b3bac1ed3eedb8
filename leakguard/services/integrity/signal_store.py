"""Integrity signal storage: the append-only evidence log."""

from __future__ import annotations

import logging
import math
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leakguard.models.integrity_signal import IntegritySignal
from leakguard.services.integrity.constants import IntegritySignalType
from leakguard.services.integrity.errors import IntegrityStorageError

logger = logging.getLogger(__name__)


def clamp_confidence(value: Any) -> float:
    """Clamp to [0, 1]. None, NaN and non-numeric values become 0."""
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(numeric):
        return 0.0
    return max(0.0, min(1.0, numeric))


def record_integrity_signal(
    db: Session,
    *,
    event_id: uuid.UUID,
    actor_user_id: uuid.UUID,
    signal_type: IntegritySignalType | str,
    confidence: Any,
    weight: int,
    company_id: uuid.UUID | None = None,
    related_event_id: uuid.UUID | None = None,
    related_conversation_id: uuid.UUID | None = None,
    details: dict[str, Any] | None = None,
) -> IntegritySignal:
    """Append one signal to the evidence log and commit.

    Confidence is clamped to [0, 1] and missing details default to ``{}``;
    neither is treated as an error. ``signal_type`` must belong to
    IntegritySignalType (ValueError otherwise) and ``weight`` must be
    non-negative.

    Parameters
    ----------
    db : Session
        SQLAlchemy session. The insert is committed here.
    event_id : UUID
        Transaction (direct booking) the evidence concerns.
    actor_user_id : UUID
        User whose action triggered the computation.
    signal_type : IntegritySignalType | str
        Evidence type.
    confidence : Any
        Certainty of this observation; normalised by ``clamp_confidence``.
    weight : int
        Severity multiplier fixed by the call site.

    Returns
    -------
    IntegritySignal
        The persisted row.

    Raises
    ------
    IntegrityStorageError
        ``Failed to log integrity signal: ...`` when the insert is rejected.
    """
    kind = IntegritySignalType(signal_type)
    if weight < 0:
        raise ValueError(f"Signal weight must be non-negative, got {weight}")

    clamped = clamp_confidence(confidence)
    signal = IntegritySignal(
        event_id=event_id,
        related_event_id=related_event_id,
        related_conversation_id=related_conversation_id,
        company_id=company_id,
        actor_user_id=actor_user_id,
        signal_type=kind.value,
        confidence=clamped,
        weight=int(weight),
        details=dict(details or {}),
    )
    try:
        db.add(signal)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to log integrity signal: {exc}") from exc

    logger.debug(
        "Integrity signal logged: event_id=%s type=%s confidence=%.2f weight=%s",
        event_id,
        kind.value,
        clamped,
        weight,
    )
    return signal


def list_event_signals(db: Session, event_id: uuid.UUID) -> list[IntegritySignal]:
    """Return all signals for an event, newest first.

    Ties on created_at fall back to insertion order (id desc).
    Raises IntegrityStorageError (``Failed to read integrity signals: ...``).
    """
    try:
        return (
            db.query(IntegritySignal)
            .filter(IntegritySignal.event_id == event_id)
            .order_by(IntegritySignal.created_at.desc(), IntegritySignal.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to read integrity signals: {exc}") from exc
