"""PASS_ON_ACTIVITY signals for attribution hand-offs between companies."""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from leakguard.models.integrity_score import IntegrityScore
from leakguard.services.integrity.constants import PASS_ON_ACTIVITY_PROFILES, IntegritySignalType
from leakguard.services.integrity.score_aggregator import recompute_integrity_score
from leakguard.services.integrity.signal_store import record_integrity_signal


def record_pass_on_activity(
    db: Session,
    *,
    event_id: uuid.UUID,
    company_id: uuid.UUID | None,
    actor_user_id: uuid.UUID,
    handoff_id: uuid.UUID,
    action: str,
) -> IntegrityScore:
    """Log a hand-off step (initiated, accept, decline) and refresh the event's score.

    Errors propagate; the hand-off workflow decides whether they are fatal.
    """
    profile = PASS_ON_ACTIVITY_PROFILES.get(action)
    if profile is None:
        raise ValueError(f"Unknown pass-on action: {action!r}")
    confidence, weight = profile

    record_integrity_signal(
        db,
        event_id=event_id,
        related_event_id=event_id,
        company_id=company_id,
        actor_user_id=actor_user_id,
        signal_type=IntegritySignalType.PASS_ON_ACTIVITY,
        confidence=confidence,
        weight=weight,
        details={"handoff_id": str(handoff_id), "action": action},
    )
    return recompute_integrity_score(
        db,
        event_id=event_id,
        company_id=company_id,
        actor_user_id=actor_user_id,
    )
