"""Integrity score aggregation: recompute and upsert one event's risk score.

Score = round(sum(weight * confidence)) over every signal on file for the
event, plus an optional repeat-offender boost, capped at SCORE_CAP. The
read-signals-then-upsert sequence runs under a per-event lock so concurrent
recomputes cannot overwrite each other with a stale view of the log.
"""

from __future__ import annotations

import hashlib
import logging
import math
import threading
import uuid
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leakguard.models.integrity_case import CASE_STATUS_RESOLVED_CONFIRMED, IntegrityCase
from leakguard.models.integrity_score import IntegrityScore
from leakguard.services.integrity.config_resolver import (
    ResolvedIntegrityConfig,
    get_integrity_config,
)
from leakguard.services.integrity.constants import (
    DEFAULT_HIGH_RISK_THRESHOLD,
    DEFAULT_MEDIUM_RISK_THRESHOLD,
    SCORE_CAP,
    TOP_SIGNAL_TYPES_LIMIT,
    RiskBand,
)
from leakguard.services.integrity.errors import IntegrityStorageError
from leakguard.services.integrity.signal_store import list_event_signals

logger = logging.getLogger(__name__)

# Fixed pool of in-process locks; an event always maps to the same stripe.
_SCORE_LOCK_STRIPES: tuple[threading.Lock, ...] = tuple(threading.Lock() for _ in range(64))


class _SignalLike(Protocol):
    """Minimal interface for signal-like objects."""

    signal_type: str
    confidence: float
    weight: int
    created_at: datetime


@dataclass(frozen=True)
class ScoreComputation:
    """Result of aggregating one event's signals (before persistence)."""

    score: int
    weighted_score: int
    risk_band: RiskBand
    contributing_signal_count: int
    top_signal_types: list[str]
    latest_signal_at: datetime | None
    repeat_offender_count: int
    repeat_boost: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def risk_band_for_score(
    score: int,
    medium: int = DEFAULT_MEDIUM_RISK_THRESHOLD,
    high: int = DEFAULT_HIGH_RISK_THRESHOLD,
) -> RiskBand:
    """Map a score to its band: high >= 70, medium >= 35, else low (by default)."""
    if score >= high:
        return RiskBand.HIGH
    if score >= medium:
        return RiskBand.MEDIUM
    return RiskBand.LOW


def weighted_signal_score(signals: Iterable[_SignalLike]) -> int:
    """Round (half up) the sum of weight * confidence. Never negative."""
    total = sum(float(s.weight or 0) * float(s.confidence or 0) for s in signals)
    return max(0, _round_half_up(total))


def top_signal_types(
    signals: Iterable[_SignalLike], limit: int = TOP_SIGNAL_TYPES_LIMIT
) -> list[str]:
    """Distinct signal types in first-seen order, at most ``limit``.

    Pass signals newest first to get most-recent-first types.
    """
    seen: list[str] = []
    for s in signals:
        if s.signal_type in seen:
            continue
        seen.append(s.signal_type)
        if len(seen) >= limit:
            break
    return seen


def compute_integrity_score(
    signals: Sequence[_SignalLike],
    config: ResolvedIntegrityConfig,
    repeat_offender_count: int = 0,
) -> ScoreComputation:
    """Aggregate signals (newest first) into a capped score and band.

    Pure function: no I/O.
    """
    weighted = weighted_signal_score(signals)
    repeat_boost = (
        config.repeat_offender_score_boost
        if repeat_offender_count >= config.repeat_offender_confirmed_case_threshold
        else 0
    )
    score = min(SCORE_CAP, weighted + repeat_boost)
    return ScoreComputation(
        score=score,
        weighted_score=weighted,
        risk_band=risk_band_for_score(
            score,
            medium=config.medium_risk_threshold,
            high=config.high_risk_threshold,
        ),
        contributing_signal_count=len(signals),
        top_signal_types=top_signal_types(signals),
        latest_signal_at=signals[0].created_at if signals else None,
        repeat_offender_count=repeat_offender_count,
        repeat_boost=repeat_boost,
    )


def _lock_stripe(event_id: uuid.UUID) -> threading.Lock:
    digest = hashlib.sha256(str(event_id).encode("utf-8")).digest()
    return _SCORE_LOCK_STRIPES[int.from_bytes(digest[:4], "big") % len(_SCORE_LOCK_STRIPES)]


@contextmanager
def event_score_lock(db: Session, event_id: uuid.UUID) -> Iterator[None]:
    """Serialize recomputes for one event.

    In-process stripe lock always; on PostgreSQL also a transaction-scoped
    advisory lock so separate workers serialize too. The advisory lock is
    released by the commit or rollback that ends the caller's transaction,
    which must happen before this context exits.
    """
    with _lock_stripe(event_id):
        if db.get_bind().dialect.name == "postgresql":
            try:
                db.execute(
                    text("SELECT pg_advisory_xact_lock(hashtext(:key))"),
                    {"key": f"integrity_score:{event_id}"},
                )
            except SQLAlchemyError as exc:
                db.rollback()
                raise IntegrityStorageError(
                    f"Failed to read integrity signals: {exc}"
                ) from exc
        yield


def count_confirmed_cases(
    db: Session, company_id: uuid.UUID | None, window_days: int
) -> int:
    """Count the company's confirmed integrity cases closed within the window."""
    if company_id is None:
        return 0
    cutoff = datetime.now(UTC) - timedelta(days=window_days)
    try:
        count = (
            db.query(func.count(IntegrityCase.id))
            .filter(
                IntegrityCase.company_id == company_id,
                IntegrityCase.status == CASE_STATUS_RESOLVED_CONFIRMED,
                IntegrityCase.closed_at >= cutoff,
            )
            .scalar()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to read integrity cases: {exc}") from exc
    return int(count or 0)


def recompute_integrity_score(
    db: Session,
    event_id: uuid.UUID,
    company_id: uuid.UUID | None,
    actor_user_id: uuid.UUID | None,
) -> IntegrityScore:
    """Recompute the event's score from all signals on file and upsert it.

    Idempotent: an unchanged signal log yields the same row (computed_at aside).
    Reads and the upsert share one transaction under ``event_score_lock``;
    any failure rolls the transaction back and raises IntegrityStorageError.
    """
    with event_score_lock(db, event_id):
        config = get_integrity_config(db)
        signals = list_event_signals(db, event_id)
        repeat_count = count_confirmed_cases(
            db, company_id, config.repeat_offender_case_window_days
        )
        result = compute_integrity_score(signals, config, repeat_offender_count=repeat_count)

        try:
            row = (
                db.query(IntegrityScore)
                .filter(IntegrityScore.event_id == event_id)
                .first()
            )
            if row is None:
                row = IntegrityScore(event_id=event_id)
                db.add(row)
            row.company_id = company_id
            row.score = result.score
            row.risk_band = result.risk_band.value
            row.contributing_signal_count = result.contributing_signal_count
            row.top_signal_types = list(result.top_signal_types)
            row.latest_signal_at = result.latest_signal_at
            row.escalation_metadata = {
                "repeat_offender_count": result.repeat_offender_count,
                "repeat_boost": result.repeat_boost,
            }
            row.computed_at = datetime.now(UTC)
            row.updated_by = actor_user_id
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise IntegrityStorageError(f"Failed to upsert integrity score: {exc}") from exc

    logger.info(
        "Integrity score recomputed: event_id=%s score=%s band=%s signals=%s",
        event_id,
        result.score,
        result.risk_band.value,
        result.contributing_signal_count,
    )
    db.refresh(row)
    return row
