"""Marketplace-to-direct pattern detector.

Given a newly confirmed direct (off-platform) booking, looks back over the
company's recent marketplace activity and logs integrity signals when that
activity plausibly should have converted on-platform:

- THREAD_NO_CONVERT + MARKETPLACE_TO_DIRECT_SWITCH: a thread with real
  engagement (>= 2 messages) that never produced an award.
- PROXIMITY_CLONE: the thread's listing matches the direct booking on
  outward postcode, first date (within 14 days) and event type.
- EVENT_COLLISION_DUPLICATE: a listing the company quoted on shares an exact
  day, postcode area and type with the direct booking.

All reads happen before the first write, so a read failure aborts the
ingestion with nothing recorded. Signals are written one at a time in
conversation-recency order, then the event's score is recomputed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy import func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from leakguard.config import get_settings
from leakguard.models.event_day import EventDay
from leakguard.models.integrity_score import IntegrityScore
from leakguard.models.marketplace_conversation import MarketplaceConversation
from leakguard.models.marketplace_event import EVENT_SOURCE_MARKETPLACE, MarketplaceEvent
from leakguard.models.marketplace_message import MarketplaceMessage
from leakguard.models.marketplace_quote import QUOTE_STATUS_WITHDRAWN, MarketplaceQuote
from leakguard.services.integrity.constants import (
    EVENT_COLLISION_DUPLICATE_CONFIDENCE,
    EVENT_COLLISION_DUPLICATE_REASON,
    EVENT_COLLISION_DUPLICATE_WEIGHT,
    MARKETPLACE_TO_DIRECT_SWITCH_CONFIDENCE,
    MARKETPLACE_TO_DIRECT_SWITCH_REASON,
    MARKETPLACE_TO_DIRECT_SWITCH_WEIGHT,
    ON_PLATFORM_CONVERTED_STATUS,
    PROXIMITY_CLONE_CONFIDENCE,
    PROXIMITY_CLONE_WEIGHT,
    THREAD_NO_CONVERT_MIN_MESSAGES,
    THREAD_NO_CONVERT_WEIGHT,
    IntegritySignalType,
    thread_no_convert_confidence,
)
from leakguard.services.integrity.errors import IntegrityStorageError
from leakguard.services.integrity.score_aggregator import recompute_integrity_score
from leakguard.services.integrity.signal_store import record_integrity_signal

logger = logging.getLogger(__name__)


# ── Matching helpers ────────────────────────────────────────────────


def outward_postcode(postcode: str | None) -> str | None:
    """Return the outward code (before the first space), upper-cased.

    ``"sw1a 1aa"`` -> ``"SW1A"``. Empty or missing postcodes return None.
    """
    if not postcode:
        return None
    normalized = postcode.strip().upper()
    if not normalized:
        return None
    return normalized.split(" ")[0] or None


def postcodes_near(candidate: str | None, direct: str | None) -> bool:
    """True if candidate equals direct or shares its outward code."""
    if not candidate:
        return False
    if candidate == direct:
        return True
    direct_outward = outward_postcode(direct)
    return direct_outward is not None and outward_postcode(candidate) == direct_outward


def date_diff_days(a: date, b: date) -> int:
    """Absolute whole-day distance between two dates."""
    return abs((a - b).days)


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ── Data carriers ───────────────────────────────────────────────────


@dataclass(frozen=True)
class DirectBooking:
    """Identifying facts of the direct booking under review."""

    event_id: uuid.UUID
    actor_user_id: uuid.UUID
    company_id: uuid.UUID
    event_type: str | None
    location_postcode: str | None
    first_event_date: date | None


@dataclass(frozen=True)
class ConversationFacts:
    """Everything the detector needs about one marketplace thread."""

    conversation_id: uuid.UUID
    related_event_id: uuid.UUID | None
    last_message_at: datetime | None
    message_count: int
    quote_status: str | None
    related_event_type: str | None = None
    related_event_status: str | None = None
    related_postcode: str | None = None
    related_first_date: date | None = None
    related_event_found: bool = False


@dataclass(frozen=True)
class ConversationAssessment:
    """Pattern checks for one thread against the direct booking."""

    on_platform_converted: bool
    thread_no_convert: bool
    postcode_matches: bool
    date_matches: bool
    type_matches: bool

    @property
    def proximity_clone(self) -> bool:
        return self.postcode_matches and self.date_matches and self.type_matches


@dataclass
class IngestionResult:
    """Outcome of one ingestion: signal types written (in order) and the refreshed score."""

    signal_types: list[str] = field(default_factory=list)
    conversations_scanned: int = 0
    score: IntegrityScore | None = None


def assess_conversation(
    facts: ConversationFacts,
    booking: DirectBooking,
    proximity_days: int = 14,
) -> ConversationAssessment:
    """Evaluate conversion, thread abandonment and proximity for one thread.

    A thread whose listing is gone (``related_event_found`` False) never
    matches on postcode or type, but can still be an abandoned thread.
    """
    converted = (
        facts.quote_status == ON_PLATFORM_CONVERTED_STATUS
        or facts.related_event_status == ON_PLATFORM_CONVERTED_STATUS
    )
    thread_no_convert = facts.message_count >= THREAD_NO_CONVERT_MIN_MESSAGES and not converted
    postcode_matches = facts.related_event_found and postcodes_near(
        facts.related_postcode, booking.location_postcode
    )
    date_matches = (
        booking.first_event_date is not None
        and facts.related_first_date is not None
        and date_diff_days(booking.first_event_date, facts.related_first_date) <= proximity_days
    )
    type_matches = (
        facts.related_event_found
        and bool(facts.related_event_type)
        and facts.related_event_type == booking.event_type
    )
    return ConversationAssessment(
        on_platform_converted=converted,
        thread_no_convert=thread_no_convert,
        postcode_matches=postcode_matches,
        date_matches=date_matches,
        type_matches=type_matches,
    )


def build_conversation_signals(
    facts: ConversationFacts,
    assessment: ConversationAssessment,
    booking: DirectBooking,
) -> list[dict[str, Any]]:
    """Signal payloads (record_integrity_signal kwargs) for one thread, in write order."""
    common = {
        "event_id": booking.event_id,
        "related_event_id": facts.related_event_id,
        "related_conversation_id": facts.conversation_id,
        "company_id": booking.company_id,
        "actor_user_id": booking.actor_user_id,
    }
    payloads: list[dict[str, Any]] = []
    if assessment.thread_no_convert:
        payloads.append(
            {
                **common,
                "signal_type": IntegritySignalType.THREAD_NO_CONVERT,
                "confidence": thread_no_convert_confidence(facts.message_count),
                "weight": THREAD_NO_CONVERT_WEIGHT,
                "details": {
                    "message_count": facts.message_count,
                    "quote_status": facts.quote_status,
                    "conversation_last_message_at": _iso(facts.last_message_at),
                },
            }
        )
        payloads.append(
            {
                **common,
                "signal_type": IntegritySignalType.MARKETPLACE_TO_DIRECT_SWITCH,
                "confidence": MARKETPLACE_TO_DIRECT_SWITCH_CONFIDENCE,
                "weight": MARKETPLACE_TO_DIRECT_SWITCH_WEIGHT,
                "details": {"reason": MARKETPLACE_TO_DIRECT_SWITCH_REASON},
            }
        )
    if assessment.proximity_clone:
        payloads.append(
            {
                **common,
                "signal_type": IntegritySignalType.PROXIMITY_CLONE,
                "confidence": PROXIMITY_CLONE_CONFIDENCE,
                "weight": PROXIMITY_CLONE_WEIGHT,
                "details": {
                    "direct_event_type": booking.event_type,
                    "marketplace_event_type": facts.related_event_type,
                    "direct_postcode": booking.location_postcode,
                    "marketplace_postcode": facts.related_postcode,
                    "direct_first_date": _iso(booking.first_event_date),
                    "marketplace_first_date": _iso(facts.related_first_date),
                },
            }
        )
    return payloads


# ── Store reads ─────────────────────────────────────────────────────


def _apply_scan_timeout(db: Session, timeout_ms: int) -> None:
    """Bound detector reads with a transaction-local statement_timeout (PostgreSQL only)."""
    if timeout_ms <= 0 or db.get_bind().dialect.name != "postgresql":
        return
    db.execute(
        text("SELECT set_config('statement_timeout', :value, true)"),
        {"value": f"{timeout_ms}ms"},
    )


def _fetch_recent_conversations(
    db: Session, company_id: uuid.UUID, lookback_days: int, limit: int
) -> list[MarketplaceConversation]:
    cutoff = datetime.now(UTC) - timedelta(days=lookback_days)
    return (
        db.query(MarketplaceConversation)
        .filter(
            MarketplaceConversation.company_id == company_id,
            MarketplaceConversation.last_message_at >= cutoff,
        )
        .order_by(
            MarketplaceConversation.last_message_at.desc(),
            MarketplaceConversation.created_at.desc(),
        )
        .limit(limit)
        .all()
    )


def _first_event_dates(db: Session, event_ids: set[uuid.UUID]) -> dict[uuid.UUID, date]:
    if not event_ids:
        return {}
    rows = (
        db.query(EventDay.event_id, func.min(EventDay.event_date))
        .filter(EventDay.event_id.in_(list(event_ids)))
        .group_by(EventDay.event_id)
        .all()
    )
    return {event_id: first_date for event_id, first_date in rows if first_date is not None}


def gather_conversation_facts(
    db: Session,
    conversations: list[MarketplaceConversation],
    company_id: uuid.UUID,
) -> list[ConversationFacts]:
    """Collect message counts, listing details, quote status and first day per thread.

    One set-based query per fact kind across all threads (bounded by the
    conversation cap). Output order follows ``conversations``.
    """
    if not conversations:
        return []
    conversation_ids = [c.id for c in conversations]
    event_ids = {c.event_id for c in conversations if c.event_id is not None}

    message_counts = dict(
        db.query(MarketplaceMessage.conversation_id, func.count(MarketplaceMessage.id))
        .filter(MarketplaceMessage.conversation_id.in_(conversation_ids))
        .group_by(MarketplaceMessage.conversation_id)
        .all()
    )

    events: dict[uuid.UUID, MarketplaceEvent] = {}
    quote_status: dict[uuid.UUID, str] = {}
    if event_ids:
        events = {
            e.id: e
            for e in db.query(MarketplaceEvent)
            .filter(MarketplaceEvent.id.in_(list(event_ids)))
            .all()
        }
        quotes = (
            db.query(MarketplaceQuote.event_id, MarketplaceQuote.status)
            .filter(
                MarketplaceQuote.event_id.in_(list(event_ids)),
                MarketplaceQuote.company_id == company_id,
            )
            .order_by(MarketplaceQuote.submitted_at.desc(), MarketplaceQuote.id)
            .all()
        )
        # Most recent quote per event wins
        for quote_event_id, status in quotes:
            quote_status.setdefault(quote_event_id, status)
    first_dates = _first_event_dates(db, event_ids)

    facts: list[ConversationFacts] = []
    for convo in conversations:
        event = events.get(convo.event_id) if convo.event_id is not None else None
        facts.append(
            ConversationFacts(
                conversation_id=convo.id,
                related_event_id=convo.event_id,
                last_message_at=convo.last_message_at,
                message_count=int(message_counts.get(convo.id, 0) or 0),
                quote_status=quote_status.get(convo.event_id) if convo.event_id else None,
                related_event_type=event.event_type if event else None,
                related_event_status=event.status if event else None,
                related_postcode=event.location_postcode if event else None,
                related_first_date=first_dates.get(convo.event_id) if convo.event_id else None,
                related_event_found=event is not None,
            )
        )
    return facts


def find_event_collisions(
    db: Session,
    booking: DirectBooking,
    prior_quote_limit: int,
) -> list[dict[str, Any]]:
    """EVENT_COLLISION_DUPLICATE payloads for listings the company quoted on.

    A prior marketplace listing collides when it shares an exact day with the
    direct booking's own days, is in the same postcode area and has the same
    type. No direct booking days means no collisions.
    """
    direct_days = {
        d
        for (d,) in db.query(EventDay.event_date)
        .filter(EventDay.event_id == booking.event_id)
        .all()
    }
    if not direct_days:
        return []

    quote_rows = (
        db.query(MarketplaceQuote.event_id)
        .filter(
            MarketplaceQuote.company_id == booking.company_id,
            MarketplaceQuote.status != QUOTE_STATUS_WITHDRAWN,
        )
        .order_by(MarketplaceQuote.submitted_at.desc())
        .limit(prior_quote_limit)
        .all()
    )
    prior_event_ids = list(dict.fromkeys(row.event_id for row in quote_rows))
    prior_event_ids = [eid for eid in prior_event_ids if eid != booking.event_id]
    if not prior_event_ids:
        return []

    prior_events = {
        e.id: e
        for e in db.query(MarketplaceEvent)
        .filter(
            MarketplaceEvent.id.in_(prior_event_ids),
            MarketplaceEvent.source == EVENT_SOURCE_MARKETPLACE,
        )
        .all()
    }
    if not prior_events:
        return []

    prior_days: dict[uuid.UUID, set[date]] = {}
    for event_id, event_date in (
        db.query(EventDay.event_id, EventDay.event_date)
        .filter(EventDay.event_id.in_(list(prior_events)))
        .all()
    ):
        prior_days.setdefault(event_id, set()).add(event_date)

    payloads: list[dict[str, Any]] = []
    for event_id in prior_event_ids:
        prior = prior_events.get(event_id)
        if prior is None:
            continue
        shares_date = bool(prior_days.get(prior.id, set()) & direct_days)
        type_same = bool(prior.event_type) and prior.event_type == booking.event_type
        postcode_near = postcodes_near(prior.location_postcode, booking.location_postcode)
        if not (shares_date and postcode_near and type_same):
            continue
        payloads.append(
            {
                "event_id": booking.event_id,
                "related_event_id": prior.id,
                "company_id": booking.company_id,
                "actor_user_id": booking.actor_user_id,
                "signal_type": IntegritySignalType.EVENT_COLLISION_DUPLICATE,
                "confidence": EVENT_COLLISION_DUPLICATE_CONFIDENCE,
                "weight": EVENT_COLLISION_DUPLICATE_WEIGHT,
                "details": {
                    "overlap_reason": EVENT_COLLISION_DUPLICATE_REASON,
                    "prior_event_status": prior.status,
                },
            }
        )
    return payloads


# ── Entry point ─────────────────────────────────────────────────────


def ingest_marketplace_to_direct_signals(
    db: Session,
    *,
    direct_event_id: uuid.UUID,
    actor_user_id: uuid.UUID,
    company_id: uuid.UUID,
    event_type: str | None,
    location_postcode: str | None,
    first_event_date: date | None,
) -> IngestionResult:
    """Scan recent marketplace history for a direct booking and log integrity signals.

    Steps:
    1. Fetch the company's threads active in the lookback window (newest
       first, capped).
    2. Gather per-thread facts and prior-quote collisions.
    3. Record signals sequentially: collisions, then per thread in
       recency order.
    4. Recompute the direct booking's score.

    Raises IntegrityStorageError on any read or write failure; nothing is
    swallowed.
    """
    settings = get_settings()
    booking = DirectBooking(
        event_id=direct_event_id,
        actor_user_id=actor_user_id,
        company_id=company_id,
        event_type=event_type,
        location_postcode=location_postcode,
        first_event_date=first_event_date,
    )

    try:
        _apply_scan_timeout(db, settings.integrity_scan_timeout_ms)
        conversations = _fetch_recent_conversations(
            db,
            company_id,
            lookback_days=settings.integrity_conversation_lookback_days,
            limit=settings.integrity_conversation_limit,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to fetch recent conversations: {exc}") from exc

    try:
        collisions = find_event_collisions(db, booking, settings.integrity_prior_quote_limit)
        facts = gather_conversation_facts(db, conversations, company_id)
    except SQLAlchemyError as exc:
        db.rollback()
        raise IntegrityStorageError(f"Failed to read marketplace history: {exc}") from exc

    result = IngestionResult(conversations_scanned=len(facts))

    for payload in collisions:
        record_integrity_signal(db, **payload)
        result.signal_types.append(payload["signal_type"].value)

    for convo_facts in facts:
        assessment = assess_conversation(
            convo_facts, booking, proximity_days=settings.integrity_date_proximity_days
        )
        logger.debug(
            "Conversation %s: messages=%s converted=%s no_convert=%s clone=%s",
            convo_facts.conversation_id,
            convo_facts.message_count,
            assessment.on_platform_converted,
            assessment.thread_no_convert,
            assessment.proximity_clone,
        )
        for payload in build_conversation_signals(convo_facts, assessment, booking):
            record_integrity_signal(db, **payload)
            result.signal_types.append(payload["signal_type"].value)

    if result.signal_types:
        logger.info(
            "Integrity signals logged for direct event %s: %s",
            direct_event_id,
            ", ".join(result.signal_types),
        )

    result.score = recompute_integrity_score(
        db,
        event_id=direct_event_id,
        company_id=company_id,
        actor_user_id=actor_user_id,
    )
    return result
