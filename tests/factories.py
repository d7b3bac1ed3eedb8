"""Row builders for marketplace history used across integrity tests."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

from sqlalchemy.orm import Session

from leakguard.models import (
    EventDay,
    MarketplaceConversation,
    MarketplaceEvent,
    MarketplaceMessage,
    MarketplaceQuote,
)
from leakguard.models.marketplace_event import EVENT_SOURCE_DIRECT, EVENT_SOURCE_MARKETPLACE


def make_event(
    db: Session,
    *,
    event_type: str | None = "festival",
    postcode: str | None = "SW1A 2BB",
    status: str = "open",
    source: str = EVENT_SOURCE_MARKETPLACE,
    days: list[date] | None = None,
) -> MarketplaceEvent:
    event = MarketplaceEvent(
        id=uuid.uuid4(),
        event_type=event_type,
        location_postcode=postcode,
        status=status,
        source=source,
    )
    db.add(event)
    for day in days or []:
        db.add(EventDay(event_id=event.id, event_date=day))
    db.commit()
    return event


def make_direct_event(db: Session, **kwargs) -> MarketplaceEvent:
    kwargs.setdefault("source", EVENT_SOURCE_DIRECT)
    kwargs.setdefault("status", "confirmed")
    return make_event(db, **kwargs)


def make_conversation(
    db: Session,
    *,
    company_id: uuid.UUID,
    event: MarketplaceEvent | None,
    messages: int,
    last_message_at: datetime | None = None,
) -> MarketplaceConversation:
    if last_message_at is None:
        last_message_at = datetime.now(UTC) - timedelta(days=1)
    convo = MarketplaceConversation(
        id=uuid.uuid4(),
        event_id=event.id if event is not None else None,
        company_id=company_id,
        last_message_at=last_message_at,
    )
    db.add(convo)
    db.flush()
    for i in range(messages):
        db.add(MarketplaceMessage(conversation_id=convo.id, body=f"message {i}"))
    db.commit()
    return convo


def make_quote(
    db: Session,
    *,
    company_id: uuid.UUID,
    event: MarketplaceEvent,
    status: str,
    submitted_at: datetime | None = None,
) -> MarketplaceQuote:
    quote = MarketplaceQuote(
        id=uuid.uuid4(),
        event_id=event.id,
        company_id=company_id,
        status=status,
        submitted_at=submitted_at or datetime.now(UTC) - timedelta(days=2),
    )
    db.add(quote)
    db.commit()
    return quote
