"""Internal integrity endpoints.

Called by the direct-booking workflow and read by the review dashboard.
Secured with the static internal token (X-Internal-Token header).
IntegrityStorageError is mapped to 503 by the app-level handler.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from leakguard.api.deps import get_db, require_internal_token
from leakguard.schemas.integrity import (
    DirectBookingIngest,
    IngestionResponse,
    IntegrityOverview,
    IntegrityScoreRead,
    IntegritySignalRead,
)
from leakguard.services.integrity import (
    get_integrity_score,
    ingest_marketplace_to_direct_signals,
    integrity_overview,
    list_event_signals,
    recompute_integrity_score,
)

router = APIRouter(
    prefix="/internal/integrity",
    include_in_schema=False,
    dependencies=[Depends(require_internal_token)],
)


@router.post("/ingest", response_model=IngestionResponse)
def ingest_direct_booking(payload: DirectBookingIngest, db: Session = Depends(get_db)):
    """Scan marketplace history for a confirmed direct booking and rescore it."""
    result = ingest_marketplace_to_direct_signals(
        db,
        direct_event_id=payload.direct_event_id,
        actor_user_id=payload.actor_user_id,
        company_id=payload.company_id,
        event_type=payload.event_type,
        location_postcode=payload.location_postcode,
        first_event_date=payload.first_event_date,
    )
    return IngestionResponse(
        signal_types=result.signal_types,
        conversations_scanned=result.conversations_scanned,
        score=IntegrityScoreRead.model_validate(result.score),
    )


@router.post("/events/{event_id}/recompute", response_model=IntegrityScoreRead)
def recompute_event_score(
    event_id: UUID,
    company_id: UUID | None = Query(None),
    actor_user_id: UUID | None = Query(None),
    db: Session = Depends(get_db),
):
    """Recompute one event's score from the signals on file."""
    return recompute_integrity_score(
        db, event_id=event_id, company_id=company_id, actor_user_id=actor_user_id
    )


@router.get("/events/{event_id}/score", response_model=IntegrityScoreRead)
def read_event_score(event_id: UUID, db: Session = Depends(get_db)):
    score = get_integrity_score(db, event_id)
    if score is None:
        raise HTTPException(status_code=404, detail="Integrity score not found")
    return score


@router.get("/events/{event_id}/signals", response_model=list[IntegritySignalRead])
def read_event_signals(event_id: UUID, db: Session = Depends(get_db)):
    return list_event_signals(db, event_id)


@router.get("/overview", response_model=IntegrityOverview)
def read_overview(
    limit: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    """Risk band counts and highest-risk events."""
    return integrity_overview(db, limit=limit)
