"""Integrity signal and score schemas for request/response validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DirectBookingIngest(BaseModel):
    """Facts about a newly confirmed direct booking, sent by the booking workflow."""

    direct_event_id: UUID
    actor_user_id: UUID
    company_id: UUID
    event_type: Optional[str] = Field(None, max_length=64)
    location_postcode: Optional[str] = Field(None, max_length=16)
    first_event_date: Optional[date] = None


class IntegritySignalRead(BaseModel):
    """Schema for reading one evidence row (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: UUID
    related_event_id: Optional[UUID] = None
    related_conversation_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    actor_user_id: UUID
    signal_type: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    weight: int
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class IntegrityScoreRead(BaseModel):
    """Schema for reading an event's aggregate score (response)."""

    model_config = ConfigDict(from_attributes=True)

    event_id: UUID
    company_id: Optional[UUID] = None
    score: int = Field(..., ge=0, le=1000)
    risk_band: str
    contributing_signal_count: int
    top_signal_types: list[str] = Field(default_factory=list)
    latest_signal_at: Optional[datetime] = None
    escalation_metadata: Optional[dict[str, Any]] = None
    computed_at: datetime
    updated_by: Optional[UUID] = None


class IngestionResponse(BaseModel):
    """Result of a direct-booking ingestion."""

    signal_types: list[str]
    conversations_scanned: int
    score: IntegrityScoreRead


class IntegrityOverview(BaseModel):
    """Risk band counts and highest-risk events for the review dashboard."""

    band_counts: dict[str, int]
    total_scored: int
    top_events: list[IntegrityScoreRead]
