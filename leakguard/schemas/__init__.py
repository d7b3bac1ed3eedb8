"""Pydantic request/response schemas."""

from leakguard.schemas.integrity import (
    DirectBookingIngest,
    IngestionResponse,
    IntegrityOverview,
    IntegrityScoreRead,
    IntegritySignalRead,
)

__all__ = [
    "DirectBookingIngest",
    "IngestionResponse",
    "IntegrityOverview",
    "IntegrityScoreRead",
    "IntegritySignalRead",
]
