"""Marketplace integrity engine: disintermediation signals and risk scores."""

from leakguard.services.integrity.constants import IntegritySignalType, RiskBand
from leakguard.services.integrity.errors import IntegrityStorageError
from leakguard.services.integrity.pass_on import record_pass_on_activity
from leakguard.services.integrity.pattern_detector import (
    IngestionResult,
    ingest_marketplace_to_direct_signals,
    outward_postcode,
)
from leakguard.services.integrity.review import get_integrity_score, integrity_overview
from leakguard.services.integrity.score_aggregator import (
    compute_integrity_score,
    recompute_integrity_score,
    risk_band_for_score,
)
from leakguard.services.integrity.signal_store import (
    clamp_confidence,
    list_event_signals,
    record_integrity_signal,
)

__all__ = [
    "IngestionResult",
    "IntegritySignalType",
    "IntegrityStorageError",
    "RiskBand",
    "clamp_confidence",
    "compute_integrity_score",
    "get_integrity_score",
    "ingest_marketplace_to_direct_signals",
    "integrity_overview",
    "list_event_signals",
    "outward_postcode",
    "recompute_integrity_score",
    "record_integrity_signal",
    "record_pass_on_activity",
    "risk_band_for_score",
]
