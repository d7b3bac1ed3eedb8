"""Marketplace integrity scoring constants.

Centralized configuration for the signal engine. No magic numbers inside the
detector or aggregator; weights and confidences are fixed per signal source
and are never user-supplied.
"""

from __future__ import annotations

from enum import Enum


class IntegritySignalType(str, Enum):
    """Closed set of disintermediation evidence types."""

    THREAD_NO_CONVERT = "THREAD_NO_CONVERT"
    PROXIMITY_CLONE = "PROXIMITY_CLONE"
    MARKETPLACE_TO_DIRECT_SWITCH = "MARKETPLACE_TO_DIRECT_SWITCH"
    PASS_ON_ACTIVITY = "PASS_ON_ACTIVITY"
    EVENT_COLLISION_DUPLICATE = "EVENT_COLLISION_DUPLICATE"
    # Reserved: no detector emits this yet
    REFERRAL_LOOP_ABUSE = "REFERRAL_LOOP_ABUSE"


class RiskBand(str, Enum):
    """Categorical risk band derived from an integrity score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Score aggregation ───────────────────────────────────────────────────

SCORE_CAP: int = 1000
TOP_SIGNAL_TYPES_LIMIT: int = 5

# Literal thresholds on the capped 0-1000 scale. Bands saturate early; kept as-is
# until product confirms the intended scale.
DEFAULT_MEDIUM_RISK_THRESHOLD: int = 35
DEFAULT_HIGH_RISK_THRESHOLD: int = 70


# ── Pattern detector ────────────────────────────────────────────────────

# Single-message threads are noise; real engagement starts at two messages.
THREAD_NO_CONVERT_MIN_MESSAGES: int = 2
THREAD_NO_CONVERT_BASE_CONFIDENCE: float = 0.45
THREAD_NO_CONVERT_CONFIDENCE_PER_MESSAGE: float = 0.08
THREAD_NO_CONVERT_WEIGHT: int = 24

MARKETPLACE_TO_DIRECT_SWITCH_CONFIDENCE: float = 0.68
MARKETPLACE_TO_DIRECT_SWITCH_WEIGHT: int = 28
MARKETPLACE_TO_DIRECT_SWITCH_REASON: str = (
    "Direct event created after active marketplace thread with no on-platform conversion"
)

PROXIMITY_CLONE_CONFIDENCE: float = 0.82
PROXIMITY_CLONE_WEIGHT: int = 36

EVENT_COLLISION_DUPLICATE_CONFIDENCE: float = 0.88
EVENT_COLLISION_DUPLICATE_WEIGHT: int = 40
EVENT_COLLISION_DUPLICATE_REASON: str = (
    "matching event date + type + postcode area with prior marketplace event"
)

ON_PLATFORM_CONVERTED_STATUS: str = "awarded"

# ── Pass-on hand-offs (action -> (confidence, weight)) ──────────────────

PASS_ON_ACTIVITY_PROFILES: dict[str, tuple[float, int]] = {
    "initiated": (0.42, 12),
    "accept": (0.50, 14),
    "decline": (0.35, 8),
}


def thread_no_convert_confidence(message_count: int) -> float:
    """Confidence grows with thread length, saturating at 1.0."""
    return min(
        1.0,
        THREAD_NO_CONVERT_BASE_CONFIDENCE + THREAD_NO_CONVERT_CONFIDENCE_PER_MESSAGE * message_count,
    )
