"""SQLAlchemy models."""

from leakguard.models.event_day import EventDay
from leakguard.models.integrity_case import IntegrityCase
from leakguard.models.integrity_config import IntegrityConfig
from leakguard.models.integrity_score import IntegrityScore
from leakguard.models.integrity_signal import IntegritySignal
from leakguard.models.marketplace_conversation import MarketplaceConversation
from leakguard.models.marketplace_event import MarketplaceEvent
from leakguard.models.marketplace_message import MarketplaceMessage
from leakguard.models.marketplace_quote import MarketplaceQuote

__all__ = [
    "EventDay",
    "IntegrityCase",
    "IntegrityConfig",
    "IntegrityScore",
    "IntegritySignal",
    "MarketplaceConversation",
    "MarketplaceEvent",
    "MarketplaceMessage",
    "MarketplaceQuote",
]
