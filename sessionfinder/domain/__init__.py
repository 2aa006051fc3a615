"""
Domain layer - Pure business logic without external dependencies.
"""

from .bounds import AvailabilityBounds, availability_bounds
from .exceptions import (
    InvalidAvailabilityError,
    ParticipantSourceError,
    PatternTranslationError,
    SessionFinderError,
)
from .models import (
    AvailabilityException,
    CampaignWindow,
    HeatmapCell,
    OverlapResult,
    OverlapSlot,
    ParticipantAvailability,
    Polarity,
    Range,
    SessionCandidate,
    Tick,
    WeeklyPattern,
)
from .overlap_aggregator import OverlapAggregator, aggregate, build_heatmap, find_session_slots
from .priority_resolver import resolve, resolve_many

__all__ = [
    "AvailabilityBounds",
    "AvailabilityException",
    "CampaignWindow",
    "HeatmapCell",
    "InvalidAvailabilityError",
    "OverlapAggregator",
    "OverlapResult",
    "OverlapSlot",
    "ParticipantAvailability",
    "ParticipantSourceError",
    "PatternTranslationError",
    "Polarity",
    "Range",
    "SessionCandidate",
    "SessionFinderError",
    "Tick",
    "WeeklyPattern",
    "aggregate",
    "availability_bounds",
    "build_heatmap",
    "find_session_slots",
    "resolve",
    "resolve_many",
]
