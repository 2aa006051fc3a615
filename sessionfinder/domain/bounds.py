"""
Earliest and latest declared availability for one participant.

Used to tell players when the game master is usually around, before any
overlap has been computed.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from .models import Range, WeeklyPattern


@dataclass(frozen=True)
class AvailabilityBounds:
    """Earliest start and latest end across declared availability."""
    earliest: Optional[str] = None
    latest: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.earliest is None


def availability_bounds(
    patterns: Iterable[WeeklyPattern],
    ranges: Iterable[Range] = (),
) -> AvailabilityBounds:
    """
    Compute the availability bounds from patterns and specific ranges.

    Unavailable patterns are ignored. Returns empty bounds when nothing is
    declared.
    """
    spans = [(p.start, p.end) for p in patterns if p.is_available]
    spans.extend((r.start, r.end) for r in ranges)

    if not spans:
        return AvailabilityBounds()

    return AvailabilityBounds(
        earliest=min(start for start, _ in spans),
        latest=max(end for _, end in spans),
    )
