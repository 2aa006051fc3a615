"""
Domain models for availability resolution and overlap calculation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple

from .exceptions import InvalidAvailabilityError
from .time_primitives import END_OF_DAY, parse_date, validate_date, validate_tick_time


def _check_span(start: str, end: str) -> None:
    validate_tick_time(start)
    validate_tick_time(end, allow_end_of_day=True)
    if start >= end:
        raise InvalidAvailabilityError(f"Start time {start} must be before end time {end}")


@dataclass(frozen=True)
class Range:
    """
    Represents an immutable half-open time range ``[start, end)`` on one date.

    Invariant: start must be before end, and both sit on the tick grid.
    """
    date: str
    start: str
    end: str

    def __post_init__(self):
        validate_date(self.date)
        _check_span(self.start, self.end)

    def sort_key(self) -> Tuple[str, str, str]:
        return (self.date, self.start, self.end)

    def __str__(self) -> str:
        return f"{self.date} {self.start}-{self.end}"


class Polarity(str, Enum):
    """Whether a weekly pattern declares free or busy time."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class WeeklyPattern:
    """
    A recurring day-of-week rule, unanchored to any specific date.

    ``day_of_week`` runs from 0 (Sunday) to 6 (Saturday).
    """
    day_of_week: int
    start: str
    end: str
    polarity: Polarity = Polarity.AVAILABLE

    def __post_init__(self):
        if isinstance(self.day_of_week, bool) or not isinstance(self.day_of_week, int):
            raise InvalidAvailabilityError(f"day_of_week must be an integer, got {self.day_of_week!r}")
        if not 0 <= self.day_of_week <= 6:
            raise InvalidAvailabilityError(f"day_of_week must be between 0 and 6, got {self.day_of_week}")
        _check_span(self.start, self.end)
        # Accept plain strings from row data.
        try:
            polarity = Polarity(self.polarity)
        except ValueError as exc:
            raise InvalidAvailabilityError(f"Unknown pattern polarity {self.polarity!r}") from exc
        object.__setattr__(self, "polarity", polarity)

    @property
    def is_available(self) -> bool:
        return self.polarity is Polarity.AVAILABLE


@dataclass(frozen=True)
class AvailabilityException:
    """A one-off blackout on a specific date; overrides everything else."""
    date: str
    start: str
    end: str
    reason: Optional[str] = None

    def __post_init__(self):
        validate_date(self.date)
        _check_span(self.start, self.end)

    def to_range(self) -> Range:
        return Range(date=self.date, start=self.start, end=self.end)


@dataclass(frozen=True)
class ParticipantAvailability:
    """
    Raw availability declarations for one participant.

    These are the four layered inputs of the priority pipeline; nothing
    here is resolved yet.
    """
    participant_id: str
    available_patterns: Tuple[WeeklyPattern, ...] = ()
    unavailable_patterns: Tuple[WeeklyPattern, ...] = ()
    manual_additions: Tuple[Range, ...] = ()
    manual_exceptions: Tuple[AvailabilityException, ...] = ()

    def __post_init__(self):
        if not self.participant_id:
            raise InvalidAvailabilityError("participant_id must not be empty")
        for name in ("available_patterns", "unavailable_patterns", "manual_additions", "manual_exceptions"):
            object.__setattr__(self, name, tuple(getattr(self, name)))


@dataclass(frozen=True)
class CampaignWindow:
    """
    The campaign's date range and shared daily time window.

    ``earliest_time == latest_time`` means the window spans the whole day.
    Both bounds sit on the tick grid.
    Windows that cross midnight are rejected; inputs must already be split
    per date by the caller.
    """
    start_date: str
    end_date: str
    earliest_time: str = "00:00"
    latest_time: str = "00:00"

    def __post_init__(self):
        if parse_date(self.start_date) > parse_date(self.end_date):
            raise InvalidAvailabilityError(
                f"Start date {self.start_date} must not be after end date {self.end_date}"
            )
        validate_tick_time(self.earliest_time)
        validate_tick_time(self.latest_time, allow_end_of_day=True)
        if self.is_full_day:
            return
        if self.earliest_time > self.latest_time:
            raise InvalidAvailabilityError(
                f"Daily window {self.earliest_time}-{self.latest_time} crosses midnight"
            )

    @property
    def is_full_day(self) -> bool:
        return self.earliest_time == self.latest_time

    def daily_bounds(self) -> Tuple[str, str]:
        """The effective ``(start, end)`` of each day in the window."""
        if self.is_full_day:
            return ("00:00", END_OF_DAY)
        return (self.earliest_time, self.latest_time)

    def contains_date(self, value: str) -> bool:
        return self.start_date <= value <= self.end_date


class Tick(NamedTuple):
    """One atomic time unit, keyed by date ordinal and minute of day."""
    day: int
    minute: int


@dataclass(frozen=True)
class HeatmapCell:
    """How many participants are free during one tick, and who."""
    count: int
    participant_ids: Tuple[str, ...]


@dataclass(frozen=True)
class OverlapSlot:
    """
    A merged candidate meeting range and the participants free for it.
    """
    date: str
    start: str
    end: str
    available_participant_ids: Tuple[str, ...]
    total_participants: int

    @property
    def available_count(self) -> int:
        return len(self.available_participant_ids)

    def format_display(self) -> str:
        return (
            f"{self.date} {self.start}-{self.end} "
            f"({self.available_count}/{self.total_participants})"
        )


@dataclass(frozen=True)
class OverlapResult:
    """Everyone-free slots and most-people-free slots for a campaign window."""
    perfect_slots: list = field(default_factory=list)
    best_slots: list = field(default_factory=list)


@dataclass(frozen=True)
class SessionCandidate:
    """A start time with enough consecutive shared availability for a full session."""
    date: str
    start: str
    end: str
    participant_ids: Tuple[str, ...]
