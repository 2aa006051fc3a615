"""
Core business logic for ranking meeting times across participants.

This is the heart of the application - pure domain logic without any
external dependencies (no API calls, no database, no I/O).
"""

import logging
import math
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence

from .exceptions import InvalidAvailabilityError
from .models import (
    CampaignWindow,
    HeatmapCell,
    OverlapResult,
    OverlapSlot,
    ParticipantAvailability,
    Range,
    SessionCandidate,
    Tick,
)
from .priority_resolver import resolve
from .slot_conversion import ranges_to_ticks, tick_for, tick_label, ticks_to_ranges
from .time_primitives import (
    TICK_MINUTES,
    advance_one_tick,
    date_ordinal,
    date_range,
    parse_time,
)

logger = logging.getLogger(__name__)


def tick_universe(window: CampaignWindow) -> List[Tick]:
    """Every tick of every date in the window, in chronological order."""
    day_start, day_end = window.daily_bounds()
    first_minute = parse_time(day_start)
    last_minute = parse_time(day_end)

    universe: List[Tick] = []
    for date in date_range(window.start_date, window.end_date):
        day = date_ordinal(date)
        minute = first_minute
        while minute < last_minute:
            universe.append(Tick(day=day, minute=minute))
            minute += TICK_MINUTES

    return universe


def build_heatmap(
    effective_by_participant: Mapping[str, Iterable[Range]],
    window: CampaignWindow,
) -> Dict[Tick, HeatmapCell]:
    """
    Count the free participants for every tick in the window.

    Args:
        effective_by_participant: Participant id -> effective ranges
        window: Campaign date range and daily window

    Returns:
        Tick -> HeatmapCell for the whole tick universe, zero counts included.
        Participant ids keep the input order.
    """
    tick_sets: Dict[str, FrozenSet[Tick]] = {
        participant_id: ranges_to_ticks(ranges)
        for participant_id, ranges in effective_by_participant.items()
    }

    heatmap: Dict[Tick, HeatmapCell] = {}
    for tick in tick_universe(window):
        free = tuple(
            participant_id
            for participant_id, ticks in tick_sets.items()
            if tick in ticks
        )
        heatmap[tick] = HeatmapCell(count=len(free), participant_ids=free)

    return heatmap


def _ticks_to_slots(
    ticks: Iterable[Tick],
    heatmap: Mapping[Tick, HeatmapCell],
    total_participants: int,
) -> List[OverlapSlot]:
    slots: List[OverlapSlot] = []

    for merged in ticks_to_ranges(ticks):
        first_tick = tick_for(merged.date, merged.start)
        slots.append(
            OverlapSlot(
                date=merged.date,
                start=merged.start,
                end=merged.end,
                available_participant_ids=heatmap[first_tick].participant_ids,
                total_participants=total_participants,
            )
        )

    return slots


def aggregate(
    effective_by_participant: Mapping[str, Iterable[Range]],
    window: CampaignWindow,
) -> OverlapResult:
    """
    Find the everyone-free and most-people-free slots in the window.

    Algorithm:
    1. Convert every participant's ranges to ticks
    2. Count free participants for each tick of the window
    3. Perfect ticks have every participant free; best ticks reach the
       highest count seen anywhere in the window (all ties are kept)
    4. Fold both tick sets back into ranges

    Both lists are empty when there are no participants or nobody is free.
    """
    total = len(effective_by_participant)
    if total == 0:
        return OverlapResult(perfect_slots=[], best_slots=[])

    heatmap = build_heatmap(effective_by_participant, window)
    max_count = max((cell.count for cell in heatmap.values()), default=0)

    if max_count == 0:
        logger.info("No participant is free anywhere in %s..%s", window.start_date, window.end_date)
        return OverlapResult(perfect_slots=[], best_slots=[])

    perfect_ticks = [tick for tick, cell in heatmap.items() if cell.count == total]
    best_ticks = [tick for tick, cell in heatmap.items() if cell.count == max_count]

    logger.debug(
        "%d perfect tick(s), %d best tick(s) at %d/%d participants",
        len(perfect_ticks),
        len(best_ticks),
        max_count,
        total,
    )

    return OverlapResult(
        perfect_slots=_ticks_to_slots(perfect_ticks, heatmap, total),
        best_slots=_ticks_to_slots(best_ticks, heatmap, total),
    )


def find_session_slots(
    effective_by_participant: Mapping[str, Iterable[Range]],
    window: CampaignWindow,
    session_minutes: int,
    min_participants: Optional[int] = None,
) -> List[SessionCandidate]:
    """
    Find every start time that can host a full session.

    A candidate needs ``ceil(session_minutes / TICK_MINUTES)`` consecutive
    ticks on one date whose common free participants number at least
    ``min_participants`` (everyone by default).

    Raises:
        InvalidAvailabilityError: If the session length or threshold is not positive
    """
    if session_minutes <= 0:
        raise InvalidAvailabilityError(f"session_minutes must be positive, got {session_minutes}")
    if min_participants is not None and min_participants <= 0:
        raise InvalidAvailabilityError(f"min_participants must be positive, got {min_participants}")

    total = len(effective_by_participant)
    if total == 0:
        return []

    threshold = total if min_participants is None else min_participants
    ticks_needed = math.ceil(session_minutes / TICK_MINUTES)
    heatmap = build_heatmap(effective_by_participant, window)

    qualifying: Dict[int, List[Tick]] = defaultdict(list)
    for tick, cell in heatmap.items():
        if cell.count >= threshold:
            qualifying[tick.day].append(tick)

    candidates: List[SessionCandidate] = []

    for day in sorted(qualifying):
        day_ticks = sorted(qualifying[day])

        for index in range(len(day_ticks) - ticks_needed + 1):
            run = day_ticks[index:index + ticks_needed]
            if any(b.minute - a.minute != TICK_MINUTES for a, b in zip(run, run[1:])):
                continue

            common = _common_participants(heatmap[tick].participant_ids for tick in run)
            if len(common) < threshold:
                continue

            date, start = tick_label(run[0])
            candidates.append(
                SessionCandidate(
                    date=date,
                    start=start,
                    end=advance_one_tick(tick_label(run[-1])[1]),
                    participant_ids=common,
                )
            )

    return candidates


def _common_participants(id_groups: Iterable[Sequence[str]]) -> tuple:
    groups = list(id_groups)
    shared = set(groups[0])
    for group in groups[1:]:
        shared &= set(group)
    return tuple(pid for pid in groups[0] if pid in shared)


class OverlapAggregator:
    """
    Aggregates many participants' availability for one campaign window.

    Raw participant records go through the priority resolver first, so
    callers can hand over rows exactly as they were fetched.
    """

    def __init__(self, window: CampaignWindow):
        self.window = window

    def resolve_participants(
        self,
        participants: Iterable[ParticipantAvailability],
    ) -> Dict[str, List[Range]]:
        """
        Resolve each participant's effective availability.

        Sources joining several tables can return the same participant more
        than once; only the first record per id is kept so every participant
        counts exactly once in the totals.
        """
        effective: Dict[str, List[Range]] = {}

        for participant in participants:
            if participant.participant_id in effective:
                logger.warning("Ignoring duplicate participant record: %s", participant.participant_id)
                continue
            effective[participant.participant_id] = resolve(participant, self.window)

        return effective

    def find_overlap(self, participants: Iterable[ParticipantAvailability]) -> OverlapResult:
        """Resolve and aggregate participants into perfect and best slots."""
        return aggregate(self.resolve_participants(participants), self.window)

    def heatmap(self, participants: Iterable[ParticipantAvailability]) -> Dict[Tick, HeatmapCell]:
        """Per-tick free counts for the window."""
        return build_heatmap(self.resolve_participants(participants), self.window)

    def find_sessions(
        self,
        participants: Iterable[ParticipantAvailability],
        session_minutes: int,
        min_participants: Optional[int] = None,
    ) -> List[SessionCandidate]:
        """Session-length candidates for the window."""
        return find_session_slots(
            self.resolve_participants(participants),
            self.window,
            session_minutes=session_minutes,
            min_participants=min_participants,
        )
