"""
Resolution of a participant's layered declarations into effective availability.

Precedence is applied as an ordered pipeline, highest priority last:

1. Available weekly patterns form the base
2. Unavailable weekly patterns are subtracted
3. Manual additions are merged back in (they can restore pattern-blocked time)
4. Manual exceptions are subtracted (they always win)

Swapping steps 3 and 4 changes results whenever an addition and an
exception target the same time, so the order is fixed in
``RESOLUTION_PIPELINE`` and every step is a separate pure function.
"""

import logging
from typing import Callable, Dict, Iterable, List, Tuple

from .models import CampaignWindow, ParticipantAvailability, Range
from .pattern_expander import expand
from .range_algebra import merge, subtract

logger = logging.getLogger(__name__)

ResolutionStep = Callable[[List[Range], ParticipantAvailability, CampaignWindow], List[Range]]


def _expand_for_window(patterns, window: CampaignWindow) -> List[Range]:
    return expand(
        patterns,
        window.start_date,
        window.end_date,
        daily_window=(window.earliest_time, window.latest_time),
    )


def base_from_patterns(
    effective: List[Range],
    participant: ParticipantAvailability,
    window: CampaignWindow,
) -> List[Range]:
    """Step 1: expand and merge the participant's available patterns."""
    return merge(list(effective) + _expand_for_window(participant.available_patterns, window))


def remove_unavailable(
    effective: List[Range],
    participant: ParticipantAvailability,
    window: CampaignWindow,
) -> List[Range]:
    """Step 2: subtract the participant's unavailable patterns."""
    return subtract(effective, _expand_for_window(participant.unavailable_patterns, window))


def apply_manual_additions(
    effective: List[Range],
    participant: ParticipantAvailability,
    window: CampaignWindow,
) -> List[Range]:
    """Step 3: merge in one-off additions dated inside the window."""
    additions = [r for r in participant.manual_additions if window.contains_date(r.date)]
    return merge(list(effective) + additions)


def apply_manual_exceptions(
    effective: List[Range],
    participant: ParticipantAvailability,
    window: CampaignWindow,
) -> List[Range]:
    """Step 4: subtract one-off exceptions; nothing overrides these."""
    removals = [
        exception.to_range()
        for exception in participant.manual_exceptions
        if window.contains_date(exception.date)
    ]
    return subtract(effective, removals)


RESOLUTION_PIPELINE: Tuple[Tuple[str, ResolutionStep], ...] = (
    ("available_patterns", base_from_patterns),
    ("unavailable_patterns", remove_unavailable),
    ("manual_additions", apply_manual_additions),
    ("manual_exceptions", apply_manual_exceptions),
)


def resolve(participant: ParticipantAvailability, window: CampaignWindow) -> List[Range]:
    """
    Compute a participant's effective availability for the campaign window.

    Args:
        participant: Raw declarations for one participant
        window: Campaign date range and daily window

    Returns:
        Merged free ranges ordered by date then start time
    """
    effective: List[Range] = []

    for step_name, step in RESOLUTION_PIPELINE:
        effective = step(effective, participant, window)
        logger.debug(
            "Participant %s after %s: %d range(s)",
            participant.participant_id,
            step_name,
            len(effective),
        )

    return effective


def resolve_many(
    participants: Iterable[ParticipantAvailability],
    window: CampaignWindow,
) -> Dict[str, List[Range]]:
    """Resolve every participant, keyed by participant id in input order."""
    return {
        participant.participant_id: resolve(participant, window)
        for participant in participants
    }
