"""
Application services for finding shared campaign session times.

Participants come from any object satisfying ``ParticipantSourceProtocol``;
resolution and ranking are left to ``OverlapAggregator``. Tests swap in a
stub source, the CLI uses the file source.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

from ..domain.models import (
    CampaignWindow,
    OverlapResult,
    ParticipantAvailability,
    Range,
    SessionCandidate,
)
from ..domain.overlap_aggregator import OverlapAggregator, aggregate, find_session_slots

logger = logging.getLogger(__name__)


class ParticipantSourceProtocol(Protocol):
    """Protocol describing the participant source behaviour needed by the service."""

    async def get_participants(self, window: CampaignWindow) -> List[ParticipantAvailability]:
        """Return raw availability records for every campaign participant."""


class SessionFinderService:
    """
    Orchestrates participant retrieval, resolution and overlap ranking.

    The window is fixed per service; every call re-reads the source and
    recomputes effective availability from scratch.
    """

    def __init__(
        self,
        participant_source: ParticipantSourceProtocol,
        window: CampaignWindow,
    ) -> None:
        self._participant_source = participant_source
        self._aggregator = OverlapAggregator(window=window)

    @property
    def window(self) -> CampaignWindow:
        return self._aggregator.window

    async def find_overlap(self) -> OverlapResult:
        """
        Retrieve participants, resolve their availability and rank slots.
        """
        effective = await self.resolve_all()
        result = aggregate(effective, self.window)

        logger.info(
            "Found %d perfect and %d best slot(s) for %d participant(s)",
            len(result.perfect_slots),
            len(result.best_slots),
            len(effective),
        )
        return result

    async def find_sessions(
        self,
        *,
        session_minutes: int,
        min_participants: Optional[int] = None,
    ) -> List[SessionCandidate]:
        """Session-length start times with enough shared availability."""
        effective = await self.resolve_all()
        return find_session_slots(
            effective,
            self.window,
            session_minutes=session_minutes,
            min_participants=min_participants,
        )

    async def fetch_participants(self) -> List[ParticipantAvailability]:
        """Fetch raw participant records for the window, duplicates included."""
        return await self._participant_source.get_participants(self.window)

    async def resolve_all(self) -> Dict[str, List[Range]]:
        """Effective availability per participant id, first record per id wins."""
        participants = await self.fetch_participants()
        return self._aggregator.resolve_participants(participants)
