"""
Participant availability rows loaded from a YAML or JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping

import yaml

from ..domain.exceptions import InvalidAvailabilityError, ParticipantSourceError
from ..domain.models import (
    AvailabilityException,
    CampaignWindow,
    ParticipantAvailability,
    Polarity,
    Range,
    WeeklyPattern,
)
from ..domain.time_primitives import format_time

logger = logging.getLogger(__name__)


def _field(row: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Read a row field stored either in camelCase or snake_case."""
    if camel in row:
        return row[camel]
    return row.get(snake, default)


def _time(row: Mapping[str, Any], camel: str, snake: str) -> Any:
    value = _field(row, camel, snake)
    # YAML 1.1 reads unquoted 18:00 as the base-60 integer 1080.
    if isinstance(value, int) and not isinstance(value, bool):
        return format_time(value)
    return value


def _parse_pattern(row: Mapping[str, Any]) -> WeeklyPattern:
    is_available = _field(row, "isAvailable", "is_available", True)
    polarity = row.get("polarity") or (Polarity.AVAILABLE if is_available else Polarity.UNAVAILABLE)
    return WeeklyPattern(
        day_of_week=_field(row, "dayOfWeek", "day_of_week"),
        start=_time(row, "startTime", "start_time"),
        end=_time(row, "endTime", "end_time"),
        polarity=polarity,
    )


def _parse_range(row: Mapping[str, Any]) -> Range:
    return Range(
        date=str(row.get("date")),
        start=_time(row, "startTime", "start_time"),
        end=_time(row, "endTime", "end_time"),
    )


def _parse_exception(row: Mapping[str, Any]) -> AvailabilityException:
    return AvailabilityException(
        date=str(row.get("date")),
        start=_time(row, "startTime", "start_time"),
        end=_time(row, "endTime", "end_time"),
        reason=row.get("reason"),
    )


def parse_participant(row: Mapping[str, Any]) -> ParticipantAvailability:
    """
    Shape one participant row into the engine's input record.

    Patterns carry an ``isAvailable`` flag (default true) or an explicit
    ``polarity``; ``availability`` rows are manual additions and
    ``exceptions`` rows are manual removals.

    Raises:
        ParticipantSourceError: If the row is malformed
    """
    participant_id = str(_field(row, "participantId", "participant_id") or row.get("id") or "")

    try:
        patterns = [_parse_pattern(p) for p in row.get("patterns") or []]
        return ParticipantAvailability(
            participant_id=participant_id,
            available_patterns=tuple(p for p in patterns if p.is_available),
            unavailable_patterns=tuple(p for p in patterns if not p.is_available),
            manual_additions=tuple(_parse_range(r) for r in row.get("availability") or []),
            manual_exceptions=tuple(_parse_exception(e) for e in row.get("exceptions") or []),
        )
    except (InvalidAvailabilityError, TypeError, AttributeError) as exc:
        raise ParticipantSourceError(
            f"Invalid availability for participant '{participant_id or '?'}': {exc}"
        ) from exc


class FileParticipantSource:
    """
    Participant source backed by a local YAML or JSON file.

    The file holds a top-level ``participants`` list, each entry shaped
    like the product's rows (see ``parse_participant``).
    """

    def __init__(self, data_file: Path):
        """
        Initialize the source.

        Args:
            data_file: Path to a ``.yaml``, ``.yml`` or ``.json`` file
        """
        self.data_file = data_file
        self.display_names: Dict[str, str] = {}
        self._participants = self._load_participant_data()

    def _read_rows(self) -> Any:
        if not self.data_file.exists():
            raise FileNotFoundError(f"Participants file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                if self.data_file.suffix.lower() == ".json":
                    return json.load(f)
                return yaml.safe_load(f) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ParticipantSourceError(f"Could not parse {self.data_file}: {exc}") from exc

    def _load_participant_data(self) -> List[ParticipantAvailability]:
        data = self._read_rows()
        if not isinstance(data, dict):
            raise ParticipantSourceError("Participants file must contain a mapping at the root level.")

        rows: Iterable[Mapping[str, Any]] = data.get("participants") or []
        participants: List[ParticipantAvailability] = []

        for row in rows:
            participant = parse_participant(row)
            name = _field(row, "displayName", "display_name")
            self.display_names[participant.participant_id] = name or participant.participant_id
            participants.append(participant)

        logger.debug("Loaded %d participant(s) from %s", len(participants), self.data_file)
        return participants

    def display_name(self, participant_id: str) -> str:
        return self.display_names.get(participant_id, participant_id)

    def find_participant(self, participant_id: str) -> ParticipantAvailability | None:
        """Find a participant by id, case-insensitively."""
        for participant in self._participants:
            if participant.participant_id.lower() == participant_id.lower():
                return participant
        return None

    async def get_participants(self, window: CampaignWindow) -> List[ParticipantAvailability]:
        """
        Return every participant in the file.

        The window is accepted for interface compatibility; the engine
        ignores rows outside it.
        """
        return list(self._participants)
