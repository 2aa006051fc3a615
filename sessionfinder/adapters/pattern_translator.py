"""
Client for the external free-text to weekly-pattern translator.
"""

import logging
from typing import Any, Dict, List, Protocol

import requests

from ..domain.exceptions import InvalidAvailabilityError, PatternTranslationError
from ..domain.models import WeeklyPattern

logger = logging.getLogger(__name__)


class PatternTranslatorProtocol(Protocol):
    """Anything that turns a sentence like "weeknights after 7" into patterns."""

    def translate(self, free_text: str, timezone: str) -> List[WeeklyPattern]:
        """Return weekly patterns in the engine's shape."""


class HttpPatternTranslator:
    """
    HTTP client for a translator service.

    Request body: ``{"text": ..., "timezone": ...}``

    Response format:
    {
        "patterns": [
            {"dayOfWeek": 1, "startTime": "18:00", "endTime": "22:00"}
        ],
        "interpretation": "Mondays 6-10pm"
    }
    """

    def __init__(self, url: str, api_key: str | None = None, timeout_seconds: int = 30):
        """
        Initialize the translator client.

        Args:
            url: Endpoint accepting the translation request
            api_key: Optional bearer token
            timeout_seconds: Per-request timeout
        """
        self.url = url
        self.timeout_seconds = timeout_seconds
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["Authorization"] = f"Bearer {api_key}"

    def translate(self, free_text: str, timezone: str) -> List[WeeklyPattern]:
        """
        Translate free text into weekly patterns.

        Args:
            free_text: The participant's own description of when they are free
            timezone: IANA timezone the text was written in

        Returns:
            Weekly patterns, already validated

        Raises:
            PatternTranslationError: If the call fails or the payload is malformed
        """
        if not free_text.strip():
            raise PatternTranslationError("Nothing to translate: text is empty")

        try:
            response = requests.post(
                self.url,
                headers=self.headers,
                json={"text": free_text, "timezone": timezone},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise PatternTranslationError(f"Translator request failed: {e}") from e
        except ValueError as e:
            raise PatternTranslationError(f"Translator returned invalid JSON: {e}") from e

        return self._parse_translation_response(data)

    def _parse_translation_response(self, response_data: Dict[str, Any]) -> List[WeeklyPattern]:
        if not isinstance(response_data, dict) or not isinstance(response_data.get("patterns"), list):
            raise PatternTranslationError("Translator response has no 'patterns' list")

        patterns: List[WeeklyPattern] = []
        for item in response_data["patterns"]:
            try:
                patterns.append(
                    WeeklyPattern(
                        day_of_week=item["dayOfWeek"],
                        start=item["startTime"],
                        end=item["endTime"],
                        polarity="available" if item.get("isAvailable", True) else "unavailable",
                    )
                )
            except (KeyError, TypeError, InvalidAvailabilityError) as e:
                raise PatternTranslationError(f"Translator returned an invalid pattern {item!r}: {e}") from e

        if response_data.get("interpretation"):
            logger.info("Translator interpretation: %s", response_data["interpretation"])

        return patterns
