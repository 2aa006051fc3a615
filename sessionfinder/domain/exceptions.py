"""
Domain-specific exception hierarchy for the session finder application.
"""


class SessionFinderError(Exception):
    """Base class for all application-level errors."""


class InvalidAvailabilityError(SessionFinderError, ValueError):
    """Raised when availability input violates the engine's preconditions."""


class ParticipantSourceError(SessionFinderError):
    """Raised when participant rows cannot be loaded or parsed."""


class PatternTranslationError(SessionFinderError):
    """Raised when the external text-to-pattern translator fails."""
