"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .session_finder import ParticipantSourceProtocol, SessionFinderService

__all__ = ["ParticipantSourceProtocol", "SessionFinderService"]
