"""
Adapters layer - Participant row files and the external pattern translator.
"""

from .file_source import FileParticipantSource, parse_participant
from .pattern_translator import HttpPatternTranslator, PatternTranslatorProtocol

__all__ = ["FileParticipantSource", "HttpPatternTranslator", "PatternTranslatorProtocol", "parse_participant"]
