"""Data models for the speech2letter application."""

from .events import AudioEvent, SessionNotice
from .recognition import (
    RecognitionAlternative,
    RecognitionResult,
    RecognitionEvent,
    EngineErrorEvent,
)
from .session import SupportedLanguage, SessionStatus, SessionSnapshot

__all__ = [
    "AudioEvent",
    "SessionNotice",
    # Recognition engine events
    "RecognitionAlternative",
    "RecognitionResult",
    "RecognitionEvent",
    "EngineErrorEvent",
    # Session state
    "SupportedLanguage",
    "SessionStatus",
    "SessionSnapshot",
]
