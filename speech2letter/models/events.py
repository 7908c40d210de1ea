"""Event models published between the audio, engine and UI layers."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class AudioEvent:
    """One captured audio chunk."""
    audio_data: bytes
    peak_level: float = 0.0  # Peak amplitude of the chunk, 0.0-1.0
    final: bool = False  # True for the last chunk before capture stops


@dataclass
class SessionNotice:
    """User-visible notice raised by the session manager."""
    kind: str  # "unsupported" or "engine_error"
    message: str
    code: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
