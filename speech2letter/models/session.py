"""Session-related data models."""

from dataclasses import dataclass
from enum import Enum


class SupportedLanguage(Enum):
    """Locale tags the recognition engine can be bound to."""
    EN_US = "en-US"
    ES_ES = "es-ES"

    @property
    def label(self) -> str:
        """Human-readable name shown in the language selector."""
        return _LANGUAGE_LABELS[self]

    def next(self) -> "SupportedLanguage":
        """The language after this one, wrapping around."""
        members = list(SupportedLanguage)
        return members[(members.index(self) + 1) % len(members)]


_LANGUAGE_LABELS = {
    SupportedLanguage.EN_US: "English",
    SupportedLanguage.ES_ES: "Spanish",
}


class SessionStatus(Enum):
    """Lifecycle state of a recognition session."""
    IDLE = "idle"
    STARTING = "starting"
    LISTENING = "listening"
    STOPPING = "stopping"
    RESTARTING = "restarting"
    ERRORED = "errored"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session handed to the presentation shell."""
    status: SessionStatus
    language: SupportedLanguage
    committed: str
    preview: str

    @property
    def is_listening(self) -> bool:
        return self.status is SessionStatus.LISTENING
