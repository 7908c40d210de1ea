"""Exception types raised across the speech2letter session layer."""

from typing import Optional


class Speech2LetterError(Exception):
    """Base class for all speech2letter errors."""


class Unsupported(Speech2LetterError):
    """No speech recognition capability is available in this environment."""


class EngineError(Speech2LetterError):
    """The recognition engine failed while starting or running."""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class StopOnUnstarted(Speech2LetterError):
    """stop() was called on an engine handle that is not running."""


class InvalidTransitionError(Speech2LetterError):
    """A session state transition not allowed by the transition table."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Invalid session transition: {current} -> {target}")
        self.current = current
        self.target = target
