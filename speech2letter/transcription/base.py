"""Abstract base classes for speech recognition engines."""

from abc import ABC, abstractmethod
from typing import Callable, Optional
import logging

from ..models.recognition import RecognitionEvent, EngineErrorEvent
from ..models.session import SupportedLanguage

logger = logging.getLogger(__name__)

ResultCallback = Callable[[RecognitionEvent], None]
ErrorCallback = Callable[[EngineErrorEvent], None]
EndCallback = Callable[[], None]


class AbstractRecognitionEngine(ABC):
    """A single handle to a continuous, streaming recognition engine.

    Once started, the engine asynchronously reports result batches through
    ``on_result``, failures through ``on_error`` and always finishes with one
    ``on_end`` call, whether it was stopped on request or stopped by itself.
    """

    def __init__(self, language: SupportedLanguage):
        self.language = language
        self.continuous = True
        self.interim_results = True
        self.on_result: Optional[ResultCallback] = None
        self.on_error: Optional[ErrorCallback] = None
        self.on_end: Optional[EndCallback] = None

    @abstractmethod
    def start(self) -> None:
        """Begin recognition.

        Raises:
            EngineError: If the engine cannot start (e.g. already running)
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Request the engine stop; ``on_end`` follows once it has.

        Raises:
            StopOnUnstarted: If the engine is not running
        """
        pass

    @property
    def input_level(self) -> float:
        """Peak level of the most recent audio chunk, 0.0-1.0; 0.0 when unknown."""
        return 0.0

    def _emit_result(self, event: RecognitionEvent) -> None:
        if self.on_result:
            self.on_result(event)

    def _emit_error(self, error: EngineErrorEvent) -> None:
        if self.on_error:
            self.on_error(error)

    def _emit_end(self) -> None:
        if self.on_end:
            self.on_end()


class RecognitionCapability(ABC):
    """Factory for engine handles, injected into the session manager."""

    @abstractmethod
    def construct(self, language: SupportedLanguage) -> AbstractRecognitionEngine:
        """Create a new, unstarted engine handle for ``language``.

        Raises:
            Unsupported: If this environment offers no recognition capability
        """
        pass
