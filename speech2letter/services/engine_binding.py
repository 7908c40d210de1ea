"""Engine binding that owns the single live recognition engine handle."""

import logging
from typing import Optional

from ..errors import StopOnUnstarted
from ..models.recognition import RecognitionEvent, EngineErrorEvent
from ..models.session import SupportedLanguage
from ..transcription.base import (
    AbstractRecognitionEngine,
    RecognitionCapability,
    ResultCallback,
    ErrorCallback,
    EndCallback,
)

logger = logging.getLogger(__name__)


class EngineBinding:
    """Constructs, wires and tears down engine handles; at most one is bound at a time."""

    def __init__(self,
                 capability: RecognitionCapability,
                 on_result: ResultCallback,
                 on_error: ErrorCallback,
                 on_end: EndCallback):
        """Initialize the binding.

        Args:
            capability: Factory for engine handles
            on_result: Called with result batches from the bound handle
            on_error: Called with errors from the bound handle
            on_end: Called when the bound handle ends
        """
        self.capability = capability
        self._on_result = on_result
        self._on_error = on_error
        self._on_end = on_end

        self.handle: Optional[AbstractRecognitionEngine] = None
        self.initialized = False
        # Incremented on every bind and unbind; events carry the value they were wired with.
        self.generation = 0

    def bind(self, language: SupportedLanguage) -> AbstractRecognitionEngine:
        """Construct and wire a new handle for ``language``.

        Any previously bound handle is unbound first.

        Args:
            language: Language the engine should recognize

        Returns:
            The newly bound handle

        Raises:
            Unsupported: If the capability cannot provide an engine
        """
        if self.handle is not None:
            logger.info("Rebinding engine: releasing previous handle first")
            self.unbind()

        handle = self.capability.construct(language)
        handle.continuous = True
        handle.interim_results = True

        self.generation += 1
        self._wire(handle, self.generation)
        self.handle = handle
        self.initialized = True

        logger.info(f"Bound recognition engine for {language.value} (generation {self.generation})")
        return handle

    def unbind(self) -> None:
        """Stop and release the bound handle.

        Stop failures are logged and swallowed; the binding is always cleared.
        """
        handle = self.handle
        self.handle = None
        self.initialized = False
        self.generation += 1

        if handle is None:
            return

        try:
            handle.stop()
        except StopOnUnstarted:
            logger.debug("Engine was not running, nothing to stop")
        except Exception as e:
            logger.warning(f"Error stopping recognition engine: {e}")

        logger.info("Unbound recognition engine")

    def is_current(self, generation: int) -> bool:
        """Whether ``generation`` still identifies the bound handle."""
        return self.initialized and generation == self.generation

    def _wire(self, handle: AbstractRecognitionEngine, generation: int) -> None:
        """Attach callbacks that drop events once the handle is no longer bound."""

        def on_result(event: RecognitionEvent) -> None:
            if self.is_current(generation):
                self._on_result(event)
            else:
                logger.debug(f"Dropping result from stale engine (generation {generation})")

        def on_error(error: EngineErrorEvent) -> None:
            if self.is_current(generation):
                self._on_error(error)
            else:
                logger.debug(f"Dropping error from stale engine (generation {generation}): {error.message}")

        def on_end() -> None:
            if self.is_current(generation):
                self._on_end()
            else:
                logger.debug(f"Dropping end from stale engine (generation {generation})")

        handle.on_result = on_result
        handle.on_error = on_error
        handle.on_end = on_end
