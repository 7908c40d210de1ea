"""Session manager that controls the recognition engine lifecycle and the live transcript."""

import asyncio
import logging
from typing import Optional, Union

from ..config import SessionSettings
from ..errors import EngineError, Unsupported
from ..models.events import SessionNotice
from ..models.recognition import RecognitionEvent, EngineErrorEvent
from ..models.session import SupportedLanguage, SessionStatus, SessionSnapshot
from ..transcription.aggregator import TranscriptAggregator
from ..transcription.base import AbstractRecognitionEngine, RecognitionCapability
from ..transcription.publisher import SessionPublisher
from .engine_binding import EngineBinding
from .state_machine import SessionStateMachine

logger = logging.getLogger(__name__)


class SessionManager:
    """Serializes start, stop and language-switch requests for one recognition session.

    All methods must be called from the thread running the asyncio event loop;
    engine callbacks are expected to arrive on that same loop.
    """

    def __init__(self,
                 capability: RecognitionCapability,
                 language: SupportedLanguage = SupportedLanguage.EN_US,
                 settings: Optional[SessionSettings] = None,
                 publisher: Optional[SessionPublisher] = None):
        """Initialize session manager.

        Args:
            capability: Factory for recognition engine handles
            language: Language of the first session
            settings: Settling delays and error reporting policy
            publisher: Where snapshots and notices are published
        """
        self.settings = settings or SessionSettings()
        self.publisher = publisher or SessionPublisher()
        self.language = language
        self.transcript = TranscriptAggregator()
        self.state = SessionStateMachine(on_transition=self._on_transition)
        self.binding = EngineBinding(
            capability,
            on_result=self._handle_result,
            on_error=self._handle_error,
            on_end=self._handle_end,
        )

        self.is_open = False
        self.unsupported = False
        self.last_error: Optional[EngineError] = None

        logger.info(f"SessionManager initialized: language={language.value}, "
                    f"start_delay={self.settings.start_delay_seconds}s, "
                    f"restart_delay={self.settings.restart_delay_seconds}s")

    @property
    def status(self) -> SessionStatus:
        return self.state.status

    @property
    def start_guard(self) -> bool:
        return self.state.start_guard

    @property
    def initialized(self) -> bool:
        return self.binding.initialized

    @property
    def is_listening(self) -> bool:
        return self.status is SessionStatus.LISTENING

    @property
    def input_level(self) -> float:
        """Microphone level of the live engine, 0.0 unless listening.

        Polled on every screen refresh; not part of the published snapshot.
        """
        handle = self.binding.handle
        if handle is None or not self.is_listening:
            return 0.0
        return handle.input_level

    def snapshot(self) -> SessionSnapshot:
        """Current state as seen by the presentation shell."""
        return SessionSnapshot(
            status=self.status,
            language=self.language,
            committed=self.transcript.committed,
            preview=self.transcript.preview,
        )

    def open(self) -> None:
        """Attach the session to a presentation shell."""
        self.is_open = True
        logger.info("Session opened")
        self.publisher.publish_snapshot(self.snapshot())

    def close(self) -> None:
        """Release the engine and reset the session; the transcript is kept."""
        self._release()
        self.is_open = False
        logger.info("Session closed")

    async def toggle(self) -> None:
        """Start listening when idle, stop when listening.

        Calls made while a start, stop or restart is still settling are dropped.
        """
        if self.start_guard:
            logger.debug(f"Toggle dropped: session is {self.status.value}")
            return

        if self.status is SessionStatus.LISTENING:
            logger.info("⏹️  Stopping recognition")
            self._release()
            return

        if self.unsupported:
            logger.debug("Toggle ignored: speech recognition is not supported here")
            return

        logger.info(f"🎙️  Starting recognition ({self.language.value})")
        self.state.transition(SessionStatus.STARTING)
        await self._bind_and_start()

    def stop(self) -> None:
        """Stop the session; a no-op when already idle."""
        if self.status is SessionStatus.IDLE:
            logger.debug("Stop ignored: session already idle")
            return
        logger.info("⏹️  Stopping recognition")
        self._release()

    async def change_language(self, language: Union[SupportedLanguage, str]) -> None:
        """Switch the recognition language.

        When listening, the engine is torn down, given the longer restart delay
        to release its resources, and started again with the new language.
        Otherwise the language takes effect on the next toggle().

        Raises:
            ValueError: If ``language`` is not a supported locale tag
        """
        language = SupportedLanguage(language)
        if language is self.language:
            return

        logger.info(f"Language changed: {self.language.value} -> {language.value}")
        self.language = language
        self.publisher.publish_snapshot(self.snapshot())

        if self.status is not SessionStatus.LISTENING:
            return

        self.state.transition(SessionStatus.STOPPING)
        self.binding.unbind()
        self.transcript.clear_preview()
        self.state.transition(SessionStatus.RESTARTING)

        await asyncio.sleep(self.settings.restart_delay_seconds)

        if self.status is not SessionStatus.RESTARTING:
            logger.info(f"Restart abandoned: session is {self.status.value}")
            return

        self.state.transition(SessionStatus.STARTING)
        await self._bind_and_start()

    async def _bind_and_start(self) -> None:
        """Bind for the current language, wait the settling delay and start the engine.

        Expects the session to be STARTING. If the session moves on during the
        delay the start is abandoned; if the language changes it rebinds.
        """
        while True:
            try:
                handle = self._ensure_bound()
            except Unsupported as e:
                self._report_unsupported(e)
                return

            generation = self.binding.generation
            await asyncio.sleep(self.settings.start_delay_seconds)

            if not self._still_starting(generation):
                logger.info(f"Start abandoned: session is {self.status.value}")
                return
            if handle.language is self.language:
                break
            logger.info(f"Language changed to {self.language.value} while starting, rebinding")

        try:
            handle.start()
        except EngineError as e:
            self._fail(e)
            return
        except Exception as e:
            logger.error(f"Unexpected error starting recognition engine: {e}", exc_info=True)
            self._fail(EngineError(str(e)))
            return

        # start() may already have reported an error or end
        if self._still_starting(generation):
            self.state.transition(SessionStatus.LISTENING)
            logger.info(f"✅ Listening ({self.language.value})")

    def _ensure_bound(self) -> AbstractRecognitionEngine:
        handle = self.binding.handle
        if not self.binding.initialized or handle is None or handle.language is not self.language:
            handle = self.binding.bind(self.language)
        return handle

    def _still_starting(self, generation: int) -> bool:
        return self.status is SessionStatus.STARTING and self.binding.is_current(generation)

    def _release(self) -> None:
        """Tear down the engine and bring the session back to IDLE."""
        if self.status is SessionStatus.IDLE:
            return
        if self.status is SessionStatus.LISTENING:
            self.state.transition(SessionStatus.STOPPING)
        self.binding.unbind()
        self.transcript.clear_preview()
        self.state.transition(SessionStatus.IDLE)

    def _fail(self, error: EngineError) -> None:
        """Move through ERRORED back to IDLE after an engine failure."""
        logger.error(f"❌ Recognition engine error: {error}")
        self.last_error = error
        self.binding.unbind()
        self.transcript.clear_preview()
        if self.status is not SessionStatus.IDLE:
            self.state.transition(SessionStatus.ERRORED)
            self.state.transition(SessionStatus.IDLE)

        if self.settings.surface_engine_errors:
            self.publisher.publish_notice(
                SessionNotice(kind="engine_error", message=error.message, code=error.code)
            )

    def _report_unsupported(self, error: Unsupported) -> None:
        logger.warning(f"Speech recognition is not supported: {error}")
        self.unsupported = True
        self.binding.unbind()
        self.state.transition(SessionStatus.ERRORED)
        self.state.transition(SessionStatus.IDLE)
        self.publisher.publish_notice(
            SessionNotice(kind="unsupported", message=str(error) or "Speech recognition is not supported")
        )

    def _handle_result(self, event: RecognitionEvent) -> None:
        if self.transcript.apply(event):
            self.publisher.publish_snapshot(self.snapshot())

    def _handle_error(self, error: EngineErrorEvent) -> None:
        self._fail(EngineError(error.message, code=error.code))

    def _handle_end(self) -> None:
        logger.info("Recognition engine ended")
        self.binding.unbind()
        self.transcript.clear_preview()
        self.state.reset()

    def _on_transition(self, previous: SessionStatus, current: SessionStatus) -> None:
        self.publisher.publish_snapshot(self.snapshot())
