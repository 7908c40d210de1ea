"""Google Speech-to-Text streaming recognition engine."""

import asyncio
import logging
import queue
import threading
from typing import Any, Callable, Iterator, Optional

from .base import AbstractRecognitionEngine, RecognitionCapability
from ..audio.capture import AudioCapture
from ..config import Speech2LetterConfig
from ..errors import EngineError, StopOnUnstarted, Unsupported
from ..models.events import AudioEvent
from ..models.recognition import (
    RecognitionAlternative,
    RecognitionResult,
    RecognitionEvent,
    EngineErrorEvent,
)
from ..models.session import SupportedLanguage

from google.auth import exceptions as auth_exceptions
from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

# Schedules a callable on the event loop thread, e.g. loop.call_soon_threadsafe
Dispatch = Callable[..., Any]


class GoogleStreamingEngine(AbstractRecognitionEngine):
    """One streaming_recognize call fed by live microphone audio.

    The gRPC stream and the microphone run in background threads; every
    result, error and end is handed to ``dispatch`` so callbacks run on the
    event loop thread.
    """

    def __init__(self,
                 language: SupportedLanguage,
                 client: speech.SpeechClient,
                 dispatch: Dispatch,
                 sample_rate: int = 16000,
                 chunk_size: int = 1600,
                 channels: int = 1,
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True):
        """Initialize Google streaming engine.

        Args:
            language: Language to recognize
            client: Authenticated Speech client
            dispatch: Schedules callbacks on the event loop thread
            sample_rate: Microphone sample rate in Hz
            chunk_size: Samples per audio chunk sent to Google
            channels: Number of audio channels
            use_enhanced: Whether to use the enhanced model
            enable_automatic_punctuation: Enable automatic punctuation
        """
        super().__init__(language)
        self.client = client
        self.dispatch = dispatch
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation

        self.audio_queue: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self.capture: Optional[AudioCapture] = None
        self.stream_thread: Optional[threading.Thread] = None
        self.is_running = False
        self._input_level = 0.0
        self._lock = threading.Lock()

    def build_streaming_config(self) -> speech.StreamingRecognitionConfig:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            audio_channel_count=self.channels,
            language_code=self.language.value,
            use_enhanced=self.use_enhanced,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            model="latest_long",
        )
        return speech.StreamingRecognitionConfig(
            config=config,
            interim_results=self.interim_results,
            single_utterance=not self.continuous,
        )

    def start(self) -> None:
        """Open the microphone and the recognition stream."""
        with self._lock:
            if self.is_running:
                raise EngineError("Recognition has already started", code="invalid-state")

            self.audio_queue = queue.Queue()
            self._input_level = 0.0
            self.capture = AudioCapture(
                callback=self._on_audio_event,
                sample_rate=self.sample_rate,
                chunk_size=self.chunk_size,
                channels=self.channels,
                error_callback=self._on_capture_error,
            )
            self.is_running = True

        streaming_config = self.build_streaming_config()
        self.stream_thread = threading.Thread(
            target=self._stream_loop, args=(streaming_config,), daemon=True
        )
        self.stream_thread.name = f"GoogleStreaming-{self.language.value}"
        self.stream_thread.start()
        self.capture.start_recording()
        logger.info(f"Google streaming recognition started ({self.language.value})")

    def stop(self) -> None:
        """Ask the microphone and the stream to finish; does not wait for either.

        The stream thread joins the capture thread once Google has flushed its
        last results, then reports the end.
        """
        with self._lock:
            if not self.is_running:
                raise StopOnUnstarted("Google streaming recognition is not running")
            self.is_running = False
            capture = self.capture

        if capture:
            capture.request_stop()
        self.audio_queue.put(None)
        logger.info("Google streaming recognition stop requested")

    @property
    def input_level(self) -> float:
        return self._input_level if self.is_running else 0.0

    def _on_audio_event(self, event: AudioEvent) -> None:
        self._input_level = event.peak_level
        if event.audio_data:
            self.audio_queue.put(event.audio_data)
        if event.final:
            self.audio_queue.put(None)

    def _on_capture_error(self, error: Exception) -> None:
        self.dispatch(self._emit_error, EngineErrorEvent(
            message=f"Audio capture failed: {error}", code="audio-capture"))

    def _requests(self) -> Iterator[speech.StreamingRecognizeRequest]:
        while True:
            chunk = self.audio_queue.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    def _stream_loop(self, streaming_config: speech.StreamingRecognitionConfig) -> None:
        """Internal method: consume streaming responses in a background thread."""
        try:
            responses = self.client.streaming_recognize(streaming_config, self._requests())
            for response in responses:
                if response.error and response.error.code:
                    self.dispatch(self._emit_error, EngineErrorEvent(
                        message=response.error.message, code=str(response.error.code)))
                    break
                event = self.to_recognition_event(response)
                if event.results:
                    self.dispatch(self._emit_result, event)
        except gax_exceptions.PermissionDenied as e:
            logger.error(f"Google STT permission denied: {e}")
            self.dispatch(self._emit_error, EngineErrorEvent(message=str(e), code="not-allowed"))
        except (gax_exceptions.DeadlineExceeded, gax_exceptions.ServiceUnavailable) as e:
            logger.error(f"Google STT service unreachable: {e}")
            self.dispatch(self._emit_error, EngineErrorEvent(message=str(e), code="network"))
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT API call error: {e}")
            self.dispatch(self._emit_error, EngineErrorEvent(message=str(e), code="service"))
        except Exception as e:
            logger.error(f"Unhandled exception in Google streaming thread: {e}", exc_info=True)
            self.dispatch(self._emit_error, EngineErrorEvent(message=str(e), code="unknown"))
        finally:
            self._finish()

    def _finish(self) -> None:
        with self._lock:
            self.is_running = False
            capture = self.capture
        if capture and capture.is_recording:
            capture.stop_recording()
        logger.info("Google streaming recognition ended")
        self.dispatch(self._emit_end)

    def to_recognition_event(self, response: speech.StreamingRecognizeResponse) -> RecognitionEvent:
        """Convert a streaming response into a result batch."""
        results = []
        for result in response.results:
            alternatives = [
                RecognitionAlternative(transcript=alt.transcript, confidence=alt.confidence)
                for alt in result.alternatives
            ]
            results.append(RecognitionResult(is_final=result.is_final, alternatives=alternatives))
            logger.debug(f"{'FINAL' if result.is_final else 'interim'}: "
                         f"'{alternatives[0].transcript if alternatives else ''}'")
        return RecognitionEvent(result_index=0, results=results)


class GoogleSpeechCapability(RecognitionCapability):
    """Builds Google streaming engines from the application configuration."""

    def __init__(self, config: Speech2LetterConfig, loop: asyncio.AbstractEventLoop):
        """Initialize the capability.

        Args:
            config: Application configuration
            loop: Event loop the session manager runs on
        """
        self.config = config
        self.loop = loop
        self.client: Optional[speech.SpeechClient] = None

    def construct(self, language: SupportedLanguage) -> GoogleStreamingEngine:
        credentials_path = self.config.get_google_credentials_path()
        if not credentials_path:
            raise Unsupported("Google Cloud credentials are not configured")

        try:
            if not AudioCapture.has_input_device():
                raise Unsupported("No microphone input device found")
        except OSError as e:
            raise Unsupported(f"Audio system unavailable: {e}") from e

        client = self._get_client(credentials_path)
        return GoogleStreamingEngine(
            language=language,
            client=client,
            dispatch=self.loop.call_soon_threadsafe,
            sample_rate=self.config.get('audio.sample_rate', 16000),
            chunk_size=self.config.get('audio.chunk_size', 1600),
            channels=self.config.get('audio.channels', 1),
            use_enhanced=self.config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=self.config.get('google_cloud.enable_automatic_punctuation', True),
        )

    def _get_client(self, credentials_path: str) -> speech.SpeechClient:
        if self.client is not None:
            return self.client

        logger.info(f"Loading Google credentials from: {credentials_path}")
        try:
            credentials = service_account.Credentials.from_service_account_file(credentials_path)
        except (ValueError, auth_exceptions.GoogleAuthError) as e:
            raise Unsupported(f"Invalid Google Cloud credentials: {e}") from e

        self.client = speech.SpeechClient(credentials=credentials)
        logger.info(f"Using Google Cloud project: {credentials.project_id}")
        return self.client
