"""Audio capture module with continuous recording and per-chunk callbacks."""

import pyaudio
import logging
from threading import Thread, Event
from typing import Optional, Callable
import numpy as np

from ..models.events import AudioEvent


logger = logging.getLogger(__name__)


class AudioCapture:
    """Continuous microphone capture that hands every chunk to a callback."""

    def __init__(
        self,
        callback: Callable[[AudioEvent], None],
        sample_rate: int = 16000,
        chunk_size: int = 1600,
        channels: int = 1,
        format: int = pyaudio.paInt16,
        error_callback: Optional[Callable[[Exception], None]] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            callback: Called from the capture thread with each AudioEvent
            error_callback: Called from the capture thread if the stream fails
            sample_rate: Audio sample rate (16kHz suits Google streaming recognition)
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            format: Audio format (16-bit signed int)
        """
        self.audio_event_callback = callback
        self.error_callback = error_callback
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = format

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None

    @staticmethod
    def has_input_device() -> bool:
        """Check whether any audio input device is available."""
        instance = pyaudio.PyAudio()
        try:
            for index in range(instance.get_device_count()):
                info = instance.get_device_info_by_index(index)
                if info.get("maxInputChannels", 0) > 0:
                    return True
            return False
        finally:
            instance.terminate()

    def start_recording(self) -> None:
        """Start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stop_event.clear()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def request_stop(self) -> None:
        """Ask the recording thread to finish after its current chunk; does not wait."""
        self.stop_event.set()

    def stop_recording(self) -> None:
        """Stop recording and wait for the recording thread to finish."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self) -> pyaudio.Stream:
        self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def __read_audio_chunk(self, stream: pyaudio.Stream) -> bytes:
        audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
        self.total_chunks += 1
        return audio_chunk

    @staticmethod
    def _compute_peak_level(audio_chunk: bytes) -> float:
        """Peak amplitude of a 16-bit chunk, normalized to 0.0-1.0."""
        samples = np.frombuffer(audio_chunk, dtype=np.int16)
        if samples.size == 0:
            return 0.0
        return float(np.abs(samples.astype(np.int32)).max()) / 32768.0

    def __publish_audio_event(self, audio_chunk: bytes) -> None:
        audio_event = AudioEvent(
            audio_data=audio_chunk,
            peak_level=self._compute_peak_level(audio_chunk),
            final=self.stop_event.is_set()
        )
        self.audio_event_callback(audio_event)

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = None
        try:
            stream = self.__open_audio_stream()
            while not self.stop_event.is_set():
                audio_chunk = self.__read_audio_chunk(stream)
                self.__publish_audio_event(audio_chunk)
            # Final event, so consumers know we are done
            audio_chunk = self.__read_audio_chunk(stream)
            self.__publish_audio_event(audio_chunk)
        except Exception as e:
            logger.error(f"Audio capture failed: {e}", exc_info=True)
            self.stop_event.set()
            if self.error_callback:
                self.error_callback(e)
            self.__publish_audio_event(b"")
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
