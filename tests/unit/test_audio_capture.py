"""Unit tests for AudioCapture class."""

import pytest
from unittest.mock import Mock, patch
import numpy as np

pytest.importorskip("pyaudio")

from speech2letter.audio.capture import AudioCapture


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        mock_stream.read.return_value = b'\x00' * 3200  # Silent audio

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.mark.unit
class TestAudioCapture:
    """Test cases for AudioCapture class."""

    def test_initialization(self):
        capture = AudioCapture(callback=Mock())

        assert capture.sample_rate == 16000
        assert capture.chunk_size == 1600
        assert capture.channels == 1
        assert capture.is_recording is False
        assert capture.total_chunks == 0

    def test_start_recording(self):
        capture = AudioCapture(callback=Mock())

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()
            capture.recording_thread.join(timeout=1.0)

            assert capture.is_recording is True
            assert capture.recording_thread.daemon is True
            mock_record.assert_called_once()

    def test_start_recording_already_recording(self):
        capture = AudioCapture(callback=Mock())
        capture.is_recording = True

        with patch.object(capture, '_record_continuously') as mock_record:
            capture.start_recording()

            mock_record.assert_not_called()

    def test_stop_recording_not_recording(self):
        capture = AudioCapture(callback=Mock())

        capture.stop_recording()

        assert capture.is_recording is False

    def test_recording_delivers_chunks_and_final_event(self, mock_pyaudio):
        callback = Mock()
        capture = AudioCapture(callback=callback)

        capture.start_recording()
        capture.stop_recording()

        assert callback.call_count >= 1
        last_event = callback.call_args.args[0]
        assert last_event.final is True
        assert last_event.audio_data == b'\x00' * 3200
        mock_pyaudio['stream'].close.assert_called_once()
        mock_pyaudio['instance'].terminate.assert_called_once()

    def test_stream_failure_reports_error(self, mock_pyaudio):
        callback = Mock()
        error_callback = Mock()
        mock_pyaudio['instance'].open.side_effect = OSError("Invalid input device")
        capture = AudioCapture(callback=callback, error_callback=error_callback)

        capture.start_recording()
        capture.recording_thread.join(timeout=1.0)

        error_callback.assert_called_once()
        assert isinstance(error_callback.call_args.args[0], OSError)
        assert callback.call_args.args[0].final is True

    def test_peak_level(self):
        samples = np.array([0, 16384, -32768, 100], dtype=np.int16)

        assert AudioCapture._compute_peak_level(samples.tobytes()) == 1.0
        assert AudioCapture._compute_peak_level(b'') == 0.0
        assert AudioCapture._compute_peak_level(np.zeros(10, dtype=np.int16).tobytes()) == 0.0

    def test_has_input_device(self, mock_pyaudio):
        instance = mock_pyaudio['instance']
        instance.get_device_count.return_value = 2
        instance.get_device_info_by_index.side_effect = [
            {"maxInputChannels": 0},
            {"maxInputChannels": 1},
        ]

        assert AudioCapture.has_input_device() is True
        instance.terminate.assert_called_once()

    def test_has_no_input_device(self, mock_pyaudio):
        mock_pyaudio['instance'].get_device_count.return_value = 0

        assert AudioCapture.has_input_device() is False

    def test_request_stop_does_not_wait(self):
        capture = AudioCapture(callback=Mock())
        capture.is_recording = True
        capture.recording_thread = Mock()

        capture.request_stop()

        assert capture.stop_event.is_set()
        assert capture.is_recording is True
        capture.recording_thread.join.assert_not_called()

    def test_events_carry_peak_level(self, mock_pyaudio):
        callback = Mock()
        mock_pyaudio['stream'].read.return_value = np.full(1600, 16384, dtype=np.int16).tobytes()
        capture = AudioCapture(callback=callback)

        capture.start_recording()
        capture.stop_recording()

        assert callback.call_args.args[0].peak_level == 0.5
