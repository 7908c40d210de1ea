"""Real hardware tests for streaming recognition.

These tests need a microphone, network access and Google Cloud credentials.
Point SPEECH2LETTER_CONFIG at a config file whose google_cloud.credentials_path
is valid.

Run with: SPEECH2LETTER_CONFIG=speech2letter.yaml pytest tests/hardware/ -v -s -m hardware
"""

import asyncio
import os
import pytest

from speech2letter.config import Speech2LetterConfig, SessionSettings
from speech2letter.models.session import SupportedLanguage, SessionStatus
from speech2letter.services.session_manager import SessionManager
from speech2letter.transcription.publisher import SessionPublisher

CONFIG_PATH = os.environ.get("SPEECH2LETTER_CONFIG")

pytestmark = pytest.mark.skipif(not CONFIG_PATH, reason="SPEECH2LETTER_CONFIG not set")


@pytest.mark.hardware
class TestRealGoogleStreaming:
    """Tests that talk to a real microphone and Google Speech-to-Text."""

    def test_listen_for_five_seconds(self):
        """Start a session, speak for a few seconds, stop it cleanly."""
        from speech2letter.transcription.google_backend import GoogleSpeechCapability

        config = Speech2LetterConfig(CONFIG_PATH)

        async def scenario():
            capability = GoogleSpeechCapability(config, asyncio.get_running_loop())
            manager = SessionManager(
                capability,
                language=SupportedLanguage.EN_US,
                settings=SessionSettings.from_config(config),
                publisher=SessionPublisher(),
            )

            print("\n" + "=" * 60)
            print("HARDWARE TEST: speak into the microphone for 5 seconds")
            print("=" * 60)

            await manager.toggle()
            assert manager.status is SessionStatus.LISTENING, manager.last_error

            await asyncio.sleep(5.0)
            manager.stop()
            # Let the stream thread flush its last results and end
            await asyncio.sleep(2.0)
            return manager

        manager = asyncio.run(scenario())

        print(f"Transcript: '{manager.snapshot().committed}'")
        assert manager.status is SessionStatus.IDLE
        assert manager.unsupported is False
        assert manager.last_error is None
        assert manager.snapshot().preview == ""
