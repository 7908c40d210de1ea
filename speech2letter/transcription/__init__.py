"""Transcription module for speech2letter.

The Google engine lives in ``google_backend`` and is imported explicitly by
callers that need it, so the session layer does not pull in the audio stack.
"""

from .base import AbstractRecognitionEngine, RecognitionCapability
from .aggregator import TranscriptAggregator
from .publisher import SessionPublisher, STATE_TOPIC, NOTICE_TOPIC

__all__ = [
    "AbstractRecognitionEngine",
    "RecognitionCapability",
    "TranscriptAggregator",
    "SessionPublisher",
    "STATE_TOPIC",
    "NOTICE_TOPIC",
]
