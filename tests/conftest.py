"""Pytest configuration and fixtures for speech2letter tests."""

import pytest
import logging
from typing import List
from unittest.mock import Mock

from pubsub import pub

from speech2letter.config import SessionSettings
from speech2letter.errors import EngineError, StopOnUnstarted, Unsupported
from speech2letter.models.recognition import (
    RecognitionAlternative,
    RecognitionResult,
    RecognitionEvent,
    EngineErrorEvent,
)
from speech2letter.models.session import SupportedLanguage, SessionStatus
from speech2letter.services.session_manager import SessionManager
from speech2letter.transcription.base import AbstractRecognitionEngine, RecognitionCapability
from speech2letter.transcription.publisher import SessionPublisher


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeRecognitionEngine(AbstractRecognitionEngine):
    """Scripted engine: tests push results, errors and ends by hand."""

    def __init__(self, language: SupportedLanguage, fail_on_start: bool = False):
        super().__init__(language)
        self.fail_on_start = fail_on_start
        self.is_running = False
        self.start_count = 0
        self.stop_count = 0
        self.level = 0.0

    def start(self) -> None:
        if self.is_running:
            raise EngineError("Recognition has already started", code="invalid-state")
        if self.fail_on_start:
            raise EngineError("Microphone access denied", code="not-allowed")
        self.start_count += 1
        self.is_running = True

    def stop(self) -> None:
        self.stop_count += 1
        if not self.is_running:
            raise StopOnUnstarted("not running")
        self.is_running = False
        # Some engines report the end synchronously from stop()
        self._emit_end()

    @property
    def input_level(self) -> float:
        return self.level if self.is_running else 0.0

    def push(self, *results: RecognitionResult, result_index: int = 0) -> None:
        self._emit_result(RecognitionEvent(result_index=result_index, results=list(results)))

    def fail(self, message: str = "network unreachable", code: str = "network") -> None:
        self._emit_error(EngineErrorEvent(message=message, code=code))

    def end_by_itself(self) -> None:
        self.is_running = False
        self._emit_end()


class FakeCapability(RecognitionCapability):
    """Records every engine it constructs."""

    def __init__(self, unsupported: bool = False, fail_on_start: bool = False):
        self.unsupported = unsupported
        self.fail_on_start = fail_on_start
        self.engines: List[FakeRecognitionEngine] = []
        self.construct_count = 0

    def construct(self, language: SupportedLanguage) -> FakeRecognitionEngine:
        self.construct_count += 1
        if self.unsupported:
            raise Unsupported("Speech recognition is not supported in this environment")
        engine = FakeRecognitionEngine(language, fail_on_start=self.fail_on_start)
        self.engines.append(engine)
        return engine

    @property
    def latest(self) -> FakeRecognitionEngine:
        return self.engines[-1]


def final(text: str, confidence: float = 0.9) -> RecognitionResult:
    return RecognitionResult(is_final=True, alternatives=[RecognitionAlternative(text, confidence)])


def interim(text: str) -> RecognitionResult:
    return RecognitionResult(is_final=False, alternatives=[RecognitionAlternative(text)])


def published_statuses(publisher: Mock) -> List[SessionStatus]:
    """Statuses seen by the publisher, with consecutive repeats collapsed."""
    statuses = []
    for call in publisher.publish_snapshot.call_args_list:
        status = call.args[0].status
        if not statuses or statuses[-1] is not status:
            statuses.append(status)
    return statuses


@pytest.fixture(autouse=True)
def clean_pubsub():
    """Drop pubsub listeners registered by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def capability():
    return FakeCapability()


@pytest.fixture
def session_settings():
    """Short but non-zero settling delays so races can be provoked."""
    return SessionSettings(start_delay_seconds=0.01, restart_delay_seconds=0.02)


@pytest.fixture
def mock_publisher():
    return Mock(spec=SessionPublisher)


@pytest.fixture
def manager(capability, session_settings, mock_publisher):
    return SessionManager(
        capability,
        language=SupportedLanguage.EN_US,
        settings=session_settings,
        publisher=mock_publisher,
    )
