"""Recognition engine event models."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class RecognitionAlternative:
    """One hypothesis for a recognized utterance."""
    transcript: str
    confidence: float = 0.0


@dataclass(frozen=True)
class RecognitionResult:
    """A final or interim result holding one or more alternatives."""
    is_final: bool
    alternatives: List[RecognitionAlternative] = field(default_factory=list)

    @property
    def transcript(self) -> str:
        """Transcript of the most likely alternative ('' if there is none)."""
        if not self.alternatives:
            return ""
        return self.alternatives[0].transcript


@dataclass(frozen=True)
class RecognitionEvent:
    """A batch of results delivered by the engine.

    Only ``results[result_index:]`` changed since the previous event; earlier
    entries are kept by engines that report the whole result list.
    """
    result_index: int
    results: List[RecognitionResult] = field(default_factory=list)

    @property
    def new_results(self) -> List[RecognitionResult]:
        return self.results[self.result_index:]


@dataclass(frozen=True)
class EngineErrorEvent:
    """Error reported by a running engine."""
    message: str
    code: Optional[str] = None
