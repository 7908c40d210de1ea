"""Transcript aggregator that merges streaming results into committed text and a preview.

Each result batch from the engine either finalizes an utterance (its text is
appended to the committed transcript and the preview is cleared) or revises
the utterance still in progress (the preview is replaced).
"""

import logging
from typing import List

from ..models.recognition import RecognitionEvent

logger = logging.getLogger(__name__)

SEGMENT_SEPARATOR = " "


class TranscriptAggregator:
    """Keeps the append-only committed transcript and the volatile preview."""

    def __init__(self):
        self._segments: List[str] = []
        self._preview = ""

    @property
    def committed(self) -> str:
        """All finalized text, in delivery order."""
        return "".join(self._segments)

    @property
    def segments(self) -> List[str]:
        return list(self._segments)

    @property
    def preview(self) -> str:
        """Draft text of the utterance currently being recognized."""
        return self._preview

    def apply(self, event: RecognitionEvent) -> bool:
        """Fold one result batch into the transcript.

        Args:
            event: Result batch reported by the engine

        Returns:
            True if the committed transcript or the preview changed
        """
        finals = []
        interims = []
        for result in event.new_results:
            if result.is_final:
                finals.append(result.transcript)
            else:
                interims.append(result.transcript)

        if finals:
            segment = SEGMENT_SEPARATOR.join(finals) + SEGMENT_SEPARATOR
            self._segments.append(segment)
            self._preview = ""
            logger.debug(f"Committed segment #{len(self._segments)}: '{segment[:50]}'")
            return True

        preview = "".join(interims)
        changed = preview != self._preview
        self._preview = preview
        return changed

    def clear_preview(self) -> None:
        """Drop the draft text, e.g. when the session stops."""
        self._preview = ""
