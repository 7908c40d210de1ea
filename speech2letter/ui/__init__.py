"""Terminal presentation shell."""

from .transcription_screen import TranscriptionScreen

__all__ = ["TranscriptionScreen"]
