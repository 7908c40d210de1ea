"""speech2letter - live speech-to-text in the terminal."""

__version__ = "0.1.0"
