"""Main application entry point for speech2letter."""

import sys
import asyncio
import argparse
import logging
from pathlib import Path
from typing import Optional

from speech2letter import __version__
from speech2letter.config import Speech2LetterConfig, SessionSettings
from speech2letter.models.session import SupportedLanguage
from speech2letter.services.session_manager import SessionManager
from speech2letter.transcription.google_backend import GoogleSpeechCapability
from speech2letter.transcription.publisher import SessionPublisher
from speech2letter.ui.transcription_screen import TranscriptionScreen

logger = logging.getLogger(__name__)


class Server:
    """Wires configuration, the Google engine, the session manager and the screen."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None,
                 language: Optional[str] = None):
        self.config = Speech2LetterConfig(config_path)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        if language:
            self.config.set('session.default_language', language)
        self.language = self.config.get_default_language()

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        capability = GoogleSpeechCapability(self.config, loop)
        manager = SessionManager(
            capability,
            language=self.language,
            settings=SessionSettings.from_config(self.config),
            publisher=SessionPublisher(),
        )
        screen = TranscriptionScreen(
            manager,
            refresh_per_second=self.config.get('ui.refresh_per_second', 8),
        )
        await screen.run()


def setup_logging(config: Speech2LetterConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/speech2letter.log')
    console_output = config.get('logging.console_output', False)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - warnings only
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info("speech2letter starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def main() -> None:
    """Main entry point for speech2letter."""
    parser = argparse.ArgumentParser(
        description="speech2letter - live speech-to-text in the terminal",
        epilog="Keys: SPACE=start/stop listening, L=switch language, Q=quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--language",
        type=str,
        choices=[lang.value for lang in SupportedLanguage],
        help="Language to start with (overrides config)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"speech2letter v{__version__}"
    )

    args = parser.parse_args()

    try:
        server = Server(args.config, log_level=args.log_level, language=args.language)
        asyncio.run(server.run())
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
