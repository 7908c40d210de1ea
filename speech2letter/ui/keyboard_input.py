"""Cross-platform keyboard input handling for the terminal UI."""

import sys
import threading
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class KeyboardInputHandler:
    """Handle single key presses in a cross-platform way."""

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize keyboard handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the keyboard input handler."""
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInputThread"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        """Stop the keyboard input handler."""
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.info("Keyboard input handler stopped")

    def _input_loop(self) -> None:
        """Main input handling loop."""
        logger.info("Starting keyboard input loop")
        while self.running:
            try:
                key = self._get_key()
                if key:
                    logger.debug(f"Key detected: '{key}' (ord: {ord(key)})")
                    if not self.callback(key):
                        logger.info("Callback returned False, breaking input loop")
                        break
                # Small delay to prevent busy waiting
                time.sleep(0.05)
            except Exception as e:
                logger.error(f"Error in input loop: {e}")
                break
        self.running = False
        logger.info("Keyboard input loop ended")

    def _get_key(self) -> Optional[str]:
        """Get a single keypress in a cross-platform way."""
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        """Get key on Windows."""
        try:
            import msvcrt
            if msvcrt.kbhit():
                key = msvcrt.getch().decode('utf-8', errors='ignore')
                return key.lower()
        except ImportError:
            logger.warning("msvcrt not available for Windows key input")
        return None

    def _get_key_unix(self) -> Optional[str]:
        """Get key on Unix/Linux/macOS."""
        try:
            import select
            import tty
            import termios
        except ImportError:
            logger.warning("Unix terminal modules not available")
            return None

        if select.select([sys.stdin], [], [], 0.1)[0]:
            old_settings = termios.tcgetattr(sys.stdin)
            try:
                tty.setraw(sys.stdin.fileno())
                key = sys.stdin.read(1)
                return key.lower()
            finally:
                termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)
        return None


class SimpleInputHandler:
    """Line-based fallback for terminals where raw key input is unavailable."""

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize simple handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the simple input handler."""
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "SimpleInputThread"
        self.thread.start()
        logger.info("Simple input handler started")

    def stop(self) -> None:
        """Stop the simple input handler."""
        self.running = False
        logger.info("Simple input handler stopped")

    def _input_loop(self) -> None:
        """Simple input loop using input(); an empty line toggles listening."""
        while self.running:
            try:
                user_input = input().strip().lower()
            except (EOFError, KeyboardInterrupt):
                self.callback("q")
                break

            key = user_input[0] if user_input else " "
            if not self.callback(key):
                break
        self.running = False


def create_input_handler(callback: Callable[[str], bool]) -> object:
    """Create the best available input handler for the current terminal.

    Args:
        callback: Function that takes a key and returns True to continue, False to quit

    Returns:
        An input handler instance
    """
    if sys.platform != "win32" and not sys.stdin.isatty():
        logger.warning("stdin is not a terminal, falling back to line input")
        return SimpleInputHandler(callback)
    return KeyboardInputHandler(callback)
