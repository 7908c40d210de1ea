"""Terminal-based live transcription screen."""

import asyncio
import logging
from typing import Optional, Set

from pubsub import pub
from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..models.events import SessionNotice
from ..models.session import SessionSnapshot, SessionStatus
from ..services.session_manager import SessionManager
from ..transcription.publisher import STATE_TOPIC, NOTICE_TOPIC
from .keyboard_input import create_input_handler

logger = logging.getLogger(__name__)

TOGGLE_KEYS = (" ", "\r", "\n")
LANGUAGE_KEY = "l"
QUIT_KEYS = ("q", "\x03")

_STATUS_STYLES = {
    SessionStatus.IDLE: "bold yellow",
    SessionStatus.STARTING: "bold cyan",
    SessionStatus.LISTENING: "bold green",
    SessionStatus.STOPPING: "bold cyan",
    SessionStatus.RESTARTING: "bold cyan",
    SessionStatus.ERRORED: "bold red",
}

METER_WIDTH = 10


def render_level_meter(level: float, width: int = METER_WIDTH) -> str:
    """Text bar for a 0.0-1.0 microphone level, e.g. ``▮▮▮▯▯▯▯▯▯▯``."""
    level = min(max(level, 0.0), 1.0)
    filled = round(level * width)
    return "▮" * filled + "▯" * (width - filled)


class TranscriptionScreen:
    """Renders one session and forwards key presses to its manager."""

    def __init__(self,
                 manager: SessionManager,
                 console: Optional[Console] = None,
                 refresh_per_second: int = 8):
        """Initialize transcription screen.

        Args:
            manager: Session manager this screen controls
            console: Rich console to render to
            refresh_per_second: Screen refresh rate
        """
        self.manager = manager
        self.console = console or Console()
        self.refresh_per_second = refresh_per_second
        self.snapshot: SessionSnapshot = manager.snapshot()
        self.notice: Optional[SessionNotice] = None

        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.quit_event: Optional[asyncio.Event] = None
        self._tasks: Set[asyncio.Task] = set()

        pub.subscribe(self.on_snapshot, STATE_TOPIC)
        pub.subscribe(self.on_notice, NOTICE_TOPIC)
        logger.info("TranscriptionScreen initialized")

    def on_snapshot(self, snapshot: SessionSnapshot) -> None:
        self.snapshot = snapshot
        if snapshot.status is SessionStatus.STARTING:
            self.notice = None

    def on_notice(self, notice: SessionNotice) -> None:
        self.notice = notice

    def render_header(self) -> Panel:
        snapshot = self.snapshot
        mic = "🎙️  LISTENING" if snapshot.is_listening else "🔇 NOT LISTENING"
        header_text = Text.assemble(
            ("Speech to Text", "bold blue"),
            "  |  ",
            (mic, _STATUS_STYLES[snapshot.status]),
            "  |  ",
            f"Language: {snapshot.language.label} ({snapshot.language.value})",
        )
        if snapshot.is_listening:
            header_text.append("  |  ")
            header_text.append(render_level_meter(self.manager.input_level), style="green")
        if snapshot.status not in (SessionStatus.IDLE, SessionStatus.LISTENING):
            header_text.append(f"  |  {snapshot.status.value}...", style="dim")
        return Panel(Align.center(header_text), style="bright_blue")

    def render_transcript(self) -> Panel:
        snapshot = self.snapshot
        body = Text(snapshot.committed, style="white")
        body.append(snapshot.preview, style="dim italic")
        if not snapshot.committed and not snapshot.preview:
            body = Text("Press SPACE to start listening", style="dim white italic")

        renderables = [body]
        if self.notice:
            style = "bold red" if self.notice.kind == "engine_error" else "bold yellow"
            code = f" [{self.notice.code}]" if self.notice.code else ""
            renderables.append(Text(f"\n⚠️  {self.notice.message}{code}", style=style))
        return Panel(Group(*renderables), title="📝 Transcript", border_style="green")

    def render_footer(self) -> Panel:
        controls = Text.assemble(
            ("SPACE", "bold green"), " start/stop   ",
            ("L", "bold blue"), f" language ({self.snapshot.language.next().label})   ",
            ("Q", "bold red"), " quit",
        )
        return Panel(Align.center(controls), style="dim")

    def render(self) -> Layout:
        """Build the full screen layout from the latest snapshot."""
        layout = Layout()
        layout.split_column(
            Layout(self.render_header(), name="header", size=3),
            Layout(self.render_transcript(), name="main", ratio=1),
            Layout(self.render_footer(), name="footer", size=3),
        )
        return layout

    def handle_key(self, key: str) -> None:
        """Map a key press to a session intent; runs on the event loop thread."""
        if key in TOGGLE_KEYS:
            self._spawn(self.manager.toggle())
        elif key == LANGUAGE_KEY:
            self._spawn(self.manager.change_language(self.snapshot.language.next()))
        elif key in QUIT_KEYS:
            if self.quit_event:
                self.quit_event.set()
        else:
            logger.debug(f"Unmapped key: {key!r}")

    def _spawn(self, coroutine) -> None:
        task = asyncio.ensure_future(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception():
            logger.error(f"Session intent failed: {task.exception()}", exc_info=task.exception())

    def _on_key_from_thread(self, key: str) -> bool:
        self.loop.call_soon_threadsafe(self.handle_key, key)
        return key not in QUIT_KEYS

    async def run(self) -> None:
        """Show the screen until the user quits."""
        self.loop = asyncio.get_running_loop()
        self.quit_event = asyncio.Event()
        input_handler = create_input_handler(self._on_key_from_thread)

        self.manager.open()
        input_handler.start()
        try:
            with Live(self.render(), console=self.console,
                      refresh_per_second=self.refresh_per_second, screen=False) as live:
                while not self.quit_event.is_set():
                    try:
                        await asyncio.wait_for(self.quit_event.wait(),
                                               timeout=1.0 / self.refresh_per_second)
                    except asyncio.TimeoutError:
                        pass
                    live.update(self.render())
        finally:
            input_handler.stop()
            self.close()

    def close(self) -> None:
        """Cancel pending intents, release the session and stop listening to its topics."""
        for task in list(self._tasks):
            task.cancel()
        self.manager.close()
        try:
            pub.unsubscribe(self.on_snapshot, STATE_TOPIC)
            pub.unsubscribe(self.on_notice, NOTICE_TOPIC)
        except Exception as e:
            logger.warning(f"Error during unsubscribe: {e}")
        logger.info("TranscriptionScreen closed")
