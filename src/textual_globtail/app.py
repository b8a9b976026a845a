"""TUI viewer for globtail.

Streams every tailed line into a scrolling Log widget. Warnings and errors
from the orchestrator (unreadable files, oversized lines) are shown as toasts.
"""

import asyncio
import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Log, Static

from globtail.config import GlobtailConfig
from textual_globtail.consumer import format_line
from textual_globtail.controller import GlobtailController

logger = logging.getLogger(__name__)

MAX_LOG_LINES = 10_000


class AppNotifier:
    """Routes notifier events into the app: toasts for problems, logging for the rest."""

    def __init__(self, app: App):
        self.app = app

    def debug(self, msg: str) -> None:
        logger.debug(msg)

    def info(self, msg: str) -> None:
        logger.info(msg)

    def warning(self, msg: str) -> None:
        self.app.notify(msg, severity="warning")

    def error(self, msg: str) -> None:
        self.app.notify(msg, severity="error", timeout=10)


class GlobtailApp(App):
    """Textual front end: one Log pane fed by a GlobtailController."""

    TITLE = "globtail"
    BINDINGS = [
        Binding("f", "toggle_filenames", "Filenames"),
        Binding("c", "clear", "Clear"),
        Binding("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #lines {
        height: 1fr;
        border: solid $accent;
    }

    #status {
        height: 1;
        color: $text-muted;
    }
    """

    def __init__(self, config: GlobtailConfig, **kwargs):
        """Initialize app.

        Args:
            config: Validated configuration
        """
        super().__init__(**kwargs)
        self.config = config
        self.with_filenames = config.with_filenames
        self.controller = GlobtailController(config, notifier=AppNotifier(self))
        self.controller.on_line = self._on_line
        self.controller.on_file_started = lambda path: self._update_status()
        self.controller.on_file_closed = lambda path: self._update_status()
        self.controller.on_file_error = lambda path, error: self._update_status()
        self.log_pane: Log | None = None
        self.status: Static | None = None
        self.status_text = ""

    def compose(self) -> ComposeResult:
        yield Header()
        self.log_pane = Log(max_lines=MAX_LOG_LINES, id="lines")
        yield self.log_pane
        self.status = Static("", id="status")
        yield self.status
        yield Footer()

    async def on_mount(self) -> None:
        """Attach controller to the app's event loop."""
        self.sub_title = ", ".join(p.glob for p in self.config.patterns)
        self.controller.attach(asyncio.get_running_loop())
        self._update_status()

    async def on_unmount(self) -> None:
        self.controller.detach()

    def _on_line(self, path: str, line: str) -> None:
        if self.log_pane is not None:
            self.log_pane.write_line(format_line(path, line, self.with_filenames))

    def _update_status(self) -> None:
        if self.status is None:
            return
        sessions = len(self.controller.orchestrator.sessions)
        failed = len(self.controller.files_failed)
        text = f"{sessions} file(s) tailed"
        if failed:
            text += f", {failed} unreadable"
        self.status_text = text
        self.status.update(text)

    def action_toggle_filenames(self) -> None:
        """Toggle the path prefix for lines written from now on."""
        self.with_filenames = not self.with_filenames
        state = "on" if self.with_filenames else "off"
        self.notify(f"Filenames {state}")

    def action_clear(self) -> None:
        if self.log_pane is not None:
            self.log_pane.clear()
