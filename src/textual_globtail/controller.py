"""Non-Textual controller for globtail. Primary embed point."""

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from globtail.config import GlobtailConfig, load_globtail_config
from globtail.matcher import ExcludeRule
from globtail.notifier import GlobtailNotifier, NoOpNotifier
from globtail.orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)


class GlobtailController:
    """Builds a SessionOrchestrator from a GlobtailConfig and relays its events.

    Stable methods: attach(), detach(), run(), request_stop(), plus the
    outbound callbacks below. The orchestrator itself is exposed for hosts
    that need the session map.
    """

    def __init__(self, config: GlobtailConfig, notifier: GlobtailNotifier | None = None):
        """Initialize controller.

        Args:
            config: Validated configuration
            notifier: Optional notification handler (defaults to NoOpNotifier - silent)
        """
        self.config = config
        self.notifier = notifier or NoOpNotifier()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self.lines_seen = 0
        self.files_failed: dict[str, Exception] = {}

        self.orchestrator = SessionOrchestrator(
            config.patterns,
            self._dispatch_line,
            excludes=config.excludes,
            start_offset=config.start_offset,
            notifier=self.notifier,
            poll_interval=config.poll_interval,
            max_line_bytes=config.max_line_bytes,
        )
        self.orchestrator.on_error = self._on_file_error
        self.orchestrator.on_excluded = self._on_file_excluded
        self.orchestrator.on_session_started = self._on_session_started
        self.orchestrator.on_session_closed = self._on_session_closed

        # Outbound events (host wires these)
        self.on_line: Callable[[str, str], None] | None = None
        self.on_file_error: Callable[[str, Exception], None] | None = None
        self.on_file_excluded: Callable[[str, ExcludeRule], None] | None = None
        self.on_file_started: Callable[[str], None] | None = None
        self.on_file_closed: Callable[[str], None] | None = None

    @classmethod
    def from_config_file(cls, path: str | Path, notifier: GlobtailNotifier | None = None) -> "GlobtailController":
        return cls(load_globtail_config(path), notifier=notifier)

    @property
    def attached(self) -> bool:
        return self._loop is not None

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach to a running event loop and start scanning. Idempotent.

        Raises:
            RuntimeError: If the loop is not running
        """
        if self._loop is not None:
            return
        if not loop.is_running():
            raise RuntimeError("Event loop must be running to attach")
        self._loop = loop
        self.orchestrator.attach(loop)
        logger.debug(f"Controller attached, watching {len(self.config.patterns)} pattern(s)")

    def detach(self) -> None:
        """Stop scanning and close every tailed file."""
        if self._loop is None:
            return
        self.orchestrator.detach()
        self._loop = None
        logger.debug("Controller detached")

    async def run(self) -> None:
        """Attach to the current loop and tail until request_stop() is called."""
        self._stop_event = asyncio.Event()
        self.attach(asyncio.get_running_loop())
        try:
            await self._stop_event.wait()
        finally:
            self.detach()
            self._stop_event = None

    def request_stop(self) -> None:
        """Make a pending run() return."""
        if self._stop_event is not None:
            self._stop_event.set()

    def _dispatch_line(self, path: str, line: str) -> None:
        self.lines_seen += 1
        if self.on_line:
            self.on_line(path, line)

    def _on_file_error(self, path: str, error: Exception) -> None:
        self.files_failed[path] = error
        if self.on_file_error:
            self.on_file_error(path, error)

    def _on_file_excluded(self, path: str, rule: ExcludeRule) -> None:
        if self.on_file_excluded:
            self.on_file_excluded(path, rule)

    def _on_session_started(self, path: str) -> None:
        self.files_failed.pop(path, None)
        if self.on_file_started:
            self.on_file_started(path)

    def _on_session_closed(self, path: str) -> None:
        if self.on_file_closed:
            self.on_file_closed(path)
