"""SessionOrchestrator: ties glob scanners to per-file tail sessions.

Usage:
    orchestrator = SessionOrchestrator(
        [WatchedPattern("/var/log/*.log", interval=5)],
        on_line=lambda path, line: print(f"{path}: {line}"),
        excludes=["*.gz"],
    )
    orchestrator.on_error = lambda path, error: ...
    orchestrator.attach(asyncio.get_running_loop())
    ...
    orchestrator.detach()
"""

import asyncio
import logging
import os
from collections.abc import Callable, Iterable

from globtail.errors import AcquisitionError
from globtail.matcher import ExcludeRule, compile_exclude, first_match
from globtail.models import WatchedPattern
from globtail.notifier import GlobtailNotifier, NoOpNotifier
from globtail.reader import DEFAULT_POLL_INTERVAL
from globtail.scanner import GlobScanner
from globtail.session import LineCallback, TailSession

logger = logging.getLogger(__name__)


class _ScannerBinding:
    """DiscoveryHandler handed to one scanner; forwards with the scanner's identity."""

    def __init__(self, orchestrator: "SessionOrchestrator", index: int):
        self.orchestrator = orchestrator
        self.index = index
        self.scanner: GlobScanner | None = None

    def on_found(self, path: str) -> None:
        initial = self.scanner is not None and self.scanner.scan_count <= 1
        self.orchestrator.file_found(path, self.index, initial=initial)

    def on_deleted(self, path: str) -> None:
        self.orchestrator.file_deleted(path, self.index)


class SessionOrchestrator:
    """Owns one GlobScanner per pattern and one TailSession per accepted path.

    Sessions are keyed by path. A path matched by several patterns gets one
    session, which is closed once every scanner that reported it has reported
    it removed.

    A non-negative ``start_offset`` applies to every file. With the default of
    -1, files found by a scanner's first pass start at their end and files that
    appear later are read from byte 0, unless a live session has already read
    that file under another name (rotation), in which case they start at the end.
    """

    def __init__(
        self,
        patterns: Iterable[WatchedPattern],
        on_line: LineCallback,
        excludes: Iterable[str | ExcludeRule] = (),
        start_offset: int = -1,
        notifier: GlobtailNotifier | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_line_bytes: int | None = None,
        session_factory: Callable[..., TailSession] = TailSession,
    ):
        """Initialize orchestrator.

        Args:
            patterns: Globs to watch, each with its own rescan interval
            on_line: Consumer shared by every session, receives (path, line)
            excludes: Wildcards or compiled rules; a matching path is never tailed
            start_offset: Offset for files present at start-up (-1 = end of file)
            notifier: Observability sink (defaults to NoOpNotifier - silent)
            poll_interval: Seconds between growth checks of each file
            max_line_bytes: Bound on an unterminated line, None for unbounded
            session_factory: Builds sessions; TailSession by default
        """
        self.on_line = on_line
        self.exclude_rules = [r if isinstance(r, ExcludeRule) else compile_exclude(r) for r in excludes]
        self.start_offset = start_offset
        self.notifier = notifier or NoOpNotifier()
        self.poll_interval = poll_interval
        self.max_line_bytes = max_line_bytes
        self._session_factory = session_factory
        self._loop: asyncio.AbstractEventLoop | None = None
        self._sessions: dict[str, TailSession] = {}
        self._claims: dict[str, set[int]] = {}

        self.scanners: list[GlobScanner] = []
        for index, pattern in enumerate(patterns):
            binding = _ScannerBinding(self, index)
            scanner = GlobScanner(pattern, binding, notifier=self.notifier)
            binding.scanner = scanner
            self.scanners.append(scanner)

        # Outbound events (host wires these)
        self.on_session_started: Callable[[str], None] | None = None
        self.on_session_closed: Callable[[str], None] | None = None
        self.on_excluded: Callable[[str, ExcludeRule], None] | None = None
        self.on_removed: Callable[[str], None] | None = None
        self.on_error: Callable[[str, Exception], None] | None = None

    @property
    def attached(self) -> bool:
        return self._loop is not None

    @property
    def sessions(self) -> dict[str, TailSession]:
        """Snapshot of live sessions keyed by path."""
        return dict(self._sessions)

    def attach(self, loop: asyncio.AbstractEventLoop) -> None:
        """Start every scanner on ``loop``.

        Raises:
            RuntimeError: If the loop is not running
        """
        if self._loop is not None:
            logger.warning("Orchestrator already attached to event loop")
            return
        if not loop.is_running():
            raise RuntimeError("Event loop must be running to attach")

        self._loop = loop
        for scanner in self.scanners:
            scanner.start(loop)
        logger.debug(f"Orchestrator attached with {len(self.scanners)} pattern(s)")

    def detach(self) -> None:
        """Cancel every scan timer and close every session."""
        for scanner in self.scanners:
            scanner.stop()
        for session in list(self._sessions.values()):
            session.close()
        self._sessions.clear()
        self._claims.clear()
        self._loop = None
        logger.debug("Orchestrator detached")

    def file_found(self, path: str, scanner_index: int = 0, initial: bool = False) -> None:
        """Handle a path newly matched by scanner ``scanner_index``."""
        rule = first_match(path, self.exclude_rules)
        if rule is not None:
            self.notifier.info(f"Skipping path {path} due to exclude rule {rule}")
            if self.on_excluded:
                self.on_excluded(path, rule)
            return

        if path in self._sessions:
            self._claims[path].add(scanner_index)
            self.notifier.debug(f"Already tailing {path}")
            return

        if self._loop is None:
            raise RuntimeError("Orchestrator not attached. Call attach() first.")

        offset = self._offset_for(path, initial)
        session = self._session_factory(
            path,
            self.on_line,
            start_offset=offset,
            notifier=self.notifier,
            poll_interval=self.poll_interval,
            max_line_bytes=self.max_line_bytes,
        )
        try:
            session.start(self._loop)
        except AcquisitionError as e:
            self.notifier.error(f"{type(e).__name__} while trying to tail {path}: {e.reason}")
            if self.on_error:
                self.on_error(path, e)
            return

        session.on_closed = self._session_closed
        self._sessions[path] = session
        self._claims[path] = {scanner_index}
        self.notifier.info(f"Watching {path}")
        if self.on_session_started:
            self.on_session_started(path)

    def file_deleted(self, path: str, scanner_index: int = 0) -> None:
        """Handle a path no longer matched by scanner ``scanner_index``."""
        self.notifier.info(f"File removed: {path}")
        if self.on_removed:
            self.on_removed(path)

        claims = self._claims.get(path)
        if claims is None:
            return
        claims.discard(scanner_index)
        if not claims:
            self._sessions[path].close()

    def _session_closed(self, session: TailSession) -> None:
        if self._sessions.get(session.path) is not session:
            return
        del self._sessions[session.path]
        self._claims.pop(session.path, None)
        if self.on_session_closed:
            self.on_session_closed(session.path)

    def _offset_for(self, path: str, initial: bool) -> int:
        if initial or self.start_offset >= 0:
            return self.start_offset
        if self._followed_elsewhere(path):
            return -1
        return 0

    def _followed_elsewhere(self, path: str) -> bool:
        try:
            st = os.stat(path)
        except OSError:
            return False
        identity = (st.st_dev, st.st_ino)
        return any(identity in session.identities for session in self._sessions.values())
