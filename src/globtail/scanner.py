"""GlobScanner: periodic glob evaluation with added/removed diffing."""

import asyncio
import glob
import logging

from globtail.models import DiscoveryHandler, ScannerState, ScanResult, WatchedPattern
from globtail.notifier import GlobtailNotifier, NoOpNotifier

logger = logging.getLogger(__name__)


class GlobScanner:
    """Watches one glob and reports files appearing and disappearing.

    We rescan on a timer instead of watching directories, which keeps globs
    like /foo/*/bar*/*.log simple at the cost of a full expansion per tick.
    """

    def __init__(
        self,
        pattern: WatchedPattern,
        handler: DiscoveryHandler,
        notifier: GlobtailNotifier | None = None,
    ):
        """Initialize scanner.

        Args:
            pattern: Glob and rescan interval
            handler: Receives on_found/on_deleted for each change
            notifier: Observability sink (defaults to NoOpNotifier - silent)
        """
        self.pattern = pattern
        self.handler = handler
        self.notifier = notifier or NoOpNotifier()
        self.state = ScannerState.IDLE
        self.scan_count = 0
        self._known: set[str] = set()
        self._task: asyncio.Task | None = None

    @property
    def known(self) -> frozenset[str]:
        """Paths that matched on the last tick."""
        return frozenset(self._known)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def expand(self) -> set[str]:
        """Expand the glob against the file system right now."""
        return set(glob.glob(self.pattern.glob, recursive=True))

    def tick(self) -> ScanResult:
        """Run one scan pass and notify the handler.

        Added paths are all reported before any removed path. A handler that
        raises for one path is logged and reported; the other paths of the
        pass are still delivered.

        Returns:
            ScanResult with sorted added and removed paths

        Raises:
            RuntimeError: Called while a pass for this scanner is in progress
        """
        if self.state is ScannerState.SCANNING:
            raise RuntimeError(f"Scan of {self.pattern.glob!r} is already in progress")

        self.state = ScannerState.SCANNING
        try:
            self.scan_count += 1
            self.notifier.debug(f"Searching for files in {self.pattern.glob}")
            current = self.expand()
            result = ScanResult(
                added=sorted(current - self._known),
                removed=sorted(self._known - current),
            )
            self._known = current

            for path in result.added:
                self._notify(self.handler.on_found, path)
            for path in result.removed:
                self._notify(self.handler.on_deleted, path)
            return result
        finally:
            self.state = ScannerState.IDLE

    def _notify(self, callback, path: str) -> None:
        try:
            callback(path)
        except Exception as e:
            logger.exception(f"Handler failed for {path}")
            self.notifier.error(f"Handling {path} from {self.pattern.glob} failed: {e}")

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Scan on the next loop turn, then every ``pattern.interval`` seconds."""
        if self.running:
            return
        self._task = loop.create_task(self._run(), name=f"scan:{self.pattern.glob}")

    def stop(self) -> None:
        """Cancel the periodic timer. Idempotent."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            try:
                self.tick()
            except Exception as e:
                logger.exception(f"Scan of {self.pattern.glob!r} failed")
                self.notifier.error(f"Scan of {self.pattern.glob} failed: {e}")
            await asyncio.sleep(self.pattern.interval)
