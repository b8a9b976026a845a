"""TailSession: one discovered file streaming lines to a consumer."""

import asyncio
import logging
from collections.abc import Callable

from globtail.assembler import LineAssembler
from globtail.errors import LineBufferOverflow
from globtail.notifier import GlobtailNotifier, NoOpNotifier
from globtail.reader import DEFAULT_POLL_INTERVAL, FileTail, open_tail

logger = logging.getLogger(__name__)

LineCallback = Callable[[str, str], None]


class TailSession:
    """Bridges the tail reader's chunks to a LineAssembler and a line consumer.

    The session does nothing until ``start`` is called. Acquisition failures
    raised by ``start`` are the caller's to handle; failures after that are
    reported through the notifier and ``on_closed``.
    """

    def __init__(
        self,
        path: str,
        on_line: LineCallback,
        start_offset: int = -1,
        notifier: GlobtailNotifier | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_line_bytes: int | None = None,
        encoding: str = "utf-8",
        tail_factory: Callable[..., FileTail] = open_tail,
    ):
        """Initialize session.

        Args:
            path: File to tail
            on_line: Consumer receiving (path, line)
            start_offset: -1 for new data only, otherwise absolute byte offset
            notifier: Observability sink (defaults to NoOpNotifier - silent)
            poll_interval: Seconds between growth checks
            max_line_bytes: Bound on an unterminated line, None for unbounded
            encoding: Codec for decoding lines
            tail_factory: Opens the reader primitive; open_tail by default
        """
        self.path = path
        self.on_line = on_line
        self.start_offset = start_offset
        self.notifier = notifier or NoOpNotifier()
        self.poll_interval = poll_interval
        self.assembler = LineAssembler(max_line_bytes=max_line_bytes, encoding=encoding)
        self._tail_factory = tail_factory
        self._tail: FileTail | None = None
        self._closed = False
        self.lines_delivered = 0

        # Outbound event (orchestrator wires this)
        self.on_closed: Callable[["TailSession"], None] | None = None

    @property
    def active(self) -> bool:
        return self._tail is not None and not self._closed

    @property
    def identities(self) -> frozenset[tuple[int, int]]:
        """Files (st_dev, st_ino) read by this session, rotated ones included."""
        if self._tail is None:
            return frozenset()
        return self._tail.identities

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Acquire the file and begin streaming.

        Raises:
            AcquisitionError: The reader could not open the path
            RuntimeError: The session was already started or closed
        """
        if self._tail is not None or self._closed:
            raise RuntimeError(f"Session for {self.path} cannot be started twice")
        self._tail = self._tail_factory(
            self.path,
            self._on_data,
            self.start_offset,
            poll_interval=self.poll_interval,
            on_error=self._on_tail_error,
        )
        self._tail.start(loop)
        logger.debug(f"Session started: {self.path} (offset {self.start_offset})")

    def close(self) -> None:
        """Release the file handle. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._tail is not None:
            self._tail.close()
        logger.debug(f"Session closed: {self.path} ({self.lines_delivered} lines)")
        if self.on_closed:
            self.on_closed(self)

    def _on_data(self, chunk: bytes) -> None:
        """Handle a chunk from the reader."""
        try:
            lines = list(self.assembler.feed(chunk))
        except LineBufferOverflow as e:
            e.path = self.path
            self._deliver(e.lines)
            self.notifier.warning(f"{self.path}: {e}")
            return
        self._deliver(lines)

    def _deliver(self, lines: list[str]) -> None:
        for line in lines:
            if self._closed:
                return
            self.lines_delivered += 1
            self.on_line(self.path, line)

    def _on_tail_error(self, error: OSError) -> None:
        self.notifier.error(f"{type(error).__name__} while reading {self.path}: {error}")
        self.close()

    def __repr__(self) -> str:
        state = "active" if self.active else ("closed" if self._closed else "new")
        return f"TailSession({self.path!r}, {state})"
