"""Polling tail reader: delivers bytes appended to one file.

Only regular files are tailed, opened without blocking and read on the event
loop; growth is detected by polling every ``poll_interval`` seconds. Handles
truncation (restart at byte 0) and rotation (the path now names a different
file: drain the old handle, then read the new file from the start).
"""

import asyncio
import errno
import logging
import os
import stat
from collections.abc import Callable

from globtail.errors import AcquisitionError

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.25
DEFAULT_CHUNK_SIZE = 65536


class FileTail:
    """One open file plus the task that polls it for new bytes."""

    def __init__(
        self,
        path: str,
        on_data: Callable[[bytes], None],
        start_offset: int = -1,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        on_error: Callable[[OSError], None] | None = None,
    ):
        """Initialize tail. Nothing is opened until open() is called.

        Args:
            path: File to follow
            on_data: Called with each non-empty chunk, in file order
            start_offset: -1 for "only bytes appended from now on", otherwise
                the absolute byte position to start reading from
            poll_interval: Seconds between growth checks
            chunk_size: Largest chunk handed to on_data
            on_error: Called once if reading fails permanently
        """
        self.path = path
        self.on_data = on_data
        self.start_offset = start_offset
        self.poll_interval = poll_interval
        self.chunk_size = chunk_size
        self.on_error = on_error
        self._file = None
        self._identity: tuple[int, int] | None = None
        self._seen: set[tuple[int, int]] = set()
        self._position = 0
        self._task: asyncio.Task | None = None
        self._closed = False

    @property
    def position(self) -> int:
        """Byte offset of the next read."""
        return self._position

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def identities(self) -> frozenset[tuple[int, int]]:
        """(st_dev, st_ino) of every file this tail has read, rotated ones included."""
        return frozenset(self._seen)

    def open(self) -> None:
        """Open the file and seek to the starting offset.

        Raises:
            AcquisitionError: The path cannot be opened (permission denied,
                is a directory, missing, or any other OSError)
        """
        try:
            self._file, st = _open_regular(self.path)
            self._identity = (st.st_dev, st.st_ino)
            self._seen.add(self._identity)
            if self.start_offset < 0:
                self._position = st.st_size
            else:
                self._position = min(self.start_offset, st.st_size)
            self._file.seek(self._position)
        except OSError as e:
            self._close_handle()
            raise AcquisitionError.from_os_error(self.path, e) from e
        logger.debug(f"Opened {self.path} at offset {self._position}")

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Start polling on ``loop``."""
        if self._file is None:
            raise RuntimeError(f"Tail for {self.path} is not open")
        if self._task is not None:
            return
        self._task = loop.create_task(self._follow(), name=f"tail:{self.path}")

    def close(self) -> None:
        """Stop polling and release the file handle. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._close_handle()

    async def _follow(self) -> None:
        try:
            while not self._closed:
                self._read_available()
                if self._closed:
                    break
                self._check_replaced()
                await asyncio.sleep(self.poll_interval)
        except OSError as e:
            logger.debug(f"Read failed for {self.path}: {e}")
            self._closed = True
            self._close_handle()
            if self.on_error:
                self.on_error(e)

    def _read_available(self) -> None:
        """Deliver everything between the current position and end of file."""
        while not self._closed and self._file is not None:
            chunk = self._file.read(self.chunk_size)
            if not chunk:
                return
            self._position += len(chunk)
            self.on_data(chunk)

    def _check_replaced(self) -> None:
        """Detect truncation in place or a different file behind the path."""
        try:
            st = os.stat(self.path)
        except FileNotFoundError:
            # Deleted or mid-rotation; keep reading the handle we have.
            return

        if (st.st_dev, st.st_ino) != self._identity:
            self._read_available()
            if self._closed:
                return
            try:
                new_file, new_st = _open_regular(self.path)
            except FileNotFoundError:
                return
            self._close_handle()
            self._file = new_file
            self._identity = (new_st.st_dev, new_st.st_ino)
            self._seen.add(self._identity)
            self._position = 0
            logger.info(f"File rotated, reading new file from start: {self.path}")
            return

        size = os.fstat(self._file.fileno()).st_size
        if size < self._position:
            logger.info(f"File truncated, rewinding: {self.path}")
            self._file.seek(0)
            self._position = 0

    def _close_handle(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


def _open_regular(path: str):
    """Open ``path`` for unbuffered binary reads; return (file, stat_result).

    The open never waits on a FIFO or device. Anything but a regular file is
    refused with an OSError.
    """
    fd = os.open(path, os.O_RDONLY | getattr(os, "O_NONBLOCK", 0))
    try:
        st = os.fstat(fd)
        if stat.S_ISDIR(st.st_mode):
            raise IsADirectoryError(errno.EISDIR, os.strerror(errno.EISDIR), path)
        if not stat.S_ISREG(st.st_mode):
            raise OSError(errno.EINVAL, "not a regular file", path)
        return os.fdopen(fd, "rb", buffering=0), st
    except BaseException:
        os.close(fd)
        raise


def open_tail(
    path: str,
    on_data: Callable[[bytes], None],
    start_offset: int = -1,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_error: Callable[[OSError], None] | None = None,
) -> FileTail:
    """Open ``path`` for tailing. Call ``start(loop)`` on the result to begin.

    Raises:
        AcquisitionError: The path cannot be opened
    """
    tail = FileTail(
        path,
        on_data,
        start_offset=start_offset,
        poll_interval=poll_interval,
        chunk_size=chunk_size,
        on_error=on_error,
    )
    tail.open()
    return tail
