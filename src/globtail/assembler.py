"""Turn arbitrary byte chunks into complete lines."""

from collections.abc import Iterator

from globtail.errors import LineBufferOverflow

DELIMITER = b"\n"


class LineAssembler:
    """Accumulates chunks for one file and emits complete lines in order.

    Complete lines are cut out of the buffer as soon as ``feed`` is called, so
    after every call the buffer holds only the trailing fragment that has not
    seen a delimiter yet. The following always holds:

        bytes_fed == bytes_emitted + buffered + bytes_discarded

    where ``bytes_emitted`` counts line bytes plus their delimiters.
    """

    def __init__(
        self,
        max_line_bytes: int | None = None,
        encoding: str = "utf-8",
        errors: str = "replace",
    ):
        """Initialize assembler.

        Args:
            max_line_bytes: Largest fragment kept while waiting for a delimiter.
                None keeps the buffer unbounded.
            encoding: Codec used to decode emitted lines
            errors: Codec error handler
        """
        if max_line_bytes is not None and max_line_bytes < 1:
            raise ValueError(f"max_line_bytes must be positive, got {max_line_bytes}")
        self.max_line_bytes = max_line_bytes
        self.encoding = encoding
        self.errors = errors
        self._buffer = bytearray()
        self.bytes_fed = 0
        self.bytes_emitted = 0
        self.bytes_discarded = 0

    @property
    def buffered(self) -> int:
        """Number of bytes waiting for a delimiter."""
        return len(self._buffer)

    @property
    def pending(self) -> bytes:
        return bytes(self._buffer)

    def feed(self, chunk: bytes) -> Iterator[str]:
        """Add ``chunk`` and return the lines it completes.

        Args:
            chunk: Raw bytes in file order

        Returns:
            Iterator over decoded lines, delimiter stripped. Empty lines are
            yielded as "".

        Raises:
            LineBufferOverflow: The trailing fragment exceeded max_line_bytes.
                It was discarded; lines completed by this chunk are attached.
        """
        self.bytes_fed += len(chunk)
        self._buffer += chunk

        raw_lines: list[bytes] = []
        end = self._buffer.rfind(DELIMITER)
        if end != -1:
            complete = bytes(self._buffer[: end + 1])
            del self._buffer[: end + 1]
            self.bytes_emitted += len(complete)
            raw_lines = complete.split(DELIMITER)[:-1]

        if self.max_line_bytes is not None and len(self._buffer) > self.max_line_bytes:
            size = len(self._buffer)
            self.bytes_discarded += size
            self._buffer.clear()
            raise LineBufferOverflow(size, self.max_line_bytes, lines=list(self._decode_all(raw_lines)))

        return self._decode_all(raw_lines)

    def flush(self) -> str | None:
        """Return and clear the unterminated fragment, if any."""
        if not self._buffer:
            return None
        data = bytes(self._buffer)
        self._buffer.clear()
        # Counted as emitted so the conservation invariant keeps holding.
        self.bytes_emitted += len(data)
        return data.decode(self.encoding, self.errors)

    def _decode_all(self, raw_lines: list[bytes]) -> Iterator[str]:
        for raw in raw_lines:
            yield raw.decode(self.encoding, self.errors)
