"""Line rendering for the command-line front end."""

import sys
from typing import TextIO


def format_line(path: str, line: str, with_filenames: bool = True) -> str:
    """Render one line as "<path>: <line>" or just "<line>"."""
    if with_filenames:
        return f"{path}: {line}"
    return line


class LineConsumer:
    """Writes each (path, line) pair to a text stream."""

    def __init__(self, with_filenames: bool = True, stream: TextIO | None = None):
        """Initialize consumer.

        Args:
            with_filenames: Prefix each line with its source path
            stream: Output stream (defaults to sys.stdout at write time)
        """
        self.with_filenames = with_filenames
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def on_line(self, path: str, line: str) -> None:
        self.stream.write(format_line(path, line, self.with_filenames) + "\n")
        self.stream.flush()
