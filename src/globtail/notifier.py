"""Pluggable observability sink for globtail components.

Every component takes a notifier at construction instead of reaching for a
process-wide logger. Hosts can pass their own implementation for testing,
embedding, or UI integration.
"""

import logging
from typing import Protocol


class GlobtailNotifier(Protocol):
    """Protocol for leveled events - host can provide custom implementation."""

    def debug(self, message: str) -> None:
        """Diagnostic detail."""
        ...

    def info(self, message: str) -> None:
        """Informational message."""
        ...

    def warning(self, message: str) -> None:
        """Warning message."""
        ...

    def error(self, message: str) -> None:
        """Error message."""
        ...


class NoOpNotifier:
    """Silent notifier - default when components are embedded."""

    def debug(self, msg: str) -> None:
        pass

    def info(self, msg: str) -> None:
        pass

    def warning(self, msg: str) -> None:
        pass

    def error(self, msg: str) -> None:
        pass


class LoggingNotifier:
    """Implementation using stdlib logging."""

    def __init__(self, name: str = "globtail"):
        self.logger = logging.getLogger(name)

    def debug(self, msg: str) -> None:
        self.logger.debug(msg)

    def info(self, msg: str) -> None:
        self.logger.info(msg)

    def warning(self, msg: str) -> None:
        self.logger.warning(msg)

    def error(self, msg: str) -> None:
        self.logger.error(msg)


class RecordingNotifier:
    """Keeps every event in memory as ``(level, message)`` pairs."""

    def __init__(self):
        self.events: list[tuple[str, str]] = []

    def debug(self, msg: str) -> None:
        self.events.append(("debug", msg))

    def info(self, msg: str) -> None:
        self.events.append(("info", msg))

    def warning(self, msg: str) -> None:
        self.events.append(("warning", msg))

    def error(self, msg: str) -> None:
        self.events.append(("error", msg))

    def messages(self, level: str) -> list[str]:
        """Return messages recorded at ``level``."""
        return [m for lvl, m in self.events if lvl == level]
