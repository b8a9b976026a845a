"""Shared data models for globtail."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from globtail.errors import ConfigurationError

DEFAULT_INTERVAL = 5.0


@dataclass(frozen=True)
class WatchedPattern:
    """A glob expression and how often to re-evaluate it."""

    glob: str
    """Path or glob, such as "/var/log/*.log"."""

    interval: float = DEFAULT_INTERVAL
    """Seconds between scans (fractions allowed)."""

    def __post_init__(self):
        if not isinstance(self.glob, str) or not self.glob:
            raise ConfigurationError("Watch pattern must be a non-empty string")
        try:
            interval = float(self.interval)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid check interval for {self.glob!r}: {self.interval!r}") from e
        if not math.isfinite(interval) or interval <= 0:
            raise ConfigurationError(f"Check interval for {self.glob!r} must be a positive number, got {self.interval!r}")
        object.__setattr__(self, "interval", interval)


class ScannerState(Enum):
    """Lifecycle of a single scan pass."""

    IDLE = "idle"
    SCANNING = "scanning"


@dataclass
class ScanResult:
    """Outcome of one rescan tick."""

    added: list[str] = field(default_factory=list)
    """Paths that match now but did not on the previous tick (sorted)."""

    removed: list[str] = field(default_factory=list)
    """Paths that matched on the previous tick but no longer do (sorted)."""

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class DiscoveryHandler(Protocol):
    """Capability a GlobScanner reports discoveries to."""

    def on_found(self, path: str) -> None:
        """A path started matching the pattern."""
        ...

    def on_deleted(self, path: str) -> None:
        """A path stopped matching the pattern."""
        ...
