"""Configuration loading for globtail."""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

from globtail.errors import ConfigurationError
from globtail.models import DEFAULT_INTERVAL, WatchedPattern
from globtail.reader import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINE_BYTES = 1024 * 1024


@dataclass
class GlobtailConfig:
    """Everything needed to build a SessionOrchestrator and its consumer."""

    patterns: list[WatchedPattern] = field(default_factory=list)
    """Globs to watch."""

    excludes: list[str] = field(default_factory=list)
    """Exclude wildcards ("*" = one or more chars, "?" = exactly one)."""

    with_filenames: bool = True
    """Prefix output lines with "<path>: "."""

    start_offset: int = -1
    """Offset for files present at start-up; -1 means only new data."""

    poll_interval: float = DEFAULT_POLL_INTERVAL
    """Seconds between growth checks of a tailed file."""

    max_line_bytes: int | None = DEFAULT_MAX_LINE_BYTES
    """Largest unterminated line kept in memory; None for unbounded."""

    def validate(self) -> None:
        """Raise ConfigurationError if any setting is out of range."""
        if self.start_offset < -1:
            raise ConfigurationError(f"start_offset must be -1 or a byte offset, got {self.start_offset}")
        if not math.isfinite(self.poll_interval) or self.poll_interval <= 0:
            raise ConfigurationError(f"poll_interval must be a positive number, got {self.poll_interval}")
        if self.max_line_bytes is not None and self.max_line_bytes < 1:
            raise ConfigurationError(f"max_line_bytes must be positive, got {self.max_line_bytes}")


def load_globtail_config(path: str | Path) -> GlobtailConfig:
    """Load a TOML configuration file.

    Args:
        path: Path to TOML config file

    Returns:
        Validated GlobtailConfig

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the file is not valid TOML or a value is invalid
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Failed to parse config file {path}: {e}") from e

    config = config_from_mapping(raw)
    logger.debug(f"Loaded config from {path}: {len(config.patterns)} watch(es), {len(config.excludes)} exclude(s)")
    return config


def config_from_mapping(raw: dict) -> GlobtailConfig:
    """Build a GlobtailConfig from parsed TOML data."""
    try:
        patterns = [_pattern_from_table(w) for w in raw.get("watch", [])]
        excludes = raw.get("exclude", [])
        if isinstance(excludes, str):
            excludes = [excludes]
        max_line_bytes = int(raw.get("max_line_bytes", DEFAULT_MAX_LINE_BYTES))
        config = GlobtailConfig(
            patterns=patterns,
            excludes=[str(x) for x in excludes],
            with_filenames=bool(raw.get("with_filenames", True)),
            start_offset=int(raw.get("start_offset", -1)),
            poll_interval=float(raw.get("poll_interval", DEFAULT_POLL_INTERVAL)),
            max_line_bytes=max_line_bytes or None,
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(f"Invalid config value: {e}") from e

    config.validate()
    return config


def _pattern_from_table(table) -> WatchedPattern:
    if isinstance(table, str):
        return WatchedPattern(table)
    if not isinstance(table, dict) or "glob" not in table:
        raise ConfigurationError(f"Each [[watch]] entry needs a 'glob' key, got {table!r}")
    return WatchedPattern(table["glob"], table.get("interval", DEFAULT_INTERVAL))
