"""Pytest configuration and fixtures."""

import asyncio
import sys
import time
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from globtail.notifier import RecordingNotifier  # noqa: E402


@pytest.fixture
def notifier():
    """Notifier that records every event."""
    return RecordingNotifier()


@pytest.fixture
def log_dir(tmp_path):
    """Directory for files under test."""
    directory = tmp_path / "logs"
    directory.mkdir()
    return directory


@pytest.fixture
def wait_until():
    """Return a coroutine that polls a predicate until it holds or times out."""

    async def _wait(predicate, timeout: float = 3.0, interval: float = 0.01) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            await asyncio.sleep(interval)
        return predicate()

    return _wait
