"""Error taxonomy for globtail."""

from typing import Literal

AcquisitionReason = Literal["permission_denied", "is_a_directory", "not_found", "other"]


class GlobtailError(Exception):
    """Base class for all globtail errors."""


class ConfigurationError(GlobtailError, ValueError):
    """Invalid watch pattern, interval or other start-up setting."""


class AcquisitionError(GlobtailError):
    """A discovered path could not be opened for tailing.

    The originating OSError is chained as ``__cause__``.
    """

    def __init__(self, path: str, reason: AcquisitionReason, message: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(message or f"cannot tail {path}: {reason.replace('_', ' ')}")

    @classmethod
    def from_os_error(cls, path: str, exc: OSError) -> "AcquisitionError":
        """Classify an OSError raised while opening ``path``."""
        if isinstance(exc, PermissionError):
            reason = "permission_denied"
        elif isinstance(exc, IsADirectoryError):
            reason = "is_a_directory"
        elif isinstance(exc, FileNotFoundError):
            reason = "not_found"
        else:
            reason = "other"
        error = cls(path, reason, f"cannot tail {path}: {exc.strerror or exc}")
        error.__cause__ = exc
        return error


class LineBufferOverflow(GlobtailError):
    """A pending line grew past the configured limit and was discarded.

    Complete lines extracted by the same feed are kept in ``lines`` so the
    caller can still deliver them.
    """

    def __init__(self, size: int, limit: int, lines: list[str] | None = None, path: str | None = None):
        self.size = size
        self.limit = limit
        self.lines = lines or []
        self.path = path
        super().__init__(f"discarded {size} buffered bytes without a line break (limit {limit})")
