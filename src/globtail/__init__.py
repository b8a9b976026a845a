"""globtail: discover files by glob and tail every match."""

__version__ = "0.1.0"

from globtail.assembler import LineAssembler
from globtail.config import GlobtailConfig, load_globtail_config
from globtail.errors import AcquisitionError, ConfigurationError, GlobtailError, LineBufferOverflow
from globtail.matcher import ExcludeRule, compile_exclude
from globtail.models import ScannerState, ScanResult, WatchedPattern
from globtail.notifier import GlobtailNotifier, LoggingNotifier, NoOpNotifier
from globtail.orchestrator import SessionOrchestrator
from globtail.scanner import GlobScanner
from globtail.session import TailSession

__all__ = [
    "__version__",
    # Models
    "WatchedPattern",
    "ScanResult",
    "ScannerState",
    "ExcludeRule",
    "compile_exclude",
    "LineAssembler",
    # Errors
    "GlobtailError",
    "ConfigurationError",
    "AcquisitionError",
    "LineBufferOverflow",
    # Notifiers
    "GlobtailNotifier",
    "NoOpNotifier",
    "LoggingNotifier",
    # Runtime
    "GlobScanner",
    "TailSession",
    "SessionOrchestrator",
    # Config
    "GlobtailConfig",
    "load_globtail_config",
]
