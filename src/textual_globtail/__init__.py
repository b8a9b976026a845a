"""textual-globtail: command-line and TUI front ends for globtail."""

__version__ = "0.1.0"

# Public API
from textual_globtail.app import GlobtailApp
from textual_globtail.consumer import LineConsumer, format_line
from textual_globtail.controller import GlobtailController

__all__ = [
    "__version__",
    # Primary components
    "GlobtailApp",
    "GlobtailController",
    "LineConsumer",
    "format_line",
]
