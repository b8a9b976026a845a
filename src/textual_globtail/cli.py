"""CLI entry point for globtail: tail every file matching one or more globs."""

import argparse
import asyncio
import logging
import sys

from globtail.config import GlobtailConfig, load_globtail_config
from globtail.errors import ConfigurationError
from globtail.models import DEFAULT_INTERVAL, WatchedPattern
from globtail.notifier import LoggingNotifier
from textual_globtail import __version__
from textual_globtail.consumer import LineConsumer
from textual_globtail.controller import GlobtailController


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="globtail",
        description="Tail every file matching the given paths or globs, picking up new files as they appear.",
        epilog="Examples:\n"
        "  globtail '/var/log/*.log'                  # Follow all logs\n"
        "  globtail -x '*.gz' -i 10 '/var/log/**/*'   # Rescan every 10s, skip archives\n"
        "  globtail -n --tui 'app-*.log'              # Viewer without filenames",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("paths", nargs="*", metavar="PATH", help="Path or glob to watch")
    parser.add_argument(
        "-n",
        "--no-filename",
        action="store_true",
        help="Do not prefix output lines with the file name",
    )
    parser.add_argument(
        "-i",
        "--check-interval",
        type=float,
        default=None,
        metavar="SECONDS",
        help=f"Seconds between glob rescans (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument(
        "-x",
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Skip paths matching PATTERN ('*' = one or more chars, '?' = one char); repeatable",
    )
    parser.add_argument("-c", "--config", default=None, help="Path to TOML config file")
    parser.add_argument(
        "-b",
        "--from-beginning",
        action="store_true",
        help="Read files present at start-up from the beginning instead of the end",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Seconds between checks for new data in each file",
    )
    parser.add_argument(
        "--max-line-bytes",
        type=int,
        default=None,
        metavar="N",
        help="Discard unterminated lines longer than N bytes (0 = unbounded)",
    )
    parser.add_argument("--tui", action="store_true", help="Show lines in a terminal viewer")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log discovery events (-v) or debug detail (-vv) to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> GlobtailConfig:
    """Merge an optional config file with command-line flags.

    Flags win over file values; positional paths are added to the file's
    watches.

    Raises:
        FileNotFoundError: If --config names a missing file
        ConfigurationError: If any value is invalid
    """
    config = load_globtail_config(args.config) if args.config else GlobtailConfig()

    interval = DEFAULT_INTERVAL if args.check_interval is None else args.check_interval
    config.patterns.extend(WatchedPattern(p, interval) for p in args.paths)
    config.excludes.extend(args.exclude)
    if args.no_filename:
        config.with_filenames = False
    if args.from_beginning:
        config.start_offset = 0
    if args.poll_interval is not None:
        config.poll_interval = args.poll_interval
    if args.max_line_bytes is not None:
        config.max_line_bytes = args.max_line_bytes or None

    config.validate()
    return config


def configure_logging(verbosity: int) -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    for name in ("globtail", "textual_globtail"):
        logging.getLogger(name).setLevel(level)


async def run_plain(config: GlobtailConfig) -> None:
    """Print lines to stdout until cancelled."""
    consumer = LineConsumer(with_filenames=config.with_filenames)
    controller = GlobtailController(config, notifier=LoggingNotifier("globtail"))
    controller.on_line = consumer.on_line
    await controller.run()


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the globtail CLI.

    Handles:
    - Argument parsing and config merging
    - Plain stdout output or the Textual viewer
    - Error handling and exit codes
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = build_config(args)
    except (FileNotFoundError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not config.patterns:
        parser.print_usage(sys.stderr)
        sys.exit(1)

    try:
        if args.tui:
            from textual_globtail.app import GlobtailApp

            GlobtailApp(config).run()
        else:
            asyncio.run(run_plain(config))
    except KeyboardInterrupt:
        # Gracefully handle Ctrl+C
        sys.exit(130)


if __name__ == "__main__":
    main()
