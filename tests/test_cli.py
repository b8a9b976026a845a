"""Tests for textual_globtail.cli module."""

from unittest.mock import MagicMock, patch

import pytest

from globtail.errors import ConfigurationError
from globtail.models import DEFAULT_INTERVAL, WatchedPattern
from textual_globtail.cli import build_config, build_parser, main


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestParseArgs:
    def test_defaults(self):
        args = parse("/var/log/*.log")
        assert args.paths == ["/var/log/*.log"]
        assert args.no_filename is False
        assert args.check_interval is None
        assert args.exclude == []
        assert args.tui is False

    def test_short_flags(self):
        args = parse("-n", "-i", "0.5", "-x", "*.gz", "-x", "debug", "a", "b")
        assert args.no_filename is True
        assert args.check_interval == 0.5
        assert args.exclude == ["*.gz", "debug"]
        assert args.paths == ["a", "b"]

    def test_long_flags(self):
        args = parse("--no-filename", "--check-interval", "3", "--exclude", "*.tmp", "p")
        assert args.no_filename is True
        assert args.check_interval == 3.0
        assert args.exclude == ["*.tmp"]

    def test_interval_must_be_number(self):
        with pytest.raises(SystemExit):
            parse("-i", "often", "p")

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse("--version")
        assert exc_info.value.code == 0
        assert "globtail" in capsys.readouterr().out


class TestBuildConfig:
    def test_positional_paths_use_interval(self):
        config = build_config(parse("-i", "2", "/a/*.log", "/b/*.log"))
        assert config.patterns == [WatchedPattern("/a/*.log", 2.0), WatchedPattern("/b/*.log", 2.0)]

    def test_default_interval(self):
        assert build_config(parse("/a/*.log")).patterns[0].interval == DEFAULT_INTERVAL

    def test_flags(self):
        config = build_config(
            parse("-n", "-b", "-x", "*.gz", "--poll-interval", "0.1", "--max-line-bytes", "0", "/a")
        )
        assert config.with_filenames is False
        assert config.start_offset == 0
        assert config.excludes == ["*.gz"]
        assert config.poll_interval == 0.1
        assert config.max_line_bytes is None

    def test_negative_interval(self):
        with pytest.raises(ConfigurationError):
            build_config(parse("-i", "-1", "/a"))

    def test_merges_config_file(self, tmp_path):
        path = tmp_path / "globtail.toml"
        path.write_text('exclude = ["*.gz"]\n\n[[watch]]\nglob = "/from/file/*.log"\ninterval = 9\n')
        config = build_config(parse("-c", str(path), "-x", "*.bz2", "/from/cli/*.log"))
        assert config.patterns == [
            WatchedPattern("/from/file/*.log", 9),
            WatchedPattern("/from/cli/*.log", DEFAULT_INTERVAL),
        ]
        assert config.excludes == ["*.gz", "*.bz2"]


class TestMain:
    def test_no_paths_prints_usage_and_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
        assert "usage:" in capsys.readouterr().err

    def test_bad_interval_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-i", "0", "/a"])
        assert exc_info.value.code == 1
        assert "Error:" in capsys.readouterr().err

    def test_missing_config_exits_1(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-c", str(tmp_path / "nope.toml")])
        assert exc_info.value.code == 1
        assert "Config file not found" in capsys.readouterr().err

    def test_runs_plain_mode(self):
        with patch("textual_globtail.cli.asyncio.run") as mock_run:
            main(["/a/*.log"])
        mock_run.assert_called_once()
        mock_run.call_args[0][0].close()

    def test_keyboard_interrupt_exits_130(self):
        def interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        with patch("textual_globtail.cli.asyncio.run", side_effect=interrupt):
            with pytest.raises(SystemExit) as exc_info:
                main(["/a/*.log"])
        assert exc_info.value.code == 130

    def test_tui_mode_launches_app(self):
        mock_app = MagicMock()
        with patch("textual_globtail.app.GlobtailApp", return_value=mock_app) as app_cls:
            main(["--tui", "-n", "/a/*.log"])
        config = app_cls.call_args[0][0]
        assert config.with_filenames is False
        mock_app.run.assert_called_once()
