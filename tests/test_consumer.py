"""Tests for LineConsumer rendering."""

from io import StringIO

from textual_globtail.consumer import LineConsumer, format_line


def test_format_with_filename():
    assert format_line("/tmp/x1.log", "hello") == "/tmp/x1.log: hello"


def test_format_without_filename():
    assert format_line("/tmp/x1.log", "hello", with_filenames=False) == "hello"


def test_consumer_writes_lines_in_order():
    out = StringIO()
    consumer = LineConsumer(with_filenames=True, stream=out)
    consumer.on_line("/tmp/x1.log", "hello")
    consumer.on_line("/tmp/x1.log", "world")
    assert out.getvalue() == "/tmp/x1.log: hello\n/tmp/x1.log: world\n"


def test_consumer_empty_line():
    out = StringIO()
    LineConsumer(with_filenames=False, stream=out).on_line("/tmp/a", "")
    assert out.getvalue() == "\n"


def test_consumer_defaults_to_stdout(capsys):
    LineConsumer(with_filenames=False).on_line("/tmp/a", "plain")
    assert capsys.readouterr().out == "plain\n"
