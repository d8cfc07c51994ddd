import json
from dataclasses import dataclass

from phoenix_launcher.cli.output import (
    OutputFormat,
    print_error,
    print_formatted,
    print_success,
    should_show_progress,
    stderr_is_tty,
)


@dataclass
class _Sample:
    name: str
    size: int


def test_print_formatted_text_uses_formatter(capsys):
    print_formatted({"name": "abc"}, OutputFormat.TEXT, lambda v: f"name={v['name']}")
    assert capsys.readouterr().out == "name=abc\n"


def test_print_formatted_json_round_trip(capsys):
    value = {"name": "abc", "count": 3, "flags": [True, False], "missing": None}
    print_formatted(value, OutputFormat.JSON, lambda v: "unused")
    out = capsys.readouterr().out
    assert json.loads(out) == value
    assert "unused" not in out


def test_print_formatted_json_dataclass(capsys):
    print_formatted(_Sample("x", 7), OutputFormat.JSON, lambda v: "unused")
    assert json.loads(capsys.readouterr().out) == {"name": "x", "size": 7}


def test_print_success_respects_quiet(capsys):
    print_success("done", True)
    assert capsys.readouterr().out == ""
    print_success("done", False)
    assert capsys.readouterr().out == "done\n"


def test_print_error_goes_to_stderr(capsys):
    print_error("boom")
    captured = capsys.readouterr()
    assert captured.err == "Error: boom\n"
    assert captured.out == ""


def test_should_show_progress_off_when_quiet_or_json():
    assert should_show_progress(True, OutputFormat.TEXT) is False
    assert should_show_progress(False, OutputFormat.JSON) is False


def test_should_show_progress_follows_tty(capsys):
    assert stderr_is_tty() is False
    assert should_show_progress(False, OutputFormat.TEXT) == stderr_is_tty()