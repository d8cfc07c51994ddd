"""Output helpers shared by the command-line commands."""

from __future__ import annotations

import dataclasses
import json
import sys
from collections.abc import Callable
from enum import Enum
from typing import Any, TypeVar

T = TypeVar("T")


class OutputFormat(Enum):
    """How command results are printed."""

    TEXT = "text"
    JSON = "json"


def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def print_formatted(value: T, fmt: OutputFormat, text_formatter: Callable[[T], str]) -> None:
    """Print ``value`` as pretty JSON, or as text produced by ``text_formatter``."""
    if fmt is OutputFormat.TEXT:
        print(text_formatter(value))
    else:
        print(json.dumps(_jsonable(value), indent=2, default=str))


def print_success(message: str, quiet: bool) -> None:
    """Print a success message unless ``quiet`` is set."""
    if not quiet:
        print(message)


def print_error(message: str) -> None:
    """Print an error message to standard error; never suppressed."""
    print(f"Error: {message}", file=sys.stderr)


def stderr_is_tty() -> bool:
    """Whether standard error is a terminal."""
    stream = sys.stderr
    try:
        return bool(stream is not None and stream.isatty())
    except (AttributeError, ValueError):
        return False


def should_show_progress(quiet: bool, fmt: OutputFormat) -> bool:
    """Progress is shown only for text output to a terminal when not quiet."""
    return not quiet and fmt is OutputFormat.TEXT and stderr_is_tty()