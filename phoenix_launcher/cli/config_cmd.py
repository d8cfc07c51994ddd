"""The ``config`` command: show, read and change user settings."""

from __future__ import annotations

import argparse
import dataclasses
import json
import re

from ..config import Config, config_path
from .output import OutputFormat, print_formatted

_UNSIGNED = re.compile(r"\+?[0-9]+")
_BOOL_TEXT = {True: "true", False: "false"}


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError("provided string was not `true` or `false`")


def _parse_unsigned(value: str, maximum: int) -> int:
    if not _UNSIGNED.fullmatch(value):
        raise ValueError(f"invalid digit found in string: {value!r}")
    number = int(value)
    if number > maximum:
        raise ValueError(f"number too large to fit in target type: {value}")
    return number


def get_config_value(config: Config, key: str) -> str:
    """The value of the dotted ``key`` as text; ValueError for unknown keys."""
    launcher, game, updates, backups = config.launcher, config.game, config.updates, config.backups
    match key.split("."):
        case ["launcher", "theme"]:
            return str(launcher.theme)
        case ["launcher", "keep_open"]:
            return _BOOL_TEXT[launcher.keep_open]
        case ["game", "directory"]:
            return game.directory if game.directory is not None else "<not set>"
        case ["game", "branch"]:
            return game.branch
        case ["game", "command_params"]:
            return game.command_params
        case ["updates", "check_on_startup"]:
            return _BOOL_TEXT[updates.check_on_startup]
        case ["updates", "prevent_save_move"]:
            return _BOOL_TEXT[updates.prevent_save_move]
        case ["updates", "remove_previous_version"]:
            return _BOOL_TEXT[updates.remove_previous_version]
        case ["backups", "max_count"]:
            return str(backups.max_count)
        case ["backups", "compression_level"]:
            return str(backups.compression_level)
        case ["backups", "backup_on_launch"]:
            return _BOOL_TEXT[backups.backup_on_launch]
        case ["backups", "backup_on_end"]:
            return _BOOL_TEXT[backups.backup_on_end]
        case ["backups", "backup_before_update"]:
            return _BOOL_TEXT[backups.backup_before_update]
    raise ValueError(f"Unknown config key: {key}")


def set_config_value(config: Config, key: str, value: str) -> None:
    """Set the dotted ``key`` from text; ValueError for bad values or keys."""
    launcher, game, updates, backups = config.launcher, config.game, config.updates, config.backups
    match key.split("."):
        case ["launcher", "keep_open"]:
            launcher.keep_open = _parse_bool(value)
        case ["game", "directory"]:
            game.directory = value
        case ["game", "branch"]:
            game.branch = value
        case ["game", "command_params"]:
            game.command_params = value
        case ["updates", "check_on_startup"]:
            updates.check_on_startup = _parse_bool(value)
        case ["updates", "prevent_save_move"]:
            updates.prevent_save_move = _parse_bool(value)
        case ["updates", "remove_previous_version"]:
            updates.remove_previous_version = _parse_bool(value)
        case ["backups", "max_count"]:
            backups.max_count = _parse_unsigned(value, 0xFFFF_FFFF)
        case ["backups", "compression_level"]:
            backups.compression_level = _parse_unsigned(value, 0xFF)
        case ["backups", "backup_on_launch"]:
            backups.backup_on_launch = _parse_bool(value)
        case ["backups", "backup_on_end"]:
            backups.backup_on_end = _parse_bool(value)
        case ["backups", "backup_before_update"]:
            backups.backup_before_update = _parse_bool(value)
        case _:
            raise ValueError(f"Unknown or read-only config key: {key}")


def register(subparsers: argparse._SubParsersAction) -> argparse.ArgumentParser:
    """Add the ``config`` command and its subcommands."""
    parser = subparsers.add_parser("config", help="Configuration management")
    commands = parser.add_subparsers(dest="config_command", required=True)
    commands.add_parser("show", help="Show current configuration")
    get = commands.add_parser("get", help="Get a specific config value")
    get.add_argument("key", help='Config key (e.g., "game.directory", "launcher.theme")')
    set_ = commands.add_parser("set", help="Set a config value")
    set_.add_argument("key", help='Config key (e.g., "game.directory", "launcher.theme")')
    set_.add_argument("value", help="Value to set")
    commands.add_parser("path", help="Show config file path")
    return parser


def _show(fmt: OutputFormat) -> None:
    config = Config.load()
    if fmt is OutputFormat.JSON:
        print(json.dumps(dataclasses.asdict(config), indent=2))
    else:
        print(config.to_toml())


def _get(key: str, fmt: OutputFormat) -> None:
    value = get_config_value(Config.load(), key)
    print(json.dumps(value) if fmt is OutputFormat.JSON else value)


def _set(key: str, value: str) -> None:
    config = Config.load()
    set_config_value(config, key, value)
    config.save()
    print(f"Set {key} = {value}")


def _path(fmt: OutputFormat) -> None:
    path = config_path()
    result = {"path": str(path), "exists": path.exists()}
    print_formatted(
        result, fmt, lambda r: f"{r['path']}{'' if r['exists'] else ' (not found)'}"
    )


def run(args: argparse.Namespace, fmt: OutputFormat, quiet: bool) -> None:
    """Run the parsed ``config`` subcommand."""
    match args.config_command:
        case "show":
            _show(fmt)
        case "get":
            _get(args.key, fmt)
        case "set":
            _set(args.key, args.value)
        case "path":
            _path(fmt)
        case other:
            raise ValueError(f"Unknown config command: {other}")