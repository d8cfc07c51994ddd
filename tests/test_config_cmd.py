import argparse
import json

import pytest

from phoenix_launcher.cli import config_cmd
from phoenix_launcher.cli.config_cmd import get_config_value, set_config_value
from phoenix_launcher.cli.output import OutputFormat
from phoenix_launcher.config import Config, config_path


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


def _parse(*argv):
    parser = argparse.ArgumentParser()
    sub = parser.add_subparsers(dest="command", required=True)
    config_cmd.register(sub)
    return parser.parse_args(list(argv))


def test_get_defaults():
    config = Config()
    assert get_config_value(config, "game.branch") == "experimental"
    assert get_config_value(config, "game.directory") == "<not set>"
    assert get_config_value(config, "launcher.theme") == "Amber"
    assert get_config_value(config, "backups.max_count") == "6"
    assert get_config_value(config, "updates.check_on_startup") == "true"
    assert get_config_value(config, "launcher.keep_open") == "false"


def test_get_unknown_key():
    with pytest.raises(ValueError, match="Unknown config key: game.nothing"):
        get_config_value(Config(), "game.nothing")


@pytest.mark.parametrize(
    "key,value",
    [
        ("game.directory", "C:\\Games\\CDDA"),
        ("game.branch", "stable"),
        ("game.command_params", "--world x"),
        ("launcher.keep_open", "true"),
        ("updates.prevent_save_move", "true"),
        ("updates.remove_previous_version", "true"),
        ("updates.check_on_startup", "false"),
        ("backups.max_count", "42"),
        ("backups.compression_level", "9"),
        ("backups.backup_on_launch", "true"),
        ("backups.backup_on_end", "true"),
        ("backups.backup_before_update", "false"),
    ],
)
def test_set_get_round_trip(key, value):
    config = Config()
    set_config_value(config, key, value)
    assert get_config_value(config, key) == value


def test_set_compression_level_is_int():
    config = Config()
    set_config_value(config, "backups.compression_level", "+3")
    assert config.backups.compression_level == 3


@pytest.mark.parametrize(
    "key,value",
    [
        ("backups.compression_level", "256"),
        ("backups.compression_level", "-1"),
        ("backups.max_count", "abc"),
        ("launcher.keep_open", "yes"),
        ("launcher.keep_open", "True"),
        ("launcher.theme", "Purple"),
        ("nothing", "x"),
    ],
)
def test_set_rejects(key, value):
    config = Config()
    with pytest.raises(ValueError):
        set_config_value(config, key, value)
    assert config == Config()


def test_run_set_then_get(isolated, capsys):
    config_cmd.run(_parse("config", "set", "game.branch", "stable"), OutputFormat.TEXT, False)
    assert capsys.readouterr().out == "Set game.branch = stable\n"
    assert Config.load().game.branch == "stable"
    config_cmd.run(_parse("config", "get", "game.branch"), OutputFormat.JSON, False)
    assert json.loads(capsys.readouterr().out) == "stable"


def test_run_get_unknown_raises(isolated):
    with pytest.raises(ValueError):
        config_cmd.run(_parse("config", "get", "bad.key"), OutputFormat.TEXT, False)


def test_run_show_json(isolated, capsys):
    config_cmd.run(_parse("config", "show"), OutputFormat.JSON, False)
    data = json.loads(capsys.readouterr().out)
    assert data["game"]["branch"] == "experimental"
    assert data["game"]["directory"] is None
    assert data["backups"]["compression_level"] == 6


def test_run_show_text_round_trips(isolated, capsys):
    config_cmd.run(_parse("config", "show"), OutputFormat.TEXT, False)
    assert Config.from_toml(capsys.readouterr().out) == Config()


def test_run_path(isolated, capsys):
    config_cmd.run(_parse("config", "path"), OutputFormat.JSON, False)
    data = json.loads(capsys.readouterr().out)
    assert data == {"path": str(config_path()), "exists": False}
    Config().save()
    config_cmd.run(_parse("config", "path"), OutputFormat.TEXT, False)
    assert capsys.readouterr().out == f"{config_path()}\n"