import tomllib

import pytest

from phoenix_launcher.config import Config


def test_config_default_values():
    config = Config()

    assert config.launcher.theme == "Amber"
    assert config.launcher.keep_open is False

    assert config.game.directory is None
    assert config.game.branch == "experimental"
    assert config.game.command_params == ""

    assert config.updates.check_on_startup is True
    assert config.updates.max_concurrent_downloads == 4
    assert config.updates.prevent_save_move is False
    assert config.updates.remove_previous_version is False

    assert config.backups.max_count == 6
    assert config.backups.compression_level == 6
    assert config.backups.backup_on_launch is False
    assert config.backups.backup_on_end is False
    assert config.backups.backup_before_update is True
    assert config.backups.skip_backup_before_restore is False


def test_config_serialization_roundtrip():
    config = Config()
    config.game.directory = "C:\\Games\\CDDA"
    config.game.branch = "stable"
    config.launcher.theme = "Purple"

    loaded = Config.from_toml(config.to_toml())

    assert loaded.game.directory == "C:\\Games\\CDDA"
    assert loaded.game.branch == "stable"
    assert loaded.launcher.theme == "Purple"
    assert loaded == config


def test_config_partial_toml():
    toml_str = '\n[game]\ndirectory = "C:\\\\Test"\n'
    config = Config.from_toml(toml_str)

    assert config.game.directory == "C:\\Test"
    assert config.game.branch == "experimental"
    assert config.launcher.theme == "Amber"
    assert config.updates.max_concurrent_downloads == 4


def test_config_empty_toml():
    config = Config.from_toml("")

    assert config.game.directory is None
    assert config.game.branch == "experimental"
    assert config.launcher.theme == "Amber"


def test_default_toml_omits_unset_directory():
    data = tomllib.loads(Config().to_toml())
    assert "directory" not in data["game"]
    assert data["backups"]["compression_level"] == 6


def test_unknown_keys_are_ignored():
    config = Config.from_toml("[game]\nbranch = \"stable\"\nextra = 1\n[other]\nx = 2\n")
    assert config.game.branch == "stable"


def test_wrong_type_raises():
    with pytest.raises(ValueError, match="keep_open"):
        Config.from_toml("[launcher]\nkeep_open = \"yes\"\n")


def test_out_of_range_u8_raises():
    with pytest.raises(ValueError, match="compression_level"):
        Config.from_toml("[backups]\ncompression_level = 300\n")


def test_negative_integer_raises():
    with pytest.raises(ValueError, match="max_count"):
        Config.from_toml("[backups]\nmax_count = -1\n")


def test_section_must_be_table():
    with pytest.raises(ValueError, match="game"):
        Config.from_toml('game = "stable"\n')


def test_malformed_toml_raises():
    with pytest.raises(ValueError):
        Config.from_toml("[game\n")


def test_load_missing_file_gives_defaults(tmp_path):
    config = Config.load(tmp_path / "absent.toml")
    assert config == Config()


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "config.toml"
    config = Config()
    config.backups.max_count = 12
    config.updates.prevent_save_move = True
    config.game.command_params = "--world test"
    config.save(path)

    loaded = Config.load(path)
    assert loaded.backups.max_count == 12
    assert loaded.updates.prevent_save_move is True
    assert loaded.game.command_params == "--world test"
    assert loaded == config


def test_to_dict_sections_in_order():
    assert list(Config().to_dict()) == ["launcher", "game", "updates", "backups"]