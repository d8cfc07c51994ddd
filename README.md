# phoenix-launcher

A Python library for managing a Cataclysm: Dark Days Ahead installation. It
reads and writes the launcher's user settings, parses the launcher's
application data files, and creates, lists, restores and prunes ZIP backups of
the game's save directory.

## Installation

```
pip install phoenix-launcher
```

## User settings (`phoenix_launcher.config`)

`Config` holds four sections: `launcher` (`LauncherSettings`), `game`
(`GameSettings`), `updates` (`UpdateSettings`) and `backups`
(`BackupSettings`). Missing sections and keys take their defaults and unknown
keys are ignored, so a partial or empty TOML file is fine. Out-of-range or
wrongly typed values raise `ValueError`.

```python
from phoenix_launcher.config import Config

config = Config.load()              # the user config file, or defaults if absent
config.game.directory = "/path/to/cdda"
config.backups.max_count = 10
config.save()

text = config.to_toml()
same = Config.from_toml(text)
```

`Config.load(path)` and `Config.save(path)` accept an explicit path.
`config_path()`, `data_dir()` and `backups_dir()` return the platform's user
directories and create them if needed.

Defaults: theme `Amber`, branch `experimental`, up to 4 concurrent downloads,
6 automatic backups kept, compression level 6, and a backup before updates.

## Save backups (`phoenix_launcher.backup`)

Backups are `<name>.zip` archives of the game's `save` directory. Entries keep
their path relative to the game directory, so a restore extracts straight back
into it. Every function takes an optional `backup_path` (default: the
`backups` folder in the data directory) and optional `BackupRules`.

```python
from phoenix_launcher import backup

info = backup.create_backup("/path/to/cdda", "before_raid", compression_level=9)
print(info.compressed_size_display(), f"{info.compression_ratio():.1f}%")

for b in backup.list_backups():     # newest first
    print(b.name, b.worlds_count, b.characters_count, b.is_auto)

backup.restore_backup("/path/to/cdda", "before_raid")
backup.delete_backup("before_raid")
```

- Names may contain letters, numbers and the characters in
  `BackupRules.allowed_name_chars` (by default `_`, `-` and space), up to
  100 characters; otherwise `InvalidBackupNameError` is raised.
- `restore_backup` first archives the current saves as a
  `before_last_restore` backup unless `backup_current_first=False`, and
  refuses archives with paths that leave the game directory.
- `create_auto_backup` names the backup after `AutoBackupType.prefix()` and an
  optional version tag, then calls `enforce_retention`, which deletes the
  oldest backups whose names start with `auto_` beyond `max_count`
  (0 keeps all).
- A `progress` callable receives `BackupProgress` snapshots; `fraction()`
  gives 0.0 to 1.0 and `phase.description()` a readable phase.
- Errors derive from `BackupError`: `SaveDirNotFoundError`,
  `BackupNotFoundError`, `InvalidBackupNameError`, `BackupCreateError`,
  `NoSavesError`.

`BackupRules.from_configs(game_config, launcher_config)` builds the rules from
parsed application data.

## Application data (`phoenix_launcher.app_data`)

`parse_game_config`, `parse_migration_config`, `parse_launcher_config` and
`parse_stable_releases` parse TOML text into frozen dataclasses;
`parse_soundpacks` parses the soundpack repository JSON into `RepoSoundpack`
entries. Malformed text or missing required fields raise `AppDataError`.
`stable_versions(config)` maps executable SHA256 hashes to release tags.

## Command-line helpers (`phoenix_launcher.cli`)

`phoenix_launcher.cli.output` has `OutputFormat` (`TEXT`, `JSON`),
`print_formatted`, `print_success`, `print_error` and `should_show_progress`.

`phoenix_launcher.cli.config_cmd` provides `get_config_value(config, key)` and
`set_config_value(config, key, value)` for dotted keys such as
`game.directory` or `backups.max_count` (`launcher.theme` is read only), and
`register(subparsers)` / `run(args, fmt, quiet)` to add a `config` command
with `show`, `get`, `set` and `path` subcommands to an `argparse` parser:

```python
import argparse
from phoenix_launcher.cli import config_cmd
from phoenix_launcher.cli.output import OutputFormat

parser = argparse.ArgumentParser()
config_cmd.register(parser.add_subparsers(dest="command", required=True))
args = parser.parse_args(["config", "get", "game.branch"])
config_cmd.run(args, OutputFormat.TEXT, quiet=False)
```

## What this package does not do

- It installs no command-line program and has no interactive shell; the
  `config` command exists only as `argparse` pieces for you to mount.
- There are no command-line commands for backups; use the
  `phoenix_launcher.backup` functions directly.
- It does not detect or launch the game, download or install updates, or
  manage soundpacks, and it has no graphical interface.