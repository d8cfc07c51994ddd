"""User configuration stored as a TOML file.

Sections:

- ``launcher``: theme and window behaviour
- ``game``: game directory, branch, command-line parameters
- ``updates``: start-up check, save handling, archive cleanup
- ``backups``: compression level, retention, automatic backup triggers

Missing sections and keys take their defaults; unknown keys are ignored.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import tomli_w
from platformdirs import PlatformDirs

log = logging.getLogger(__name__)

_U8 = {"max": 0xFF}
_U32 = {"max": 0xFFFF_FFFF}


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname="Phoenix", appauthor="phoenix", roaming=True)


def config_path() -> Path:
    """Path of the configuration file; its directory is created if needed."""
    directory = Path(_dirs().user_config_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory / "config.toml"


def data_dir() -> Path:
    """Launcher data directory (database and the like), created if needed."""
    directory = Path(_dirs().user_data_dir)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def backups_dir() -> Path:
    """Directory holding save backups, created if needed."""
    directory = data_dir() / "backups"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


@dataclass
class LauncherSettings:
    """Launcher appearance and behaviour."""

    theme: str = "Amber"
    keep_open: bool = False


@dataclass
class GameSettings:
    """Game installation settings."""

    directory: str | None = None
    branch: str = "experimental"
    command_params: str = ""


@dataclass
class UpdateSettings:
    """Update behaviour."""

    check_on_startup: bool = True
    max_concurrent_downloads: int = field(default=4, metadata=_U8)
    prevent_save_move: bool = False
    remove_previous_version: bool = False


@dataclass
class BackupSettings:
    """Backup behaviour."""

    max_count: int = field(default=6, metadata=_U32)
    compression_level: int = field(default=6, metadata=_U8)
    backup_on_launch: bool = False
    backup_on_end: bool = False
    backup_before_update: bool = True
    skip_backup_before_restore: bool = False


def _coerce(f: Any, value: Any, where: str) -> Any:
    kind = f.type
    if kind in (str | None, "str | None"):
        if not isinstance(value, str):
            raise ValueError(f"{where}: expected a string")
        return value
    if kind in (bool, "bool"):
        if not isinstance(value, bool):
            raise ValueError(f"{where}: expected a boolean")
        return value
    if kind in (int, "int"):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{where}: expected an integer")
        if not 0 <= value <= f.metadata["max"]:
            raise ValueError(f"{where}: {value} is out of range 0..{f.metadata['max']}")
        return value
    if not isinstance(value, str):
        raise ValueError(f"{where}: expected a string")
    return value


def _section(cls: type, data: dict[str, Any], name: str) -> Any:
    raw = data.get(name, {})
    if not isinstance(raw, dict):
        raise ValueError(f"{name}: expected a table")
    kwargs = {
        f.name: _coerce(f, raw[f.name], f"{name}.{f.name}") for f in fields(cls) if f.name in raw
    }
    return cls(**kwargs)


@dataclass
class Config:
    """All user settings."""

    launcher: LauncherSettings = field(default_factory=LauncherSettings)
    game: GameSettings = field(default_factory=GameSettings)
    updates: UpdateSettings = field(default_factory=UpdateSettings)
    backups: BackupSettings = field(default_factory=BackupSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a configuration from parsed TOML data; raises ValueError on bad values."""
        return cls(
            launcher=_section(LauncherSettings, data, "launcher"),
            game=_section(GameSettings, data, "game"),
            updates=_section(UpdateSettings, data, "updates"),
            backups=_section(BackupSettings, data, "backups"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Nested dictionary of the settings, leaving out unset optional values."""
        return {
            name: {k: v for k, v in asdict(getattr(self, name)).items() if v is not None}
            for name in ("launcher", "game", "updates", "backups")
        }

    @classmethod
    def from_toml(cls, text: str) -> Config:
        """Parse TOML text; raises ValueError on malformed text or bad values."""
        return cls.from_dict(tomllib.loads(text))

    def to_toml(self) -> str:
        """Serialise to TOML text."""
        return tomli_w.dumps(self.to_dict())

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load from ``path`` (default: the user config file), or defaults if it is absent."""
        target = Path(path) if path is not None else config_path()
        if not target.exists():
            log.info("No configuration file found, using defaults")
            return cls()
        config = cls.from_toml(target.read_text(encoding="utf-8"))
        log.info("Loaded configuration from %s", target)
        return config

    def save(self, path: Path | str | None = None) -> None:
        """Write to ``path`` (default: the user config file)."""
        target = Path(path) if path is not None else config_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_toml(), encoding="utf-8")
        log.info("Saved configuration to %s", target)