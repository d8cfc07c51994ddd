"""Application data: fixed descriptions of game files, migration rules,
launcher settings, known stable releases and the soundpack repository.

These are not user preferences (see ``config``); they describe how the
launcher works. Each ``parse_*`` function turns the text of one data file
into typed, immutable records and raises ``AppDataError`` when the text is
malformed or a required field is missing.
"""

import json
import tomllib
import types
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import Any, Union, get_args, get_origin


class AppDataError(ValueError):
    """Raised when an application data file cannot be parsed."""


# ---------------------------------------------------------------------------
# Game configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExecutablesConfig:
    names: list[str]


@dataclass(frozen=True)
class DirectoriesConfig:
    save: str
    data: str
    sound: str


@dataclass(frozen=True)
class VersionConfig:
    filename: str
    commit_sha_prefix: str
    commit_date_prefix: str
    build_number_prefix: str
    sha_display_length: int
    min_build_number_length: int
    date_dash_positions: list[int]


@dataclass(frozen=True)
class WorldConfig:
    marker_files: list[str]
    save_extensions: list[str]


@dataclass(frozen=True)
class MetadataConfig:
    mod_info: str
    mod_info_disabled: str
    tileset_info: str
    soundpack_info: str
    soundpack_info_disabled: str
    name_field: str


@dataclass(frozen=True)
class GameConfig:
    """Game executables, directories and version-file layout."""

    executables: ExecutablesConfig
    directories: DirectoriesConfig
    version: VersionConfig
    world: WorldConfig
    metadata: MetadataConfig


# ---------------------------------------------------------------------------
# Migration configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RestoreConfig:
    simple_dirs: list[str]
    skip_files: list[str]


@dataclass(frozen=True)
class ArchiveConfig:
    directory: str
    directory_old: str


@dataclass(frozen=True)
class SoundpackMigrationConfig:
    content_extensions: list[str]
    min_search_depth: int
    max_search_depth: int


@dataclass(frozen=True)
class DownloadConfig:
    temp_extension: str
    progress_interval_ms: int
    extraction_batch_size: int
    soundpack_extraction_batch: int


@dataclass(frozen=True)
class ExportConfig:
    directories: list[str]


@dataclass(frozen=True)
class MigrationConfig:
    """Update and migration behaviour."""

    restore: RestoreConfig
    archive: ArchiveConfig
    soundpack: SoundpackMigrationConfig
    download: DownloadConfig
    export: ExportConfig


# ---------------------------------------------------------------------------
# Launcher configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WindowConfig:
    initial_size: tuple[float, float]
    min_size: tuple[float, float]
    title: str


@dataclass(frozen=True)
class GithubConfig:
    api_base: str
    repository: str
    releases_per_page: int
    rate_limit_warning_threshold: int


@dataclass(frozen=True)
class BackupConfig:
    max_name_length: int
    allowed_name_chars: str
    auto_backup_prefix: str


@dataclass(frozen=True)
class UrlsConfig:
    project_repository: str
    cdda_website: str


@dataclass(frozen=True)
class LegacyConfig:
    old_backup_dir: str
    old_archive_dir: str


@dataclass(frozen=True)
class LauncherConfig:
    """Launcher window, API, backup and URL settings."""

    window: WindowConfig
    github: GithubConfig
    backup: BackupConfig
    urls: UrlsConfig
    legacy: LegacyConfig


# ---------------------------------------------------------------------------
# Stable releases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EmbeddedRelease:
    """A known stable release."""

    tag: str
    name: str
    published: str
    asset_name: str | None = None
    asset_url: str | None = None
    asset_size: int | None = None
    hashes: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StableReleasesConfig:
    """Known stable releases and future release letters to look for."""

    check_letters: list[str]
    releases: list[EmbeddedRelease]


# ---------------------------------------------------------------------------
# Soundpack repository
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RepoSoundpack:
    """A soundpack entry of the repository list."""

    download_type: str = field(metadata={"key": "type"})
    viewname: str
    name: str
    url: str
    homepage: str
    size: int | None = None


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _optional_inner(tp: Any) -> Any | None:
    """Return X for ``X | None``, otherwise None."""
    if get_origin(tp) in (Union, types.UnionType):
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1 and len(get_args(tp)) == 2:
            return args[0]
    return None


def _convert(tp: Any, value: Any, where: str) -> Any:
    inner = _optional_inner(tp)
    if inner is not None:
        return None if value is None else _convert(inner, value, where)

    if is_dataclass(tp):
        if not isinstance(value, dict):
            raise AppDataError(f"{where}: expected a table")
        return _from_mapping(tp, value, where)

    origin = get_origin(tp)
    if origin is list:
        if not isinstance(value, list):
            raise AppDataError(f"{where}: expected an array")
        (item_tp,) = get_args(tp)
        return [_convert(item_tp, item, f"{where}[{i}]") for i, item in enumerate(value)]
    if origin is tuple:
        item_types = get_args(tp)
        if not isinstance(value, list) or len(value) != len(item_types):
            raise AppDataError(f"{where}: expected an array of {len(item_types)} items")
        return tuple(
            _convert(t, v, f"{where}[{i}]") for i, (t, v) in enumerate(zip(item_types, value))
        )

    if tp is bool:
        if not isinstance(value, bool):
            raise AppDataError(f"{where}: expected a boolean")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise AppDataError(f"{where}: expected an integer")
        if value < 0:
            raise AppDataError(f"{where}: expected a non-negative integer")
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise AppDataError(f"{where}: expected a number")
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise AppDataError(f"{where}: expected a string")
        return value
    raise AppDataError(f"{where}: unsupported field type {tp!r}")


def _from_mapping(cls: type, data: dict[str, Any], where: str) -> Any:
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        key = f.metadata.get("key", f.name)
        path = f"{where}.{key}" if where else key
        if key in data:
            kwargs[f.name] = _convert(f.type, data[key], path)
        elif f.default is not MISSING or f.default_factory is not MISSING:
            continue
        elif _optional_inner(f.type) is not None:
            kwargs[f.name] = None
        else:
            raise AppDataError(f"missing field '{path}'")
    return cls(**kwargs)


def _load_toml(text: str, source: str) -> dict[str, Any]:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise AppDataError(f"Failed to parse {source}: {exc}") from exc


def _parse_toml(cls: type, text: str, source: str) -> Any:
    data = _load_toml(text, source)
    try:
        return _from_mapping(cls, data, "")
    except AppDataError as exc:
        raise AppDataError(f"Failed to parse {source}: {exc}") from exc


def parse_game_config(text: str) -> GameConfig:
    """Parse the game configuration TOML."""
    return _parse_toml(GameConfig, text, "game_config.toml")


def parse_migration_config(text: str) -> MigrationConfig:
    """Parse the migration configuration TOML."""
    return _parse_toml(MigrationConfig, text, "migration_config.toml")


def parse_launcher_config(text: str) -> LauncherConfig:
    """Parse the launcher configuration TOML."""
    return _parse_toml(LauncherConfig, text, "launcher_config.toml")


def parse_stable_releases(text: str) -> StableReleasesConfig:
    """Parse the stable releases TOML."""
    return _parse_toml(StableReleasesConfig, text, "stable_releases.toml")


def stable_versions(config: StableReleasesConfig) -> dict[str, str]:
    """Map executable SHA256 hashes to the tag of the release they belong to."""
    return {digest: release.tag for release in config.releases for digest in release.hashes}


def parse_soundpacks(text: str) -> list[RepoSoundpack]:
    """Parse the soundpack repository JSON (an array of entries)."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise AppDataError(f"Failed to parse soundpacks.json: {exc}") from exc
    try:
        return _convert(list[RepoSoundpack], data, "soundpacks")
    except AppDataError as exc:
        raise AppDataError(f"Failed to parse soundpacks.json: {exc}") from exc