"""Creating, listing, restoring and pruning ZIP backups of the save directory.

Backups live as ``<name>.zip`` files in a backup directory (by default the
launcher's data directory). Archive entries keep their path relative to the
game directory, e.g. ``save/WorldName/worldoptions.json``, so a backup is
restored by extracting it straight into the game directory.
"""

from __future__ import annotations

import logging
import os
import shutil
import threading
import time
import zipfile
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from .config import backups_dir

if TYPE_CHECKING:
    from .app_data import GameConfig, LauncherConfig

log = logging.getLogger(__name__)

ProgressCallback = Callable[["BackupProgress"], None]


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class BackupError(Exception):
    """Base class for backup failures."""


class SaveDirNotFoundError(BackupError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Save directory not found: {path}")
        self.path = path


class BackupNotFoundError(BackupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Backup not found: {name}")
        self.name = name


class InvalidBackupNameError(BackupError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid backup name: {reason}")
        self.reason = reason


class BackupCreateError(BackupError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to create backup: {reason}")
        self.reason = reason


class NoSavesError(BackupError):
    def __init__(self) -> None:
        super().__init__("No saves to backup")


# ---------------------------------------------------------------------------
# Rules and records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BackupRules:
    """The parts of the game and launcher data that govern backups."""

    save_dir: str = "save"
    marker_files: tuple[str, ...] = ("worldoptions.json", "worldoptions.txt", "master.gsav")
    save_extensions: tuple[str, ...] = (".sav", ".sav.zzip")
    max_name_length: int = 100
    allowed_name_chars: str = "_- "
    auto_backup_prefix: str = "auto_"
    old_backup_dir: str = "save_backups"

    @classmethod
    def from_configs(cls, game_config: GameConfig, launcher_config: LauncherConfig) -> BackupRules:
        """Take the backup rules out of the parsed game and launcher data."""
        return cls(
            save_dir=game_config.directories.save,
            marker_files=tuple(game_config.world.marker_files),
            save_extensions=tuple(game_config.world.save_extensions),
            max_name_length=launcher_config.backup.max_name_length,
            allowed_name_chars=launcher_config.backup.allowed_name_chars,
            auto_backup_prefix=launcher_config.backup.auto_backup_prefix,
            old_backup_dir=launcher_config.legacy.old_backup_dir,
        )


_DEFAULT_RULES = BackupRules()


def format_size(size: int) -> str:
    """Human-readable byte count, in binary units."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    for unit in ("KB", "MB", "GB", "TB"):
        value /= 1024
        if value < 1024 or unit == "TB":
            return f"{value:.1f} {unit}"
    raise AssertionError("unreachable")


@dataclass
class BackupInfo:
    """Metadata about one backup archive."""

    name: str
    path: Path
    compressed_size: int
    uncompressed_size: int
    worlds_count: int
    characters_count: int
    modified: datetime
    is_auto: bool

    def compression_ratio(self) -> float:
        """Space saved, as a percentage (0-100)."""
        if self.uncompressed_size == 0:
            return 0.0
        return (1.0 - self.compressed_size / self.uncompressed_size) * 100.0

    def compressed_size_display(self) -> str:
        return format_size(self.compressed_size)

    def uncompressed_size_display(self) -> str:
        return format_size(self.uncompressed_size)


class AutoBackupType(Enum):
    BEFORE_UPDATE = "before_update"

    def prefix(self) -> str:
        """Prefix of automatic backup names of this type."""
        return {AutoBackupType.BEFORE_UPDATE: "auto_before_update"}[self]


class BackupPhase(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    COMPRESSING = "compressing"
    EXTRACTING = "extracting"
    CLEANING = "cleaning"
    COMPLETE = "complete"
    FAILED = "failed"

    def description(self) -> str:
        return _PHASE_DESCRIPTIONS[self]


_PHASE_DESCRIPTIONS = {
    BackupPhase.IDLE: "Ready",
    BackupPhase.SCANNING: "Scanning files...",
    BackupPhase.COMPRESSING: "Compressing saves...",
    BackupPhase.EXTRACTING: "Extracting backup...",
    BackupPhase.CLEANING: "Cleaning up...",
    BackupPhase.COMPLETE: "Complete!",
    BackupPhase.FAILED: "Failed",
}


@dataclass(frozen=True)
class BackupProgress:
    """A snapshot of a running backup or restore."""

    phase: BackupPhase = BackupPhase.IDLE
    files_processed: int = 0
    total_files: int = 0
    current_file: str = ""

    def fraction(self) -> float:
        """Progress as a fraction between 0.0 and 1.0."""
        if self.phase in (BackupPhase.COMPRESSING, BackupPhase.EXTRACTING):
            return 0.0 if self.total_files == 0 else self.files_processed / self.total_files
        if self.phase is BackupPhase.COMPLETE:
            return 1.0
        return 0.0


def _emit(progress: ProgressCallback | None, **kwargs: object) -> None:
    if progress is not None:
        progress(BackupProgress(**kwargs))  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


def backup_dir() -> Path:
    """The default backup directory in the launcher's data directory."""
    return backups_dir()


def legacy_backup_dir(game_dir: Path | str, rules: BackupRules | None = None) -> Path:
    """The backup directory older launchers kept inside the game directory."""
    return Path(game_dir) / (rules or _DEFAULT_RULES).old_backup_dir


def _archive_path(backup_path: Path, name: str) -> Path:
    return backup_path / f"{name}.zip"


def _is_empty_dir(path: Path) -> bool:
    with os.scandir(path) as entries:
        return next(entries, None) is None


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def read_backup_info(path: Path | str, rules: BackupRules | None = None) -> BackupInfo | None:
    """Read metadata of a backup archive, or None if it cannot be read."""
    rules = rules or _DEFAULT_RULES
    path = Path(path)
    try:
        stat = path.stat()
        with zipfile.ZipFile(path) as archive:
            entries = archive.infolist()
    except (OSError, zipfile.BadZipFile):
        return None

    uncompressed_size = 0
    worlds: set[str] = set()
    characters_count = 0
    for entry in entries:
        uncompressed_size += entry.file_size
        parts = entry.filename.split("/")
        if len(parts) != 3:
            continue
        filename = parts[2]
        if filename in rules.marker_files:
            worlds.add(parts[1])
        if any(filename.endswith(ext) for ext in rules.save_extensions):
            characters_count += 1

    name = path.stem or "unknown"
    return BackupInfo(
        name=name,
        path=path,
        compressed_size=stat.st_size,
        uncompressed_size=uncompressed_size,
        worlds_count=len(worlds),
        characters_count=characters_count,
        modified=datetime.fromtimestamp(stat.st_mtime),
        is_auto=name.startswith(rules.auto_backup_prefix),
    )


def list_backups(
    backup_path: Path | str | None = None, rules: BackupRules | None = None
) -> list[BackupInfo]:
    """All readable backups in the backup directory, newest first."""
    directory = Path(backup_path) if backup_path is not None else backup_dir()
    if not directory.exists():
        return []
    backups = [
        info
        for entry in directory.iterdir()
        if entry.suffix == ".zip" and (info := read_backup_info(entry, rules)) is not None
    ]
    backups.sort(key=lambda b: b.modified, reverse=True)
    return backups


def validate_backup_name(name: str, rules: BackupRules | None = None) -> None:
    """Raise InvalidBackupNameError unless ``name`` is a usable backup name."""
    rules = rules or _DEFAULT_RULES
    if not name:
        raise InvalidBackupNameError("Name cannot be empty")
    if len(name.encode("utf-8")) > rules.max_name_length:
        raise InvalidBackupNameError(f"Name too long (max {rules.max_name_length} chars)")
    allowed = rules.allowed_name_chars
    for ch in name:
        if not ch.isalnum() and ch not in allowed:
            raise InvalidBackupNameError(
                f"Invalid character '{ch}'. Only letters, numbers, and '{allowed}' allowed."
            )


# ---------------------------------------------------------------------------
# Creating
# ---------------------------------------------------------------------------


def _collect_files(root: Path, relative_to: Path) -> list[tuple[Path, str]]:
    files: list[tuple[Path, str]] = []
    for current, dirs, names in os.walk(root):
        dirs.sort()
        for filename in sorted(names):
            path = Path(current) / filename
            if path.is_file():
                relative = path.relative_to(relative_to).as_posix()
                files.append((path, relative))
    return files


def create_backup(
    game_dir: Path | str,
    name: str,
    compression_level: int = 6,
    progress: ProgressCallback | None = None,
    backup_path: Path | str | None = None,
    rules: BackupRules | None = None,
) -> BackupInfo:
    """Archive the save directory of ``game_dir`` as backup ``name``."""
    rules = rules or _DEFAULT_RULES
    game_dir = Path(game_dir)
    validate_backup_name(name, rules)

    save_dir = game_dir / rules.save_dir
    if not save_dir.exists():
        raise SaveDirNotFoundError(save_dir)
    if _is_empty_dir(save_dir):
        raise NoSavesError()

    directory = Path(backup_path) if backup_path is not None else backup_dir()
    directory.mkdir(parents=True, exist_ok=True)
    backup_file = _archive_path(directory, name)
    if backup_file.exists():
        raise InvalidBackupNameError(f"Backup '{name}' already exists")

    _emit(progress, phase=BackupPhase.SCANNING)
    files = _collect_files(save_dir, game_dir)
    total_files = len(files)
    if total_files == 0:
        raise NoSavesError()

    _emit(progress, phase=BackupPhase.COMPRESSING, total_files=total_files)
    method = zipfile.ZIP_STORED if compression_level == 0 else zipfile.ZIP_DEFLATED
    level = None if compression_level == 0 else min(compression_level, 9)
    with zipfile.ZipFile(backup_file, "w", compression=method, compresslevel=level) as archive:
        for index, (path, relative) in enumerate(files):
            _emit(
                progress,
                phase=BackupPhase.COMPRESSING,
                files_processed=index,
                total_files=total_files,
                current_file=relative,
            )
            archive.writestr(relative, path.read_bytes())

    _emit(
        progress,
        phase=BackupPhase.COMPLETE,
        files_processed=total_files,
        total_files=total_files,
    )

    info = read_backup_info(backup_file, rules)
    if info is None:
        raise BackupCreateError("Failed to read created backup info")
    return info


def delete_backup(backup_name: str, backup_path: Path | str | None = None) -> None:
    """Delete backup ``backup_name``."""
    directory = Path(backup_path) if backup_path is not None else backup_dir()
    backup_file = _archive_path(directory, backup_name)
    if not backup_file.exists():
        raise BackupNotFoundError(backup_name)
    backup_file.unlink()
    log.info("Deleted backup: %s", backup_name)


# ---------------------------------------------------------------------------
# Restoring
# ---------------------------------------------------------------------------


def _remove_in_background(path: Path) -> None:
    def remove() -> None:
        try:
            shutil.rmtree(path)
        except OSError as exc:
            log.warning("Failed to clean up old saves: %s", exc)

    threading.Thread(target=remove, name="backup-cleanup").start()


def _restore_archive(game_dir: Path, backup_file: Path, save_dir: Path,
                     progress: ProgressCallback | None) -> None:
    with zipfile.ZipFile(backup_file) as archive:
        entries = archive.infolist()
        root = game_dir.resolve()
        for entry in entries:
            target = (game_dir / entry.filename).resolve()
            if target != root and not target.is_relative_to(root):
                raise BackupError(f"Unsafe path in backup: {entry.filename}")

        _emit(progress, phase=BackupPhase.CLEANING)
        temp_save = game_dir / f"save-{time.time_ns():x}"
        if save_dir.exists():
            save_dir.rename(temp_save)

        total_files = len(entries)
        _emit(progress, phase=BackupPhase.EXTRACTING, total_files=total_files)
        for index, entry in enumerate(entries):
            _emit(
                progress,
                phase=BackupPhase.EXTRACTING,
                files_processed=index,
                total_files=total_files,
                current_file=entry.filename,
            )
            out_path = game_dir / entry.filename
            if entry.is_dir():
                out_path.mkdir(parents=True, exist_ok=True)
                continue
            out_path.parent.mkdir(parents=True, exist_ok=True)
            with archive.open(entry) as src, open(out_path, "wb") as dst:
                shutil.copyfileobj(src, dst)

    _emit(
        progress,
        phase=BackupPhase.CLEANING,
        files_processed=total_files,
        total_files=total_files,
    )
    if temp_save.exists():
        _remove_in_background(temp_save)
    _emit(
        progress,
        phase=BackupPhase.COMPLETE,
        files_processed=total_files,
        total_files=total_files,
    )
    log.info("Restored backup: %s", backup_file)


def restore_backup(
    game_dir: Path | str,
    backup_name: str,
    backup_current_first: bool = True,
    compression_level: int = 6,
    progress: ProgressCallback | None = None,
    backup_path: Path | str | None = None,
    rules: BackupRules | None = None,
) -> None:
    """Replace the save directory with the contents of backup ``backup_name``.

    With ``backup_current_first`` the current saves are first archived under a
    name starting with ``before_last_restore``.
    """
    rules = rules or _DEFAULT_RULES
    game_dir = Path(game_dir)
    directory = Path(backup_path) if backup_path is not None else backup_dir()
    backup_file = _archive_path(directory, backup_name)
    if not backup_file.exists():
        raise BackupNotFoundError(backup_name)

    save_dir = game_dir / rules.save_dir
    if backup_current_first and save_dir.exists() and not _is_empty_dir(save_dir):
        pre_restore_name = generate_unique_name(directory, "before_last_restore")
        log.info("Backing up current saves as: %s", pre_restore_name)
        create_backup(game_dir, pre_restore_name, compression_level, progress, directory, rules)

    _restore_archive(game_dir, backup_file, save_dir, progress)


# ---------------------------------------------------------------------------
# Automatic backups and retention
# ---------------------------------------------------------------------------


def generate_unique_name(backup_path: Path | str, base_name: str) -> str:
    """``base_name``, or ``base_name`` followed by 2, 3, ... if already taken."""
    directory = Path(backup_path)
    name = base_name
    counter = 2
    while _archive_path(directory, name).exists():
        name = f"{base_name}{counter}"
        counter += 1
    return name


def create_auto_backup(
    game_dir: Path | str,
    backup_type: AutoBackupType,
    version_tag: str | None = None,
    compression_level: int = 6,
    max_count: int = 6,
    progress: ProgressCallback | None = None,
    backup_path: Path | str | None = None,
    rules: BackupRules | None = None,
) -> BackupInfo | None:
    """Create an automatic backup, then prune old ones; None if there are no saves."""
    rules = rules or _DEFAULT_RULES
    game_dir = Path(game_dir)
    save_dir = game_dir / rules.save_dir
    if not save_dir.exists():
        log.info("No save directory, skipping auto-backup")
        return None
    if _is_empty_dir(save_dir):
        log.info("Save directory empty, skipping auto-backup")
        return None

    directory = Path(backup_path) if backup_path is not None else backup_dir()
    directory.mkdir(parents=True, exist_ok=True)

    if version_tag is not None:
        safe_tag = version_tag.translate(str.maketrans({"/": "_", "\\": "_", ":": "_"}))
        base_name = f"{backup_type.prefix()}_{safe_tag}"
    else:
        base_name = backup_type.prefix()
    name = generate_unique_name(directory, base_name)

    log.info("Creating auto-backup: %s", name)
    info = create_backup(game_dir, name, compression_level, progress, directory, rules)
    enforce_retention(max_count, directory, rules)
    return info


def enforce_retention(
    max_count: int, backup_path: Path | str | None = None, rules: BackupRules | None = None
) -> int:
    """Delete the oldest automatic backups beyond ``max_count``; returns how many went.

    A ``max_count`` of 0 keeps everything.
    """
    if max_count == 0:
        return 0
    auto = [b for b in list_backups(backup_path, rules) if b.is_auto]
    if len(auto) <= max_count:
        return 0
    auto.sort(key=lambda b: b.modified)
    deleted = 0
    for backup in auto[: len(auto) - max_count]:
        try:
            backup.path.unlink()
        except OSError as exc:
            log.warning("Failed to delete old backup %s: %s", backup.name, exc)
        else:
            log.info("Deleted old auto-backup: %s", backup.name)
            deleted += 1
    return deleted