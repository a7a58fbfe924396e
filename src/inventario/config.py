"""Application constants and runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QStandardPaths

from .errors import SettingsInvalidError
from .utils.jsonio import read_json

APP_NAME = "Inventario"
APP_IDENTIFIER = "com.inventario.app"

DB_FILE_NAME = "inventario.db"
IMAGES_DIR_NAME = "inventory_images"
EXPORT_IMAGES_DIR_NAME = "imagenes_inventario"
SETTINGS_FILE_NAME = "settings.json"

# Local time, second resolution; lexical order matches chronological order.
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DATA_DIR_ENV = "INVENTARIO_DATA_DIR"
LOG_LEVEL_ENV = "INVENTARIO_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_BUSY_TIMEOUT = 10.0


@dataclass(frozen=True)
class AppConfig:
    """Resolved runtime settings for one data directory."""

    data_dir: Path
    log_level: str = DEFAULT_LOG_LEVEL
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT

    @property
    def db_path(self) -> Path:
        return self.data_dir / DB_FILE_NAME

    @property
    def images_dir(self) -> Path:
        return self.data_dir / IMAGES_DIR_NAME


def _platform_data_dir() -> Path:
    base = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.GenericDataLocation)
    if not base:
        base = str(Path.home() / ".local" / "share")
    return Path(base) / APP_IDENTIFIER


def resolve_data_dir(override: Optional[Path | str] = None) -> Path:
    """Return the application data directory, creating it when missing.

    Precedence: *override*, then ``INVENTARIO_DATA_DIR``, then the platform's
    generic data location reported by Qt.
    """

    if override is not None:
        path = Path(override)
    elif os.environ.get(DATA_DIR_ENV):
        path = Path(os.environ[DATA_DIR_ENV])
    else:
        path = _platform_data_dir()
    path = path.expanduser().resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_config(data_dir: Optional[Path | str] = None) -> AppConfig:
    """Build an :class:`AppConfig` from the data directory and environment."""

    root = resolve_data_dir(data_dir)
    log_level = DEFAULT_LOG_LEVEL
    busy_timeout = DEFAULT_BUSY_TIMEOUT

    settings_path = root / SETTINGS_FILE_NAME
    if settings_path.exists():
        settings = read_json(settings_path)
        log_level = str(settings.get("log_level", log_level))
        raw_timeout = settings.get("busy_timeout", busy_timeout)
        try:
            busy_timeout = float(raw_timeout)
        except (TypeError, ValueError) as exc:
            raise SettingsInvalidError(
                f"busy_timeout must be a number in {settings_path}, got {raw_timeout!r}"
            ) from exc
        if busy_timeout <= 0:
            raise SettingsInvalidError(f"busy_timeout must be positive in {settings_path}")

    env_level = os.environ.get(LOG_LEVEL_ENV)
    if env_level:
        log_level = env_level

    return AppConfig(data_dir=root, log_level=log_level.upper(), busy_timeout=busy_timeout)


__all__ = [
    "APP_IDENTIFIER",
    "APP_NAME",
    "AppConfig",
    "DB_FILE_NAME",
    "EXPORT_IMAGES_DIR_NAME",
    "IMAGES_DIR_NAME",
    "SETTINGS_FILE_NAME",
    "TIMESTAMP_FORMAT",
    "load_config",
    "resolve_data_dir",
]
