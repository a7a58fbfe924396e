"""Backend facade used by the desktop shell."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from .commands import InventoryCommands
from .config import load_config
from .store.repository import InventoryRepository
from .utils.logging import get_logger, set_level

logger = get_logger()

_GLOBAL_REPOSITORY: Optional[InventoryRepository] = None
_GLOBAL_LOCK = threading.Lock()


def open_repository(data_dir: Optional[Path | str] = None) -> InventoryRepository:
    """Load configuration for *data_dir* and open a repository on it."""

    config = load_config(data_dir)
    set_level(config.log_level)
    repository = InventoryRepository(config.data_dir, busy_timeout=config.busy_timeout)
    logger.info("Inventory database at %s", repository.get_storage_path())
    return repository


def get_global_repository(data_dir: Optional[Path | str] = None) -> InventoryRepository:
    """Return the process-wide repository, opening it on first use.

    *data_dir* only matters for the call that creates the instance.
    """

    global _GLOBAL_REPOSITORY
    with _GLOBAL_LOCK:
        if _GLOBAL_REPOSITORY is None:
            _GLOBAL_REPOSITORY = open_repository(data_dir)
        return _GLOBAL_REPOSITORY


def reset_global_repository() -> None:
    """Close and forget the process-wide repository."""

    global _GLOBAL_REPOSITORY
    with _GLOBAL_LOCK:
        if _GLOBAL_REPOSITORY is not None:
            _GLOBAL_REPOSITORY.close()
            _GLOBAL_REPOSITORY = None


def create_commands(data_dir: Optional[Path | str] = None) -> InventoryCommands:
    return InventoryCommands(get_global_repository(data_dir))


__all__ = ["create_commands", "get_global_repository", "open_repository", "reset_global_repository"]
