"""Export and import of the inventory database together with its images.

An export writes the database to a user-chosen ``.db`` file and copies the
referenced images into an ``imagenes_inventario`` folder beside it.  Importing
reverses the process: the database is replaced, images from the sibling
folder are copied into the image directory, and stored paths are repointed
with :meth:`InventoryRepository.fix_image_paths`.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath
from typing import Optional

from .config import EXPORT_IMAGES_DIR_NAME
from .errors import BackupError, PersistenceError
from .store.repository import InventoryRepository

LOGGER = logging.getLogger(__name__)

_SQLITE_HEADER = b"SQLite format 3\x00"


@dataclass(frozen=True)
class ExportResult:
    db_path: Path
    images_path: Optional[Path]
    images_copied: int

    def to_dict(self) -> dict:
        return {
            "db_path": str(self.db_path),
            "images_path": str(self.images_path) if self.images_path else None,
            "images_copied": self.images_copied,
        }


@dataclass(frozen=True)
class ImportResult:
    images_imported: int
    paths_fixed: int

    @property
    def message(self) -> str:
        if self.images_imported > 0:
            return (
                f"Base de datos importada con {self.images_imported} imagen(es). "
                f"{self.paths_fixed} rutas actualizadas."
            )
        return "Base de datos importada sin imágenes"

    def to_dict(self) -> dict:
        return {
            "images_imported": self.images_imported,
            "paths_fixed": self.paths_fixed,
            "message": self.message,
        }


def _is_same_file(left: Path, right: Path) -> bool:
    try:
        return left.resolve() == right.resolve()
    except OSError:
        return False


def export_database(repository: InventoryRepository, destination: Path | str) -> ExportResult:
    """Copy the live database to *destination* and its images beside it."""

    target = Path(destination).expanduser()
    if _is_same_file(target, Path(repository.get_storage_path())):
        raise BackupError("Cannot export the database onto itself")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BackupError(f"Cannot create export folder {target.parent}: {exc}") from exc

    try:
        repository.database.backup_to(target)
    except PersistenceError as exc:
        raise BackupError(str(exc)) from exc

    with_images = [item for item in repository.list_all() if item.image_path]
    if not with_images:
        LOGGER.info("Exported %s without images", target)
        return ExportResult(db_path=target.resolve(), images_path=None, images_copied=0)

    images_folder = target.parent / EXPORT_IMAGES_DIR_NAME
    try:
        images_folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BackupError(f"Cannot create images folder {images_folder}: {exc}") from exc

    copied = 0
    for item in with_images:
        source = Path(item.image_path)  # type: ignore[arg-type]
        name = PureWindowsPath(item.image_path).name  # type: ignore[arg-type]
        try:
            shutil.copy2(source, images_folder / name)
        except OSError as exc:
            LOGGER.warning("Could not copy image %s: %s", source, exc)
            continue
        copied += 1

    LOGGER.info("Exported %s with %d image(s) into %s", target, copied, images_folder)
    return ExportResult(db_path=target.resolve(), images_path=images_folder.resolve(), images_copied=copied)


def _check_sqlite_file(source: Path) -> None:
    if not source.is_file():
        raise BackupError(f"Backup file not found: {source}")
    try:
        with source.open("rb") as handle:
            header = handle.read(len(_SQLITE_HEADER))
    except OSError as exc:
        raise BackupError(f"Cannot read backup file {source}: {exc}") from exc
    if header != _SQLITE_HEADER:
        raise BackupError(f"{source} is not a SQLite database")


def import_database(repository: InventoryRepository, source: Path | str) -> ImportResult:
    """Replace the live database with *source* and bring its images along."""

    origin = Path(source).expanduser()
    _check_sqlite_file(origin)
    if _is_same_file(origin, Path(repository.get_storage_path())):
        raise BackupError("Cannot import the live database onto itself")

    try:
        repository.replace_database(origin)
    except PersistenceError as exc:
        raise BackupError(str(exc)) from exc

    imported = 0
    images_folder = origin.parent / EXPORT_IMAGES_DIR_NAME
    if images_folder.is_dir():
        target_dir = repository.images_dir
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BackupError(f"Cannot create image directory {target_dir}: {exc}") from exc
        for entry in sorted(images_folder.iterdir()):
            if not entry.is_file():
                continue
            try:
                shutil.copy2(entry, target_dir / entry.name)
            except OSError as exc:
                LOGGER.warning("Could not import image %s: %s", entry, exc)
                continue
            imported += 1

    fixed = repository.fix_image_paths()
    LOGGER.info("Imported %s: %d image(s), %d path(s) fixed", origin, imported, fixed)
    return ImportResult(images_imported=imported, paths_fixed=fixed)


__all__ = ["ExportResult", "ImportResult", "export_database", "import_database"]
