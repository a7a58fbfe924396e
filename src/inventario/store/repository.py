"""The inventory repository: CRUD and maintenance over one SQLite table."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path, PureWindowsPath
from typing import Callable, List, Optional

from ..config import DB_FILE_NAME, DEFAULT_BUSY_TIMEOUT, IMAGES_DIR_NAME, TIMESTAMP_FORMAT
from ..errors import ItemNotFoundError, PersistenceError
from ..io.images import decode_image, remove_image, write_image
from ..models import InventoryItem, clean_name, clean_quantity
from .database import Database
from .migrations import SCHEMA_VERSION, TABLE_NAME, migrate

logger = logging.getLogger(__name__)

_SELECT = (
    "SELECT id, name, image_path, cantidad_necesaria, cantidad_disponible, created_at "
    f"FROM {TABLE_NAME}"
)


class InventoryRepository:
    """Own the inventory database and its image directory.

    Every public method holds the database session for its whole duration,
    image file I/O included, so concurrent callers are served one at a time.
    """

    def __init__(
        self,
        data_dir: Path,
        *,
        database: Optional[Database] = None,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._images_dir = self._data_dir / IMAGES_DIR_NAME
        self._now = now
        self._db = database or Database(self._data_dir / DB_FILE_NAME, timeout=busy_timeout)
        self._migrate()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def images_dir(self) -> Path:
        return self._images_dir

    @property
    def database(self) -> Database:
        return self._db

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_all(self) -> List[InventoryItem]:
        """Return every item, newest first."""

        with self._db.session() as conn:
            rows = conn.execute(f"{_SELECT} ORDER BY created_at DESC, id DESC").fetchall()
        return [InventoryItem.from_row(row) for row in rows]

    def get(self, item_id: int) -> InventoryItem:
        """Return the item stored under *item_id*."""

        with self._db.session() as conn:
            return self._fetch(conn, item_id)

    def get_storage_path(self) -> str:
        """Absolute path of the database file, for support diagnostics."""

        return str(self._db.path.resolve())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(
        self,
        name: str,
        image_data: Optional[str] = None,
        cantidad_necesaria: int = 0,
        cantidad_disponible: int = 0,
    ) -> InventoryItem:
        """Insert a new item, storing *image_data* (base64) when given."""

        name = clean_name(name)
        necesaria = clean_quantity(cantidad_necesaria, "cantidad_necesaria")
        disponible = clean_quantity(cantidad_disponible, "cantidad_disponible")
        # Decode up front: a bad payload must not leave a row or a file behind.
        image_bytes = decode_image(image_data) if image_data else None

        with self._db.session() as conn:
            image_path: Optional[str] = None
            if image_bytes is not None:
                image_path = str(write_image(image_bytes, self._images_dir))
            created_at = self._now().strftime(TIMESTAMP_FORMAT)
            try:
                cursor = conn.execute(
                    f"INSERT INTO {TABLE_NAME} "
                    "(name, image_path, cantidad_necesaria, cantidad_disponible, created_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    (name, image_path, necesaria, disponible, created_at),
                )
            except sqlite3.Error:
                remove_image(image_path)
                raise
            item = self._fetch(conn, cursor.lastrowid)
        logger.debug("Added inventory item %s (%s)", item.id, item.name)
        return item

    def update(
        self,
        item_id: int,
        name: str,
        image_data: Optional[str] = None,
        cantidad_necesaria: int = 0,
        cantidad_disponible: int = 0,
    ) -> InventoryItem:
        """Rewrite the mutable fields of *item_id*.

        Without *image_data* the stored image path is left untouched.  With it
        the previous image file is deleted (best effort) and replaced.
        """

        name = clean_name(name)
        necesaria = clean_quantity(cantidad_necesaria, "cantidad_necesaria")
        disponible = clean_quantity(cantidad_disponible, "cantidad_disponible")
        image_bytes = decode_image(image_data) if image_data else None

        with self._db.session() as conn:
            current = conn.execute(
                f"SELECT image_path FROM {TABLE_NAME} WHERE id = ?", (item_id,)
            ).fetchone()
            if current is None:
                raise ItemNotFoundError(item_id)

            if image_bytes is not None:
                # Write first: a failed write leaves the old picture in place.
                image_path = str(write_image(image_bytes, self._images_dir))
                remove_image(current["image_path"])
                conn.execute(
                    f"UPDATE {TABLE_NAME} SET name = ?, image_path = ?, "
                    "cantidad_necesaria = ?, cantidad_disponible = ? WHERE id = ?",
                    (name, image_path, necesaria, disponible, item_id),
                )
            else:
                conn.execute(
                    f"UPDATE {TABLE_NAME} SET name = ?, "
                    "cantidad_necesaria = ?, cantidad_disponible = ? WHERE id = ?",
                    (name, necesaria, disponible, item_id),
                )
            return self._fetch(conn, item_id)

    def delete(self, item_id: int) -> None:
        """Remove *item_id* and its image file. Unknown ids are ignored."""

        with self._db.session() as conn:
            row = conn.execute(
                f"SELECT image_path FROM {TABLE_NAME} WHERE id = ?", (item_id,)
            ).fetchone()
            if row is None:
                logger.debug("Delete of unknown inventory item %s ignored", item_id)
                return
            remove_image(row["image_path"])
            conn.execute(f"DELETE FROM {TABLE_NAME} WHERE id = ?", (item_id,))

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------
    def fix_image_paths(self) -> int:
        """Point stored image paths at the current image directory.

        A row is rewritten when a file with the same name as its stored image
        exists in :attr:`images_dir`.  Returns the number of rows rewritten.
        """

        fixed = 0
        with self._db.session() as conn:
            rows = conn.execute(
                f"SELECT id, image_path FROM {TABLE_NAME} WHERE image_path IS NOT NULL"
            ).fetchall()
            for row in rows:
                # Paths written on Windows use backslashes; PureWindowsPath splits both.
                filename = PureWindowsPath(row["image_path"]).name
                if not filename:
                    continue
                candidate = self._images_dir / filename
                if not candidate.is_file():
                    continue
                conn.execute(
                    f"UPDATE {TABLE_NAME} SET image_path = ? WHERE id = ?",
                    (str(candidate.resolve()), row["id"]),
                )
                fixed += 1
        logger.info("Image path fixup rewrote %d of %d rows", fixed, len(rows))
        return fixed

    def replace_database(self, source: Path) -> None:
        """Load the database file at *source* in place of the current one."""

        self._db.replace_with(source, max_user_version=SCHEMA_VERSION)
        self._migrate()

    def close(self) -> None:
        self._db.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _migrate(self) -> None:
        with self._db.session() as conn:
            migrate(conn)

    @staticmethod
    def _fetch(conn: sqlite3.Connection, item_id: Optional[int]) -> InventoryItem:
        if item_id is None:
            raise PersistenceError("Insert did not report a row id")
        row = conn.execute(f"{_SELECT} WHERE id = ?", (item_id,)).fetchone()
        if row is None:
            raise ItemNotFoundError(item_id)
        return InventoryItem.from_row(row)


__all__ = ["InventoryRepository"]
