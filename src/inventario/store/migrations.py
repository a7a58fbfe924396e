"""Schema creation and upgrades for the inventory table.

The applied version is tracked in ``PRAGMA user_version``.  Databases written
by the first releases carry version 0 whether or not the table exists, so
every step is written to be safe against a table that is already present.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Callable, List, Tuple

from ..errors import SchemaVersionError

logger = logging.getLogger(__name__)

TABLE_NAME = "inventory"

QUANTITY_COLUMNS = ("cantidad_necesaria", "cantidad_disponible")


def _create_table(conn: sqlite3.Connection) -> None:
    conn.execute(
        f"""
        CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            image_path TEXT,
            cantidad_necesaria INTEGER NOT NULL DEFAULT 0,
            cantidad_disponible INTEGER NOT NULL DEFAULT 0,
            created_at DATETIME DEFAULT (datetime('now', 'localtime'))
        )
        """
    )


def table_columns(conn: sqlite3.Connection) -> List[str]:
    return [row[1] for row in conn.execute(f"PRAGMA table_info({TABLE_NAME})")]


def _add_quantity_columns(conn: sqlite3.Connection) -> None:
    existing = set(table_columns(conn))
    for column in QUANTITY_COLUMNS:
        if column in existing:
            continue
        conn.execute(f"ALTER TABLE {TABLE_NAME} ADD COLUMN {column} INTEGER NOT NULL DEFAULT 0")
        logger.info("Added missing column %s to %s", column, TABLE_NAME)


MIGRATIONS: Tuple[Tuple[int, Callable[[sqlite3.Connection], None]], ...] = (
    (1, _create_table),
    (2, _add_quantity_columns),
)

SCHEMA_VERSION = MIGRATIONS[-1][0]


def current_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def migrate(conn: sqlite3.Connection) -> int:
    """Apply every pending migration and return the resulting version."""

    version = current_version(conn)
    if version > SCHEMA_VERSION:
        raise SchemaVersionError(
            f"Database schema version {version} is newer than supported version {SCHEMA_VERSION}"
        )
    for target, step in MIGRATIONS:
        if target <= version:
            continue
        step(conn)
        # PRAGMA does not accept bound parameters.
        conn.execute(f"PRAGMA user_version = {int(target)}")
        logger.info("Migrated inventory schema to version %d", target)
        version = target
    return version


__all__ = ["MIGRATIONS", "SCHEMA_VERSION", "TABLE_NAME", "current_version", "migrate", "table_columns"]
