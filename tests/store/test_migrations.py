from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from inventario.errors import SchemaVersionError
from inventario.store import SCHEMA_VERSION
from inventario.store.migrations import current_version, migrate, table_columns


def _legacy_database(path: Path) -> None:
    """Create the table layout shipped before quantities existed."""
    conn = sqlite3.connect(str(path))
    conn.execute(
        """
        CREATE TABLE inventory (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            image_path TEXT,
            created_at DATETIME DEFAULT (datetime('now', 'localtime'))
        )
        """
    )
    conn.execute(
        "INSERT INTO inventory (name, image_path, created_at) VALUES (?, ?, ?)",
        ("Martillo", None, "2023-05-01 10:00:00"),
    )
    conn.commit()
    conn.close()


def test_fresh_database_gets_latest_schema() -> None:
    conn = sqlite3.connect(":memory:")
    assert migrate(conn) == SCHEMA_VERSION
    assert current_version(conn) == SCHEMA_VERSION
    assert table_columns(conn) == [
        "id",
        "name",
        "image_path",
        "cantidad_necesaria",
        "cantidad_disponible",
        "created_at",
    ]


def test_migrate_is_idempotent() -> None:
    conn = sqlite3.connect(":memory:")
    migrate(conn)
    assert migrate(conn) == SCHEMA_VERSION
    assert table_columns(conn).count("cantidad_necesaria") == 1


def test_legacy_table_gains_quantity_columns(make_repository, data_dir: Path) -> None:
    _legacy_database(data_dir / "inventario.db")

    repo = make_repository(data_dir)

    [item] = repo.list_all()
    assert item.name == "Martillo"
    assert item.cantidad_necesaria == 0
    assert item.cantidad_disponible == 0
    assert item.created_at == "2023-05-01 10:00:00"


def test_legacy_table_with_one_quantity_column() -> None:
    conn = sqlite3.connect(":memory:")
    conn.execute(
        "CREATE TABLE inventory (id INTEGER PRIMARY KEY AUTOINCREMENT, name TEXT NOT NULL, "
        "image_path TEXT, cantidad_necesaria INTEGER NOT NULL DEFAULT 0, created_at DATETIME)"
    )

    migrate(conn)

    columns = table_columns(conn)
    assert columns.count("cantidad_necesaria") == 1
    assert "cantidad_disponible" in columns


def test_newer_schema_is_rejected() -> None:
    conn = sqlite3.connect(":memory:")
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
    with pytest.raises(SchemaVersionError):
        migrate(conn)
