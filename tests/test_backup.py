from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from inventario.backup import export_database, import_database
from inventario.errors import BackupError
from inventario.store import SCHEMA_VERSION
from inventario.store.migrations import migrate


def test_export_without_images(repository, tmp_path: Path) -> None:
    repository.add("Tornillos", None, 10, 4)
    destination = tmp_path / "exports" / "inventario_backup.db"

    result = export_database(repository, destination)

    assert result.db_path == destination.resolve()
    assert destination.exists()
    assert result.images_path is None
    assert result.images_copied == 0
    assert not (destination.parent / "imagenes_inventario").exists()


def test_export_copies_images_beside_database(repository, tmp_path: Path, png_base64: str, png_bytes: bytes) -> None:
    item = repository.add("Foto", png_base64, 1, 1)
    destination = tmp_path / "exports" / "backup.db"

    result = export_database(repository, destination)

    images_folder = destination.parent / "imagenes_inventario"
    assert result.images_path == images_folder.resolve()
    assert result.images_copied == 1
    assert (images_folder / Path(item.image_path).name).read_bytes() == png_bytes


def test_export_skips_dangling_images(repository, tmp_path: Path, png_base64: str) -> None:
    item = repository.add("Foto", png_base64, 1, 1)
    Path(item.image_path).unlink()

    result = export_database(repository, tmp_path / "backup.db")

    assert result.images_copied == 0


def test_export_refuses_to_overwrite_live_database(repository) -> None:
    with pytest.raises(BackupError):
        export_database(repository, repository.get_storage_path())


def test_export_then_import_into_new_data_dir(
    make_repository, repository, tmp_path: Path, png_base64: str, png_bytes: bytes
) -> None:
    plain = repository.add("Sin foto", None, 2, 1)
    pictured = repository.add("Con foto", png_base64, 5, 0)
    destination = tmp_path / "exports" / "backup.db"
    export_database(repository, destination)

    other = make_repository(tmp_path / "other_machine")
    other.add("Se sobrescribe")

    result = import_database(other, destination)

    assert result.images_imported == 1
    assert result.paths_fixed == 1
    assert result.message == "Base de datos importada con 1 imagen(es). 1 rutas actualizadas."
    items = {item.id: item for item in other.list_all()}
    assert set(items) == {plain.id, pictured.id}
    moved = Path(items[pictured.id].image_path)
    assert moved.parent == other.images_dir.resolve()
    assert moved.read_bytes() == png_bytes
    assert items[plain.id].image_path is None
    assert items[pictured.id].cantidad_necesaria == 5


def test_import_without_images_folder(make_repository, repository, tmp_path: Path) -> None:
    repository.add("Solo texto")
    destination = tmp_path / "exports" / "backup.db"
    export_database(repository, destination)

    other = make_repository(tmp_path / "other")
    result = import_database(other, destination)

    assert result.images_imported == 0
    assert result.message == "Base de datos importada sin imágenes"
    assert [item.name for item in other.list_all()] == ["Solo texto"]


def test_import_rejects_missing_file(repository, tmp_path: Path) -> None:
    with pytest.raises(BackupError):
        import_database(repository, tmp_path / "absent.db")


def test_import_rejects_non_sqlite_file(repository, tmp_path: Path) -> None:
    bogus = tmp_path / "notes.db"
    bogus.write_text("hola")
    repository.add("Intacto")

    with pytest.raises(BackupError):
        import_database(repository, bogus)

    assert [item.name for item in repository.list_all()] == ["Intacto"]


def test_import_of_corrupt_file_keeps_live_database(make_repository, repository, tmp_path: Path) -> None:
    repository.add("Intacto", None, 4, 2)
    corrupt = tmp_path / "corrupt.db"
    corrupt.write_bytes(b"SQLite format 3\x00" + b"\xff" * 4096)

    with pytest.raises(BackupError):
        import_database(repository, corrupt)

    assert [item.name for item in repository.list_all()] == ["Intacto"]
    repository.add("Sigue funcionando")
    repository.close()

    reopened = make_repository(repository.data_dir)
    assert sorted(item.name for item in reopened.list_all()) == ["Intacto", "Sigue funcionando"]


def test_import_of_newer_schema_keeps_live_database(repository, tmp_path: Path) -> None:
    repository.add("Actual")
    newer = tmp_path / "newer.db"
    conn = sqlite3.connect(str(newer))
    conn.execute("CREATE TABLE inventory (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
    conn.execute("INSERT INTO inventory (name) VALUES ('Futuro')")
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION + 1}")
    conn.commit()
    conn.close()

    with pytest.raises(BackupError, match="newer"):
        import_database(repository, newer)

    assert [item.name for item in repository.list_all()] == ["Actual"]


def test_import_includes_uncheckpointed_wal(repository, tmp_path: Path) -> None:
    repository.add("Se reemplaza")
    source = tmp_path / "wal_source" / "inventario.db"
    source.parent.mkdir()
    writer = sqlite3.connect(str(source))
    try:
        writer.execute("PRAGMA journal_mode=WAL")
        writer.execute("PRAGMA wal_autocheckpoint=0")
        migrate(writer)
        writer.execute(
            "INSERT INTO inventory (name, created_at) VALUES ('Solo en el WAL', '2024-01-01 00:00:00')"
        )
        writer.commit()
        assert Path(str(source) + "-wal").stat().st_size > 0

        import_database(repository, source)
    finally:
        writer.close()

    assert [item.name for item in repository.list_all()] == ["Solo en el WAL"]
