from pathlib import Path

import pytest

from inventario import app
from inventario.store import InventoryRepository


@pytest.fixture(autouse=True)
def _reset_global():
    app.reset_global_repository()
    yield
    app.reset_global_repository()


def test_open_repository_uses_data_dir(tmp_path: Path) -> None:
    repo = app.open_repository(tmp_path)
    try:
        assert isinstance(repo, InventoryRepository)
        assert Path(repo.get_storage_path()) == (tmp_path / "inventario.db").resolve()
    finally:
        repo.close()


def test_global_repository_is_shared(tmp_path: Path) -> None:
    first = app.get_global_repository(tmp_path)
    second = app.get_global_repository(tmp_path / "ignored")
    assert first is second


def test_reset_closes_global_repository(tmp_path: Path) -> None:
    repo = app.get_global_repository(tmp_path)
    app.reset_global_repository()
    assert repo.database.closed
    assert app.get_global_repository(tmp_path) is not repo


def test_create_commands_wraps_global_repository(tmp_path: Path) -> None:
    commands = app.create_commands(tmp_path)
    result = commands.invoke("add_item", {"name": "Global"})
    assert result.ok
    assert app.get_global_repository().list_all()[0].name == "Global"
