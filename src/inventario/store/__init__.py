"""Inventory persistence package.

- `database`: the single serialized SQLite connection
- `migrations`: schema creation and versioned upgrades
- `repository`: CRUD and maintenance operations (main entry point)

Usage:
    from inventario.store import InventoryRepository
    repo = InventoryRepository(data_dir)
    repo.add("Tornillos", cantidad_necesaria=10)
"""
from .database import Database
from .migrations import SCHEMA_VERSION
from .repository import InventoryRepository

__all__ = ["Database", "InventoryRepository", "SCHEMA_VERSION"]
