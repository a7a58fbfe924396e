"""Inventario: local inventory tracking backend."""

from .errors import (
    BackupError,
    ImageDecodeError,
    ImageDeleteError,
    ImageWriteError,
    InvalidItemError,
    InventarioError,
    ItemNotFoundError,
    PersistenceError,
)
from .models import InventoryItem
from .store import InventoryRepository

__all__ = [
    "BackupError",
    "ImageDecodeError",
    "ImageDeleteError",
    "ImageWriteError",
    "InvalidItemError",
    "InventarioError",
    "InventoryItem",
    "InventoryRepository",
    "ItemNotFoundError",
    "PersistenceError",
]
