"""Exception hierarchy shared by the inventory backend."""

from __future__ import annotations


class InventarioError(Exception):
    """Base class for every error raised by the backend."""


class PersistenceError(InventarioError):
    """A database query or statement failed."""


class ItemNotFoundError(PersistenceError):
    """No inventory row exists for the requested id."""

    def __init__(self, item_id: int) -> None:
        super().__init__(f"Inventory item {item_id} does not exist")
        self.item_id = item_id


class SchemaVersionError(PersistenceError):
    """The database was written by a newer schema than this build knows."""


class ImageDecodeError(InventarioError):
    """An image payload is not valid base64."""


class ImageWriteError(InventarioError):
    """Writing an image file to the image directory failed."""


class ImageDeleteError(InventarioError):
    """Removing an image file failed."""


class InvalidItemError(InventarioError):
    """Item fields failed validation (blank name, non-integer quantity)."""


class BackupError(InventarioError):
    """Exporting or importing a database backup failed."""


class SettingsInvalidError(InventarioError):
    """The settings file could not be read or parsed."""
