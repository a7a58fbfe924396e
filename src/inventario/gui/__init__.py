"""Qt integration for the inventory backend."""

from .bridge import InventoryBridge

__all__ = ["InventoryBridge"]
