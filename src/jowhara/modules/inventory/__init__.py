"""Jowhara Inventory Module - Stock adjustments and journal."""

from jowhara.modules.inventory.router import router
from jowhara.modules.inventory.service import InventoryService

__all__ = ["router", "InventoryService"]
