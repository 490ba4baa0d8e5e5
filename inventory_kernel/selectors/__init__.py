"""Read-only selectors.  Each returns DTOs and never mutates."""

from inventory_kernel.selectors.inventory_selector import InventorySelector
from inventory_kernel.selectors.movement_selector import MovementSelector
from inventory_kernel.selectors.vendor_selector import VendorSelector

__all__ = [
    "InventorySelector",
    "MovementSelector",
    "VendorSelector",
]
