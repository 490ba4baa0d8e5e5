"""ORM models for the inventory kernel."""

from inventory_kernel.models.location import InventoryLocation
from inventory_kernel.models.location_inventory import LocationInventory
from inventory_kernel.models.movement import InventoryMovement
from inventory_kernel.models.sync_config import InventorySyncConfig
from inventory_kernel.models.sequence_counter import SequenceCounter


def import_all_models() -> None:
    """
    Register movement immutability listeners.

    Importing this package already registers every table on Base.metadata;
    engine setup calls this so listeners are active before the first flush.
    """
    from inventory_kernel.db.immutability import register_immutability_listeners

    register_immutability_listeners()


import_all_models()

__all__ = [
    "InventoryLocation",
    "LocationInventory",
    "InventoryMovement",
    "InventorySyncConfig",
    "SequenceCounter",
    "import_all_models",
]
