"""Write services for the inventory kernel.  All flush; none commit."""

from inventory_kernel.services.ledger_service import LedgerService
from inventory_kernel.services.location_service import LocationService
from inventory_kernel.services.movement_service import MovementService
from inventory_kernel.services.sequence_service import SequenceService
from inventory_kernel.services.sync_config_service import SyncConfigService

__all__ = [
    "LedgerService",
    "LocationService",
    "MovementService",
    "SequenceService",
    "SyncConfigService",
]
