"""
DTOs -- immutable data transfer objects returned by services and selectors.

Responsibility:
    Callers never receive ORM instances.  Every read and every mutation
    result crosses the kernel boundary as one of these frozen dataclasses.

Architecture position:
    Kernel > Domain -- no database access.  ``from_model()`` class methods
    are boundary converters invoked only from services and selectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from inventory_kernel.domain.values import (
    ChannelType,
    LocationType,
    MovementAction,
    MovementType,
    SyncFrequency,
)

if TYPE_CHECKING:
    from inventory_kernel.models.location import InventoryLocation
    from inventory_kernel.models.location_inventory import LocationInventory
    from inventory_kernel.models.movement import InventoryMovement
    from inventory_kernel.models.sync_config import InventorySyncConfig


@dataclass(frozen=True)
class LocationInfo:
    id: UUID
    vendor_id: UUID
    name: str
    location_type: LocationType
    address: str | None
    city: str | None
    state: str | None
    postal_code: str | None
    country: str | None
    is_active: bool
    is_pickup_location: bool
    is_shipping_origin: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: InventoryLocation) -> LocationInfo:
        return cls(
            id=model.id,
            vendor_id=model.vendor_id,
            name=model.name,
            location_type=LocationType(model.location_type),
            address=model.address,
            city=model.city,
            state=model.state,
            postal_code=model.postal_code,
            country=model.country,
            is_active=model.is_active,
            is_pickup_location=model.is_pickup_location,
            is_shipping_origin=model.is_shipping_origin,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


@dataclass(frozen=True)
class StockLevel:
    """
    Quantity triple for one (location, product).

    A location that never held the product is reported as all zeros.
    """

    location_id: UUID
    product_id: UUID
    quantity: int
    reserved_quantity: int
    available_quantity: int

    @classmethod
    def zero(cls, location_id: UUID, product_id: UUID) -> StockLevel:
        return cls(
            location_id=location_id,
            product_id=product_id,
            quantity=0,
            reserved_quantity=0,
            available_quantity=0,
        )

    @classmethod
    def from_model(cls, model: LocationInventory) -> StockLevel:
        return cls(
            location_id=model.location_id,
            product_id=model.product_id,
            quantity=model.quantity,
            reserved_quantity=model.reserved_quantity,
            available_quantity=model.available_quantity,
        )


@dataclass(frozen=True)
class LocationStock:
    """A ledger row joined with its location, for product-across-locations views."""

    location_id: UUID
    location_name: str
    location_type: LocationType
    product_id: UUID
    quantity: int
    reserved_quantity: int
    available_quantity: int
    is_pickup_location: bool
    is_shipping_origin: bool


@dataclass(frozen=True)
class MovementSpec:
    """
    Request to append one movement.

    Validated by MovementService.record(); constructing a malformed spec is
    allowed so the service can reject it with a typed error.
    """

    vendor_id: UUID
    product_id: UUID
    quantity: int
    movement_type: MovementType
    action: MovementAction
    created_by: UUID
    from_location_id: UUID | None = None
    to_location_id: UUID | None = None
    reason: str | None = None
    reference_id: str | None = None


@dataclass(frozen=True)
class MovementRecord:
    id: UUID
    seq: int
    vendor_id: UUID
    product_id: UUID
    from_location_id: UUID | None
    to_location_id: UUID | None
    quantity: int
    movement_type: MovementType
    action: MovementAction
    reason: str | None
    reference_id: str | None
    created_by: UUID
    created_at: datetime

    @classmethod
    def from_model(cls, model: InventoryMovement) -> MovementRecord:
        return cls(
            id=model.id,
            seq=model.seq,
            vendor_id=model.vendor_id,
            product_id=model.product_id,
            from_location_id=model.from_location_id,
            to_location_id=model.to_location_id,
            quantity=model.quantity,
            movement_type=MovementType(model.movement_type),
            action=MovementAction(model.action),
            reason=model.reason,
            reference_id=model.reference_id,
            created_by=model.created_by,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class TransferResult:
    """Both sides of a completed transfer plus the single movement written."""

    source: StockLevel
    destination: StockLevel
    movement: MovementRecord


@dataclass(frozen=True)
class ProductTotals:
    """Vendor-wide sums for one product across all of the vendor's locations."""

    product_id: UUID
    total_quantity: int
    total_reserved: int
    total_available: int


@dataclass(frozen=True)
class StockClassification:
    out_of_stock: tuple[ProductTotals, ...] = ()
    low_stock: tuple[ProductTotals, ...] = ()
    adequate: tuple[ProductTotals, ...] = ()
    overstock: tuple[ProductTotals, ...] = ()


@dataclass(frozen=True)
class InventoryMetrics:
    """Dashboard counters for one vendor."""

    total_products: int
    out_of_stock_count: int
    low_stock_count: int
    adequate_count: int
    overstock_count: int
    active_locations: int
    pickup_locations: int
    shipping_locations: int


@dataclass(frozen=True)
class SyncConfigInfo:
    id: UUID
    vendor_id: UUID
    channel_type: ChannelType
    channel_id: str
    sync_enabled: bool
    sync_frequency: SyncFrequency
    last_sync_at: datetime | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_model(cls, model: InventorySyncConfig) -> SyncConfigInfo:
        return cls(
            id=model.id,
            vendor_id=model.vendor_id,
            channel_type=ChannelType(model.channel_type),
            channel_id=model.channel_id,
            sync_enabled=model.sync_enabled,
            sync_frequency=SyncFrequency(model.sync_frequency),
            last_sync_at=model.last_sync_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def is_due(self, now: datetime) -> bool:
        """Whether a dispatcher should sync this channel at ``now``."""
        if not self.sync_enabled:
            return False
        interval = self.sync_frequency.interval
        if interval is None:
            return False
        if self.last_sync_at is None:
            return True
        return now - self.last_sync_at >= interval
