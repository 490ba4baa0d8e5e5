"""
Module: inventory_kernel.selectors.inventory_selector
Responsibility: Read-only access to ledger rows: one product at one location,
    everything at a location, and one product across locations.
Architecture position: Kernel > Selectors.

A (location, product) pair without a row is reported as zero stock.
"""

from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.dtos import LocationStock, StockLevel
from inventory_kernel.domain.values import LocationType
from inventory_kernel.models.location import InventoryLocation
from inventory_kernel.models.location_inventory import LocationInventory
from inventory_kernel.selectors.base import BaseSelector


class InventorySelector(BaseSelector[LocationInventory]):

    def get_stock(self, location_id: UUID, product_id: UUID) -> StockLevel:
        row = self.session.execute(
            select(LocationInventory)
            .where(
                LocationInventory.location_id == location_id,
                LocationInventory.product_id == product_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if row is None:
            return StockLevel.zero(location_id, product_id)
        return StockLevel.from_model(row)

    def list_for_location(self, location_id: UUID) -> list[StockLevel]:
        """Every product row at a location, by product id."""
        rows = self.session.execute(
            select(LocationInventory)
            .where(LocationInventory.location_id == location_id)
            .order_by(LocationInventory.product_id)
            .execution_options(populate_existing=True)
        ).scalars()
        return [StockLevel.from_model(row) for row in rows]

    def list_for_product(
        self,
        product_id: UUID,
        vendor_id: UUID | None = None,
    ) -> list[LocationStock]:
        """
        One product across locations, joined with each location's name,
        type and fulfillment flags.  Optionally limited to one vendor.
        """
        stmt = (
            select(
                LocationInventory.location_id,
                InventoryLocation.name,
                InventoryLocation.location_type,
                LocationInventory.product_id,
                LocationInventory.quantity,
                LocationInventory.reserved_quantity,
                LocationInventory.available_quantity,
                InventoryLocation.is_pickup_location,
                InventoryLocation.is_shipping_origin,
            )
            .join(InventoryLocation, InventoryLocation.id == LocationInventory.location_id)
            .where(LocationInventory.product_id == product_id)
            .order_by(InventoryLocation.name, LocationInventory.location_id)
        )
        if vendor_id is not None:
            stmt = stmt.where(InventoryLocation.vendor_id == vendor_id)

        return [
            LocationStock(
                location_id=row.location_id,
                location_name=row.name,
                location_type=LocationType(row.location_type),
                product_id=row.product_id,
                quantity=row.quantity,
                reserved_quantity=row.reserved_quantity,
                available_quantity=row.available_quantity,
                is_pickup_location=row.is_pickup_location,
                is_shipping_origin=row.is_shipping_origin,
            )
            for row in self.session.execute(stmt)
        ]
