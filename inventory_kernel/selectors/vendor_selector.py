"""
Module: inventory_kernel.selectors.vendor_selector
Responsibility: Vendor-wide rollups over the ledger -- per-product totals,
    stock classification against caller-supplied thresholds, and the
    dashboard metrics built from both.
Architecture position: Kernel > Selectors.

Totals are computed in the database with SUM ... GROUP BY product over the
vendor's locations.  Nothing is cached; every call reads current rows.
"""

from uuid import UUID

from sqlalchemy import func, select

from inventory_kernel.domain.dtos import InventoryMetrics, ProductTotals, StockClassification
from inventory_kernel.domain.stock_status import (
    DEFAULT_THRESHOLDS,
    StockStatus,
    StockThresholds,
    stock_status,
)
from inventory_kernel.models.location import InventoryLocation
from inventory_kernel.models.location_inventory import LocationInventory
from inventory_kernel.selectors.base import BaseSelector


class VendorSelector(BaseSelector[LocationInventory]):

    def totals(self, vendor_id: UUID) -> list[ProductTotals]:
        """
        Sum quantity, reserved and available per product across every
        location the vendor owns.  Products without rows are omitted.
        """
        stmt = (
            select(
                LocationInventory.product_id,
                func.sum(LocationInventory.quantity).label("total_quantity"),
                func.sum(LocationInventory.reserved_quantity).label("total_reserved"),
                func.sum(LocationInventory.available_quantity).label("total_available"),
            )
            .join(InventoryLocation, InventoryLocation.id == LocationInventory.location_id)
            .where(InventoryLocation.vendor_id == vendor_id)
            .group_by(LocationInventory.product_id)
            .order_by(LocationInventory.product_id)
        )
        # PostgreSQL returns SUM(bigint) as numeric
        return [
            ProductTotals(
                product_id=row.product_id,
                total_quantity=int(row.total_quantity),
                total_reserved=int(row.total_reserved),
                total_available=int(row.total_available),
            )
            for row in self.session.execute(stmt)
        ]

    def classify(
        self,
        vendor_id: UUID,
        low_threshold: int,
        overstock_threshold: int,
    ) -> StockClassification:
        """
        Bucket each product by its total available units.

        Raises:
            InvalidThresholdsError: negative low threshold, or overstock not
                above low.
        """
        thresholds = StockThresholds(low_stock=low_threshold, overstock=overstock_threshold)
        return self._classify(self.totals(vendor_id), thresholds)

    def metrics(
        self,
        vendor_id: UUID,
        thresholds: StockThresholds = DEFAULT_THRESHOLDS,
    ) -> InventoryMetrics:
        """Product counts per bucket plus active/pickup/shipping location counts."""
        totals = self.totals(vendor_id)
        buckets = self._classify(totals, thresholds)

        active = InventoryLocation.is_active.is_(True)
        location_counts = self.session.execute(
            select(
                func.count().filter(active).label("active"),
                func.count()
                .filter(active, InventoryLocation.is_pickup_location.is_(True))
                .label("pickup"),
                func.count()
                .filter(active, InventoryLocation.is_shipping_origin.is_(True))
                .label("shipping"),
            ).where(InventoryLocation.vendor_id == vendor_id)
        ).one()

        return InventoryMetrics(
            total_products=len(totals),
            out_of_stock_count=len(buckets.out_of_stock),
            low_stock_count=len(buckets.low_stock),
            adequate_count=len(buckets.adequate),
            overstock_count=len(buckets.overstock),
            active_locations=location_counts.active,
            pickup_locations=location_counts.pickup,
            shipping_locations=location_counts.shipping,
        )

    @staticmethod
    def _classify(
        totals: list[ProductTotals],
        thresholds: StockThresholds,
    ) -> StockClassification:
        buckets: dict[StockStatus, list[ProductTotals]] = {status: [] for status in StockStatus}
        for product in totals:
            buckets[stock_status(product.total_available, thresholds)].append(product)
        return StockClassification(
            out_of_stock=tuple(buckets[StockStatus.OUT_OF_STOCK]),
            low_stock=tuple(buckets[StockStatus.LOW_STOCK]),
            adequate=tuple(buckets[StockStatus.ADEQUATE]),
            overstock=tuple(buckets[StockStatus.OVERSTOCK]),
        )
