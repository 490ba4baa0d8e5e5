"""
Module: inventory_kernel.selectors.movement_selector
Responsibility: Read-only queries over the movement log.  All listings are
    newest first (seq descending).
Architecture position: Kernel > Selectors.
"""

from uuid import UUID

from sqlalchemy import select

from inventory_kernel.domain.dtos import MovementRecord
from inventory_kernel.models.movement import InventoryMovement
from inventory_kernel.selectors.base import BaseSelector


class MovementSelector(BaseSelector[InventoryMovement]):

    def _list(self, *criteria, limit: int | None = None) -> list[MovementRecord]:
        stmt = (
            select(InventoryMovement)
            .where(*criteria)
            .order_by(InventoryMovement.seq.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return [MovementRecord.from_model(m) for m in self.session.execute(stmt).scalars()]

    def list_for_product(self, product_id: UUID, limit: int | None = None) -> list[MovementRecord]:
        return self._list(InventoryMovement.product_id == product_id, limit=limit)

    def list_for_vendor(self, vendor_id: UUID, limit: int | None = None) -> list[MovementRecord]:
        return self._list(InventoryMovement.vendor_id == vendor_id, limit=limit)

    def list_for_reference(self, reference_id: str) -> list[MovementRecord]:
        """
        Every movement carrying ``reference_id`` (one order or transfer).

        The ledger does not deduplicate by reference; a caller that may
        retry a reservation checks here first.
        """
        return self._list(InventoryMovement.reference_id == reference_id)

    def list_for_location(self, location_id: UUID, limit: int | None = None) -> list[MovementRecord]:
        return self._list(
            (InventoryMovement.from_location_id == location_id)
            | (InventoryMovement.to_location_id == location_id),
            limit=limit,
        )
