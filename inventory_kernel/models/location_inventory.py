"""
Module: inventory_kernel.models.location_inventory
Responsibility: The ledger row -- quantity, reserved and available units of
    one product at one location.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced (CHECK constraints, named so violations are traceable):
    ck_reserved_non_negative     -- reserved_quantity >= 0
    ck_reserved_within_quantity  -- reserved_quantity <= quantity
    ck_available_derived         -- available_quantity = quantity - reserved_quantity

    Together these imply quantity >= 0 and available_quantity >= 0.  The
    ledger service keeps them true with guarded UPDATE statements; the
    constraints are the backstop.

Rows are created lazily.  A missing row is zero stock, never an error.
"""

from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UUIDString


class LocationInventory(TrackedBase):
    """One product's stock at one location."""

    __tablename__ = "location_inventory"

    __table_args__ = (
        UniqueConstraint("location_id", "product_id", name="uq_location_product"),
        CheckConstraint(
            "reserved_quantity >= 0",
            name="ck_reserved_non_negative",
        ),
        CheckConstraint(
            "reserved_quantity <= quantity",
            name="ck_reserved_within_quantity",
        ),
        CheckConstraint(
            "available_quantity = quantity - reserved_quantity",
            name="ck_available_derived",
        ),
        Index("idx_location_inventory_product", "product_id"),
    )

    location_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("inventory_locations.id"),
        nullable=False,
    )

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(default=0, nullable=False)
    reserved_quantity: Mapped[int] = mapped_column(default=0, nullable=False)
    available_quantity: Mapped[int] = mapped_column(default=0, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<LocationInventory {self.product_id}@{self.location_id}: "
            f"{self.quantity}/{self.reserved_quantity}/{self.available_quantity}>"
        )
