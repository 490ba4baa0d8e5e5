"""
Module: inventory_kernel.models.location
Responsibility: ORM persistence for fulfillment locations (warehouses, stores,
    distribution centers) owned by a vendor.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - name is non-blank (service layer; NOT NULL in the schema).
    - A location belongs to exactly one vendor.  Ledger rows reach their
      vendor through the location.

Failure modes:
    - IntegrityError on deleting a location that still has ledger rows
      (FK from location_inventory).  LocationService removes empty rows
      first and refuses when any row holds stock.
"""

from uuid import UUID

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UUIDString
from inventory_kernel.domain.values import LocationType


class InventoryLocation(TrackedBase):
    """
    A place that holds stock.

    Flags:
        is_active          -- participates in pickup/shipping lookups
        is_pickup_location -- eligible for buy-online-pickup-in-store
        is_shipping_origin -- eligible to ship orders from
    """

    __tablename__ = "inventory_locations"

    __table_args__ = (
        Index("idx_location_vendor", "vendor_id"),
    )

    vendor_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )

    location_type: Mapped[LocationType] = mapped_column(
        String(30),
        default=LocationType.WAREHOUSE,
        nullable=False,
    )

    # Postal address
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    is_pickup_location: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    is_shipping_origin: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<InventoryLocation {self.name} ({self.location_type})>"
