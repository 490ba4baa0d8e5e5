"""
Module: inventory_kernel.models.movement
Responsibility: ORM persistence for the append-only movement log.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - Append-only: no UPDATE, no DELETE.  Enforced by ORM listeners
      (db/immutability.py) and, on PostgreSQL, by triggers (db/triggers.py).
    - quantity > 0 (ck_movement_quantity_positive).
    - seq is unique and strictly increasing in commit-independent allocation
      order (uq_movement_seq; allocated by SequenceService).

from_location_id / to_location_id are plain columns rather than foreign
keys, so a movement keeps naming a location after that location is deleted.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, UTCDateTime, UUIDString
from inventory_kernel.domain.values import MovementAction, MovementType


class InventoryMovement(Base):
    """
    One quantity change.

    movement_type is the direction relative to the named location(s);
    action is the ledger operation that produced the row.
    """

    __tablename__ = "inventory_movements"

    __table_args__ = (
        UniqueConstraint("seq", name="uq_movement_seq"),
        CheckConstraint("quantity > 0", name="ck_movement_quantity_positive"),
        Index("idx_movement_product", "product_id"),
        Index("idx_movement_vendor", "vendor_id"),
        Index("idx_movement_reference", "reference_id"),
    )

    seq: Mapped[int] = mapped_column(nullable=False)

    vendor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)
    product_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    from_location_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    to_location_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)

    quantity: Mapped[int] = mapped_column(nullable=False)

    movement_type: Mapped[MovementType] = mapped_column(String(20), nullable=False)
    action: Mapped[MovementAction] = mapped_column(String(20), nullable=False)

    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    reference_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_by: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<InventoryMovement #{self.seq} {self.movement_type}/{self.action} "
            f"{self.quantity} of {self.product_id}>"
        )
