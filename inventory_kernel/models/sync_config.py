"""
Module: inventory_kernel.models.sync_config
Responsibility: Per-channel inventory synchronization settings.  Read by an
    external dispatcher; never touches the ledger.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - One row per (vendor_id, channel_type, channel_id) (uq_sync_config_channel).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Boolean, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base, UTCDateTime, UUIDString
from inventory_kernel.domain.values import ChannelType, SyncFrequency


class InventorySyncConfig(Base):
    __tablename__ = "inventory_sync_configs"

    __table_args__ = (
        UniqueConstraint(
            "vendor_id",
            "channel_type",
            "channel_id",
            name="uq_sync_config_channel",
        ),
    )

    vendor_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    channel_type: Mapped[ChannelType] = mapped_column(String(20), nullable=False)

    # Channel identifier within its type (store domain, marketplace account, ...)
    channel_id: Mapped[str] = mapped_column(String(200), nullable=False)

    sync_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    sync_frequency: Mapped[SyncFrequency] = mapped_column(
        String(20),
        default=SyncFrequency.REAL_TIME,
        nullable=False,
    )

    last_sync_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<InventorySyncConfig {self.channel_type}/{self.channel_id} "
            f"{self.sync_frequency}>"
        )
