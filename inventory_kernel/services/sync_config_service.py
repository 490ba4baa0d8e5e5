"""
SyncConfigService -- per-channel inventory sync settings.

Responsibility:
    Stores, for each (vendor, channel type, channel id), whether inventory
    sync is enabled and how often it should run, plus when it last ran.
    An external dispatcher reads these; nothing here touches the ledger.

Failure modes:
    - InvalidSyncConfigError: blank channel id or unknown enum value.
    - SyncConfigNotFoundError: mark_synced/get_config on an unknown key.
    - StorageError: backing-store failure.
"""

from uuid import UUID, uuid4

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from inventory_kernel.db.dialect import upsert_insert
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import SyncConfigInfo
from inventory_kernel.domain.values import ChannelType, SyncFrequency
from inventory_kernel.exceptions import InvalidSyncConfigError, SyncConfigNotFoundError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.sync_config import InventorySyncConfig
from inventory_kernel.services.base import BaseService, storage_errors

logger = get_logger("services.sync_config")


def _coerce_key(channel_type, channel_id) -> tuple[ChannelType, str]:
    try:
        channel = ChannelType(channel_type)
    except ValueError as exc:
        raise InvalidSyncConfigError(f"unknown channel type {channel_type!r}") from exc
    if not isinstance(channel_id, str) or not channel_id.strip():
        raise InvalidSyncConfigError("channel_id must not be empty")
    return channel, channel_id.strip()


def _coerce_frequency(frequency) -> SyncFrequency:
    try:
        return SyncFrequency(frequency)
    except ValueError as exc:
        raise InvalidSyncConfigError(f"unknown sync frequency {frequency!r}") from exc


class SyncConfigService(BaseService[InventorySyncConfig]):

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    def _key_filter(self, vendor_id: UUID, channel_type: ChannelType, channel_id: str):
        return (
            InventorySyncConfig.vendor_id == vendor_id,
            InventorySyncConfig.channel_type == channel_type.value,
            InventorySyncConfig.channel_id == channel_id,
        )

    def _fetch(self, vendor_id: UUID, channel_type: ChannelType, channel_id: str):
        return self.session.execute(
            select(InventorySyncConfig)
            .where(*self._key_filter(vendor_id, channel_type, channel_id))
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def upsert(
        self,
        vendor_id: UUID,
        channel_type: ChannelType | str,
        channel_id: str,
        enabled: bool,
        frequency: SyncFrequency | str,
    ) -> SyncConfigInfo:
        """
        Create or replace the settings for one channel in a single
        INSERT ... ON CONFLICT DO UPDATE.  ``last_sync_at`` survives updates.
        """
        channel, channel_id = _coerce_key(channel_type, channel_id)
        sync_frequency = _coerce_frequency(frequency)
        now = self._clock.now()

        insert_stmt = upsert_insert(self.session, InventorySyncConfig.__table__).values(
            id=uuid4(),
            vendor_id=vendor_id,
            channel_type=channel.value,
            channel_id=channel_id,
            sync_enabled=bool(enabled),
            sync_frequency=sync_frequency.value,
            created_at=now,
            updated_at=now,
        )
        stmt = insert_stmt.on_conflict_do_update(
            index_elements=["vendor_id", "channel_type", "channel_id"],
            set_={
                "sync_enabled": insert_stmt.excluded.sync_enabled,
                "sync_frequency": insert_stmt.excluded.sync_frequency,
                "updated_at": insert_stmt.excluded.updated_at,
            },
        )

        with storage_errors("upsert_sync_config"):
            self.session.execute(stmt)
            config = self._fetch(vendor_id, channel, channel_id)

        logger.info(
            "sync_config_upserted",
            extra={
                "vendor_id": str(vendor_id),
                "channel_type": channel.value,
                "channel_id": channel_id,
                "sync_enabled": bool(enabled),
                "sync_frequency": sync_frequency.value,
            },
        )
        return SyncConfigInfo.from_model(config)

    def list_configs(self, vendor_id: UUID) -> list[SyncConfigInfo]:
        with storage_errors("list_sync_configs"):
            configs = self.session.execute(
                select(InventorySyncConfig)
                .where(InventorySyncConfig.vendor_id == vendor_id)
                .order_by(InventorySyncConfig.channel_type, InventorySyncConfig.channel_id)
            ).scalars()
            return [SyncConfigInfo.from_model(config) for config in configs]

    def get_config(
        self,
        vendor_id: UUID,
        channel_type: ChannelType | str,
        channel_id: str,
    ) -> SyncConfigInfo:
        channel, channel_id = _coerce_key(channel_type, channel_id)
        with storage_errors("get_sync_config"):
            config = self._fetch(vendor_id, channel, channel_id)
        if config is None:
            raise SyncConfigNotFoundError(str(vendor_id), channel.value, channel_id)
        return SyncConfigInfo.from_model(config)

    def mark_synced(
        self,
        vendor_id: UUID,
        channel_type: ChannelType | str,
        channel_id: str,
    ) -> SyncConfigInfo:
        """Stamp ``last_sync_at`` with the clock's current time."""
        channel, channel_id = _coerce_key(channel_type, channel_id)
        now = self._clock.now()
        with storage_errors("mark_synced"):
            result = self.session.execute(
                update(InventorySyncConfig)
                .where(*self._key_filter(vendor_id, channel, channel_id))
                .values(last_sync_at=now, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise SyncConfigNotFoundError(str(vendor_id), channel.value, channel_id)
            config = self._fetch(vendor_id, channel, channel_id)

        logger.info(
            "channel_synced",
            extra={
                "vendor_id": str(vendor_id),
                "channel_type": channel.value,
                "channel_id": channel_id,
            },
        )
        return SyncConfigInfo.from_model(config)

    def list_due(self, vendor_id: UUID) -> list[SyncConfigInfo]:
        """
        Enabled configs whose interval has elapsed since ``last_sync_at``.

        real_time is always due, manual never is, and a channel that has
        never synced is due unless it is manual.
        """
        now = self._clock.now()
        return [config for config in self.list_configs(vendor_id) if config.is_due(now)]
