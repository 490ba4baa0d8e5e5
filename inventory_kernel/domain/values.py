"""
Value enumerations shared by the ORM models and the DTOs.

All are ``str`` enums so they persist as plain strings and serialize
cleanly in log payloads.
"""

from datetime import timedelta
from enum import Enum
from uuid import UUID

# Actor recorded on movements written on behalf of automated callers
# (checkout, POS) that do not pass an explicit actor.
SYSTEM_ACTOR_ID = UUID(int=0)


class LocationType(str, Enum):
    WAREHOUSE = "warehouse"
    STORE = "store"
    DISTRIBUTION_CENTER = "distribution_center"
    OTHER = "other"


class MovementType(str, Enum):
    """Direction of a movement relative to the location(s) it names."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"
    TRANSFER = "transfer"
    ADJUSTMENT = "adjustment"


class MovementAction(str, Enum):
    """Ledger operation that produced a movement."""

    STOCK_SET = "stock_set"
    RESERVED = "reserved"
    RELEASED = "released"
    FULFILLED = "fulfilled"
    TRANSFERRED = "transferred"


class ChannelType(str, Enum):
    STOREFRONT = "storefront"
    MARKETPLACE = "marketplace"
    POS = "pos"
    CUSTOM = "custom"


class SyncFrequency(str, Enum):
    REAL_TIME = "real_time"
    HOURLY = "hourly"
    DAILY = "daily"
    MANUAL = "manual"

    @property
    def interval(self) -> timedelta | None:
        """Minimum time between syncs; None means never scheduled."""
        return _SYNC_INTERVALS[self]


_SYNC_INTERVALS: dict[SyncFrequency, timedelta | None] = {
    SyncFrequency.REAL_TIME: timedelta(0),
    SyncFrequency.HOURLY: timedelta(hours=1),
    SyncFrequency.DAILY: timedelta(days=1),
    SyncFrequency.MANUAL: None,
}
