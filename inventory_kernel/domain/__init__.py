"""Pure domain layer: value enums, DTOs, stock classification, and clocks."""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import (
    InventoryMetrics,
    LocationInfo,
    LocationStock,
    MovementRecord,
    MovementSpec,
    ProductTotals,
    StockClassification,
    StockLevel,
    SyncConfigInfo,
    TransferResult,
)
from inventory_kernel.domain.stock_status import (
    DEFAULT_THRESHOLDS,
    StockStatus,
    StockThresholds,
    stock_status,
)
from inventory_kernel.domain.values import (
    SYSTEM_ACTOR_ID,
    ChannelType,
    LocationType,
    MovementAction,
    MovementType,
    SyncFrequency,
)

__all__ = [
    "Clock",
    "SystemClock",
    "DeterministicClock",
    "LocationInfo",
    "StockLevel",
    "LocationStock",
    "MovementSpec",
    "MovementRecord",
    "TransferResult",
    "ProductTotals",
    "StockClassification",
    "InventoryMetrics",
    "SyncConfigInfo",
    "StockStatus",
    "StockThresholds",
    "DEFAULT_THRESHOLDS",
    "stock_status",
    "LocationType",
    "MovementType",
    "MovementAction",
    "ChannelType",
    "SyncFrequency",
    "SYSTEM_ACTOR_ID",
]
