"""
Config -> Kernel Bridges.

Functions that turn ``InventorySettings`` into kernel inputs.  They live in
inventory_config (the producer) because the kernel must NEVER import
inventory_config.

Usage:
    from inventory_config import get_active_config
    from inventory_config.bridges import build_thresholds, configure_kernel, create_schema

    settings = get_active_config("local")
    configure_kernel(settings)
    create_schema(settings)
    buckets = VendorSelector(session).classify(
        vendor_id, **threshold_kwargs(build_thresholds(settings))
    )
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.engine import Engine

from inventory_config.schema import InventorySettings
from inventory_kernel.db.engine import create_tables, init_engine_from_url
from inventory_kernel.domain.stock_status import StockThresholds
from inventory_kernel.domain.values import SyncFrequency
from inventory_kernel.logging_config import configure_logging


def engine_kwargs(settings: InventorySettings) -> dict[str, Any]:
    """Keyword arguments for ``init_engine_from_url``."""
    db = settings.database
    return {
        "database_url": db.url,
        "echo": db.echo,
        "pool_size": db.pool_size,
        "max_overflow": db.max_overflow,
        "pool_timeout": db.pool_timeout,
        "pool_recycle": db.pool_recycle,
    }


def build_thresholds(settings: InventorySettings) -> StockThresholds:
    return StockThresholds(
        low_stock=settings.thresholds.low_stock,
        overstock=settings.thresholds.overstock,
    )


def threshold_kwargs(thresholds: StockThresholds) -> dict[str, int]:
    """Arguments for ``VendorSelector.classify``."""
    return {
        "low_threshold": thresholds.low_stock,
        "overstock_threshold": thresholds.overstock,
    }


def default_sync_frequency(settings: InventorySettings) -> SyncFrequency:
    return SyncFrequency(settings.sync.default_frequency)


def configure_kernel(settings: InventorySettings) -> Engine:
    """Configure kernel logging and initialize the engine from settings."""
    configure_logging(level=settings.logging.level)
    return init_engine_from_url(**engine_kwargs(settings))


def create_schema(settings: InventorySettings) -> None:
    """
    Create the schema on the configured engine.

    ``database.install_triggers`` decides whether the PostgreSQL movement
    immutability triggers are installed; SQLite never gets them.
    Call after ``configure_kernel``.
    """
    create_tables(install_triggers=settings.database.install_triggers)
