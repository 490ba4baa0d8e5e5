"""
Configuration Schema (``inventory_config.schema``).

Frozen dataclasses produced by the loader.  Nothing here reads files or
the environment; see ``inventory_config.get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DatabaseSettings:
    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800
    install_triggers: bool = True


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class ThresholdSettings:
    """
    Default stock classification thresholds and the ranges a vendor may
    choose from.
    """

    low_stock: int = 5
    overstock: int = 100
    low_stock_min: int = 1
    low_stock_max: int = 50
    overstock_min: int = 50
    overstock_max: int = 1000


@dataclass(frozen=True)
class SyncSettings:
    default_frequency: str = "real_time"


@dataclass(frozen=True)
class InventorySettings:
    """The fully loaded configuration of one profile."""

    profile: str
    database: DatabaseSettings
    logging: LoggingSettings
    thresholds: ThresholdSettings
    sync: SyncSettings
    checksum: str
