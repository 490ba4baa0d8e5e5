"""
Configuration Validator (``inventory_config.validator``).

Collects every problem in a loaded profile instead of stopping at the
first, so an operator fixes a bad file in one pass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from inventory_config.schema import InventorySettings
from inventory_kernel.domain.values import SyncFrequency

_LOG_LEVELS = frozenset(logging.getLevelNamesMapping())

_SYNC_FREQUENCIES = frozenset(f.value for f in SyncFrequency)


@dataclass
class ConfigValidationResult:
    """``is_valid`` is True only when ``errors`` is empty."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)


def validate_settings(settings: InventorySettings) -> ConfigValidationResult:
    result = ConfigValidationResult()

    _validate_database(settings, result)
    _validate_logging(settings, result)
    _validate_thresholds(settings, result)
    _validate_sync(settings, result)

    return result


def _validate_database(settings: InventorySettings, result: ConfigValidationResult) -> None:
    db = settings.database
    if not db.url.strip():
        result.add_error("database.url must not be empty")
    elif not db.url.startswith(("postgresql", "sqlite")):
        result.add_error(f"database.url has unsupported backend: {db.url.split(':', 1)[0]}")
    if db.pool_size < 1:
        result.add_error("database.pool_size must be at least 1")
    if db.max_overflow < 0:
        result.add_error("database.max_overflow must not be negative")
    if db.url.startswith("sqlite") and db.install_triggers:
        result.add_warning("database.install_triggers has no effect on SQLite")


def _validate_logging(settings: InventorySettings, result: ConfigValidationResult) -> None:
    if settings.logging.level not in _LOG_LEVELS:
        result.add_error(f"logging.level {settings.logging.level!r} is not a log level")


def _validate_thresholds(settings: InventorySettings, result: ConfigValidationResult) -> None:
    t = settings.thresholds
    if t.low_stock_min > t.low_stock_max:
        result.add_error("thresholds.low_stock_range is empty")
    if t.overstock_min > t.overstock_max:
        result.add_error("thresholds.overstock_range is empty")
    if not t.low_stock_min <= t.low_stock <= t.low_stock_max:
        result.add_error(
            f"thresholds.low_stock {t.low_stock} outside "
            f"[{t.low_stock_min}, {t.low_stock_max}]"
        )
    if not t.overstock_min <= t.overstock <= t.overstock_max:
        result.add_error(
            f"thresholds.overstock {t.overstock} outside "
            f"[{t.overstock_min}, {t.overstock_max}]"
        )
    if t.low_stock >= t.overstock:
        result.add_error(
            f"thresholds.low_stock ({t.low_stock}) must be below "
            f"thresholds.overstock ({t.overstock})"
        )


def _validate_sync(settings: InventorySettings, result: ConfigValidationResult) -> None:
    if settings.sync.default_frequency not in _SYNC_FREQUENCIES:
        result.add_error(
            f"sync.default_frequency {settings.sync.default_frequency!r} "
            f"not one of {sorted(_SYNC_FREQUENCIES)}"
        )
