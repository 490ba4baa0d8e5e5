"""
Configuration Loader (``inventory_config.loader``).

Responsibility
--------------
Loads a profile YAML file and parses it into typed
``inventory_config.schema`` dataclasses.  Internal tooling: runtime callers
use ``inventory_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Wrongly typed values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import (
    DatabaseSettings,
    InventorySettings,
    LoggingSettings,
    SyncSettings,
    ThresholdSettings,
)

# Environment variables that override YAML values
ENV_DATABASE_URL = "INVENTORY_DATABASE_URL"
ENV_LOG_LEVEL = "INVENTORY_LOG_LEVEL"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def _int(data: Mapping[str, Any], key: str, default: int) -> int:
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _range(data: Mapping[str, Any], key: str, default: tuple[int, int]) -> tuple[int, int]:
    value = data.get(key, list(default))
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or not all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    ):
        raise ValueError(f"{key} must be a [min, max] pair of integers, got {value!r}")
    return value[0], value[1]


def parse_database(data: Mapping[str, Any]) -> DatabaseSettings:
    return DatabaseSettings(
        url=str(data["url"]),
        echo=_bool(data, "echo", False),
        pool_size=_int(data, "pool_size", 20),
        max_overflow=_int(data, "max_overflow", 10),
        pool_timeout=_int(data, "pool_timeout", 30),
        pool_recycle=_int(data, "pool_recycle", 1800),
        install_triggers=_bool(data, "install_triggers", True),
    )


def parse_logging(data: Mapping[str, Any]) -> LoggingSettings:
    return LoggingSettings(level=str(data.get("level", "INFO")).upper())


def parse_thresholds(data: Mapping[str, Any]) -> ThresholdSettings:
    low_min, low_max = _range(data, "low_stock_range", (1, 50))
    over_min, over_max = _range(data, "overstock_range", (50, 1000))
    return ThresholdSettings(
        low_stock=_int(data, "low_stock", 5),
        overstock=_int(data, "overstock", 100),
        low_stock_min=low_min,
        low_stock_max=low_max,
        overstock_min=over_min,
        overstock_max=over_max,
    )


def parse_sync(data: Mapping[str, Any]) -> SyncSettings:
    return SyncSettings(default_frequency=str(data.get("default_frequency", "real_time")))


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of ``data`` with environment overrides applied."""
    merged = {key: dict(value) if isinstance(value, dict) else value for key, value in data.items()}
    if environ.get(ENV_DATABASE_URL):
        merged.setdefault("database", {})["url"] = environ[ENV_DATABASE_URL]
    if environ.get(ENV_LOG_LEVEL):
        merged.setdefault("logging", {})["level"] = environ[ENV_LOG_LEVEL]
    return merged


def parse_settings(data: Mapping[str, Any], profile: str) -> InventorySettings:
    """
    Parse a whole profile document.

    The checksum covers the effective document, overrides included.
    """
    return InventorySettings(
        profile=str(data.get("profile", profile)),
        database=parse_database(data["database"]),
        logging=parse_logging(data.get("logging") or {}),
        thresholds=parse_thresholds(data.get("thresholds") or {}),
        sync=parse_sync(data.get("sync") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: Mapping[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
