"""
inventory_config -- single public entrypoint for inventory settings.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration
    files or environment variables.  Returns a frozen ``InventorySettings``.

Architecture position:
    Configuration sits above ``inventory_kernel``.  The kernel MUST NEVER
    import from ``inventory_config``; ``inventory_config.bridges`` turns
    settings into kernel inputs (engine arguments, thresholds).

Failure modes:
    - ``FileNotFoundError`` -- no ``<profile>.yaml`` in the sets directory.
    - ``ValueError`` -- parse or validation failures (all errors listed).

Audit relevance:
    Every successful call emits an ``INVENTORY_CONFIG_TRACE`` log entry with
    the profile, checksum, database backend and thresholds in force.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from inventory_config.loader import apply_env_overrides, load_yaml_file, parse_settings
from inventory_config.schema import InventorySettings
from inventory_config.validator import validate_settings
from inventory_kernel.logging_config import get_logger

_logger = get_logger("config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"


def available_profiles(config_dir: Path | None = None) -> list[str]:
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    return sorted(path.stem for path in sets_dir.glob("*.yaml"))


def get_active_config(
    profile: str = "default",
    config_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InventorySettings:
    """The ONLY public configuration entrypoint.

    Args:
        profile: Name of a ``<profile>.yaml`` file in the sets directory.
        config_dir: Override path to the sets directory.
        environ: Environment used for overrides; defaults to ``os.environ``.

    Raises:
        FileNotFoundError: If the profile file does not exist.
        ValueError: If parsing or validation fails.
    """
    sets_dir = config_dir or _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{profile}.yaml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Unknown configuration profile {profile!r} in {sets_dir} "
            f"(available: {available_profiles(sets_dir)})"
        )

    data = apply_env_overrides(load_yaml_file(path), os.environ if environ is None else environ)
    try:
        settings = parse_settings(data, profile)
    except KeyError as exc:
        raise ValueError(f"Configuration {path} is missing required key {exc}") from exc

    validation = validate_settings(settings)
    if not validation.is_valid:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in validation.errors)
        )
    for warning in validation.warnings:
        _logger.warning("config_warning", extra={"profile": profile, "warning": warning})

    _logger.info(
        "INVENTORY_CONFIG_TRACE",
        extra={
            "trace_type": "INVENTORY_CONFIG_TRACE",
            "profile": settings.profile,
            "checksum": settings.checksum,
            "database_backend": settings.database.url.split(":", 1)[0],
            "low_stock": settings.thresholds.low_stock,
            "overstock": settings.thresholds.overstock,
            "default_sync_frequency": settings.sync.default_frequency,
        },
    )
    return settings


__all__ = [
    "InventorySettings",
    "available_profiles",
    "get_active_config",
]
