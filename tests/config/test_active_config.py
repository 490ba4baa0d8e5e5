"""
inventory_config tests: profile loading, environment overrides, validation,
and the bridges that hand settings to the kernel.
"""

from pathlib import Path

import pytest
import yaml

from inventory_config import available_profiles, get_active_config
from inventory_config.bridges import (
    build_thresholds,
    configure_kernel,
    create_schema,
    default_sync_frequency,
    engine_kwargs,
    threshold_kwargs,
)
from inventory_config.loader import ENV_DATABASE_URL, ENV_LOG_LEVEL, compute_checksum
from inventory_config.validator import validate_settings
from sqlalchemy import inspect

from inventory_kernel.db.engine import drop_tables, get_engine, reset_engine
from inventory_kernel.db.triggers import triggers_installed
from inventory_kernel.domain.stock_status import StockThresholds
from inventory_kernel.domain.values import SyncFrequency


def _write_profile(config_dir: Path, name: str, data: dict) -> None:
    (config_dir / f"{name}.yaml").write_text(yaml.safe_dump(data))


def _profile(**sections) -> dict:
    data = {
        "profile": "custom",
        "database": {"url": "sqlite:///custom.db", "install_triggers": False},
        "logging": {"level": "INFO"},
        "thresholds": {"low_stock": 5, "overstock": 100},
        "sync": {"default_frequency": "hourly"},
    }
    for key, value in sections.items():
        data[key] = value
    return data


class TestShippedProfiles:

    def test_profiles_available(self):
        assert {"default", "local"} <= set(available_profiles())

    def test_default_profile(self):
        settings = get_active_config(environ={})

        assert settings.profile == "default"
        assert settings.database.url.startswith("postgresql://")
        assert settings.database.install_triggers is True
        assert (settings.thresholds.low_stock, settings.thresholds.overstock) == (5, 100)
        assert (settings.thresholds.low_stock_min, settings.thresholds.low_stock_max) == (1, 50)
        assert (settings.thresholds.overstock_min, settings.thresholds.overstock_max) == (50, 1000)
        assert settings.sync.default_frequency == "real_time"
        assert len(settings.checksum) == 64

    def test_local_profile(self):
        settings = get_active_config("local", environ={})

        assert settings.database.url.startswith("sqlite:///")
        assert settings.logging.level == "DEBUG"
        assert settings.sync.default_frequency == "manual"

    def test_unknown_profile(self):
        with pytest.raises(FileNotFoundError, match="nope"):
            get_active_config("nope")

    def test_config_trace_logged(self, captured_logs):
        settings = get_active_config("local", environ={})

        traces = [r for r in captured_logs() if r["message"] == "INVENTORY_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["checksum"] == settings.checksum
        assert traces[0]["database_backend"] == "sqlite"


class TestEnvironmentOverrides:

    def test_database_url_and_log_level(self):
        settings = get_active_config(
            "default",
            environ={
                ENV_DATABASE_URL: "postgresql://u:p@db:5432/prod",
                ENV_LOG_LEVEL: "warning",
            },
        )

        assert settings.database.url == "postgresql://u:p@db:5432/prod"
        assert settings.logging.level == "WARNING"

    def test_override_changes_checksum(self):
        plain = get_active_config("default", environ={})
        overridden = get_active_config("default", environ={ENV_DATABASE_URL: "postgresql://other/db"})

        assert plain.checksum != overridden.checksum

    def test_empty_override_ignored(self):
        assert get_active_config("local", environ={ENV_DATABASE_URL: ""}).database.url == (
            "sqlite:///inventory_local.db"
        )


class TestValidation:

    def test_valid_custom_profile(self, tmp_path):
        _write_profile(tmp_path, "custom", _profile())

        settings = get_active_config("custom", config_dir=tmp_path, environ={})

        assert settings.sync.default_frequency == "hourly"

    @pytest.mark.parametrize(
        "section, value, message",
        [
            ("database", {"url": "mysql://x/y"}, "unsupported backend"),
            ("database", {"url": "sqlite:///x.db", "pool_size": 0, "install_triggers": False}, "pool_size"),
            ("logging", {"level": "CHATTY"}, "not a log level"),
            ("thresholds", {"low_stock": 60, "overstock": 100}, "low_stock 60 outside"),
            ("thresholds", {"low_stock": 5, "overstock": 2000}, "overstock 2000 outside"),
            ("thresholds", {"low_stock": 50, "overstock": 50}, "must be below"),
            ("sync", {"default_frequency": "weekly"}, "default_frequency"),
        ],
    )
    def test_invalid_values_reported(self, tmp_path, section, value, message):
        _write_profile(tmp_path, "bad", _profile(**{section: value}))

        with pytest.raises(ValueError, match=message):
            get_active_config("bad", config_dir=tmp_path, environ={})

    def test_all_errors_reported_together(self, tmp_path):
        _write_profile(
            tmp_path,
            "bad",
            _profile(logging={"level": "LOUD"}, sync={"default_frequency": "sometimes"}),
        )

        with pytest.raises(ValueError) as exc_info:
            get_active_config("bad", config_dir=tmp_path, environ={})

        assert "logging.level" in str(exc_info.value)
        assert "sync.default_frequency" in str(exc_info.value)

    def test_missing_database_section(self, tmp_path):
        data = _profile()
        del data["database"]
        _write_profile(tmp_path, "bad", data)

        with pytest.raises(ValueError, match="missing required key"):
            get_active_config("bad", config_dir=tmp_path, environ={})

    def test_wrong_type(self, tmp_path):
        _write_profile(tmp_path, "bad", _profile(thresholds={"low_stock": "five"}))

        with pytest.raises(ValueError, match="low_stock must be an integer"):
            get_active_config("bad", config_dir=tmp_path, environ={})

    def test_top_level_must_be_mapping(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="mapping"):
            get_active_config("bad", config_dir=tmp_path, environ={})

    def test_triggers_on_sqlite_is_a_warning(self, tmp_path, captured_logs):
        _write_profile(tmp_path, "warn", _profile(database={"url": "sqlite:///w.db"}))

        settings = get_active_config("warn", config_dir=tmp_path, environ={})

        assert validate_settings(settings).warnings == [
            "database.install_triggers has no effect on SQLite"
        ]
        assert any(r["message"] == "config_warning" for r in captured_logs())

    def test_checksum_is_order_independent(self):
        assert compute_checksum({"a": 1, "b": {"c": 2}}) == compute_checksum({"b": {"c": 2}, "a": 1})


class TestBridges:

    def test_thresholds(self):
        settings = get_active_config(environ={})

        thresholds = build_thresholds(settings)

        assert thresholds == StockThresholds(low_stock=5, overstock=100)
        assert threshold_kwargs(thresholds) == {"low_threshold": 5, "overstock_threshold": 100}

    def test_default_sync_frequency(self):
        assert default_sync_frequency(get_active_config("local", environ={})) is SyncFrequency.MANUAL

    def test_engine_kwargs(self):
        kwargs = engine_kwargs(get_active_config(environ={}))

        assert kwargs["database_url"].startswith("postgresql://")
        assert kwargs["pool_size"] == 20
        assert kwargs["max_overflow"] == 10

    def test_configure_kernel_initializes_engine(self, tmp_path):
        db_url = f"sqlite:///{tmp_path / 'bridged.db'}"
        settings = get_active_config("local", environ={ENV_DATABASE_URL: db_url})

        try:
            engine = configure_kernel(settings)
            assert engine is get_engine()
            assert engine.dialect.name == "sqlite"
        finally:
            reset_engine()

    def test_create_schema_on_sqlite(self, tmp_path, captured_logs):
        db_url = f"sqlite:///{tmp_path / 'schema.db'}"
        settings = get_active_config("local", environ={ENV_DATABASE_URL: db_url})

        try:
            engine = configure_kernel(settings)
            create_schema(settings)
            assert "location_inventory" in inspect(engine).get_table_names()
        finally:
            reset_engine()

        created = [r for r in captured_logs() if r["message"] == "schema_created"]
        assert created[0]["triggers"] is False

    @pytest.mark.postgres
    @pytest.mark.parametrize("install", [True, False])
    def test_create_schema_honours_install_triggers(self, tmp_path, database_url, install):
        _write_profile(
            tmp_path,
            "pg",
            _profile(database={"url": database_url, "install_triggers": install}),
        )
        settings = get_active_config("pg", config_dir=tmp_path, environ={})

        engine = configure_kernel(settings)
        try:
            drop_tables()
            create_schema(settings)
            assert triggers_installed(engine) is install
        finally:
            drop_tables()
            reset_engine()
