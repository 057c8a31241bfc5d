"""
Unit tests for configuration loading and validation.
"""

import logging

import pytest
from pydantic import ValidationError

from recordstore.config import (
    LoggingConfig,
    RecordStoreConfig,
    Settings,
    ZoneConfig,
    get_settings,
)


def test_defaults():
    settings = Settings()

    assert settings.zone.zone_name == "customerRecordZone"
    assert settings.zone.record_type == "Customer"
    assert settings.zone.created_flag_key == "customerRecordZoneCreatedKey"
    assert settings.record_store.backend == "memory"
    assert settings.record_store.database == "private"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("RECORDSTORE_BACKEND", "http")
    monkeypatch.setenv("RECORDSTORE_BASE_URL", "https://records.example.com/v1/")
    monkeypatch.setenv("RECORDSTORE_DATABASE", "shared")
    monkeypatch.setenv("ZONE_ZONE_NAME", "stagingZone")

    settings = Settings()

    assert settings.record_store.backend == "http"
    assert settings.record_store.database_url == "https://records.example.com/v1/shared"
    assert settings.zone.zone_name == "stagingZone"


def test_base_url_must_be_http():
    with pytest.raises(ValidationError):
        RecordStoreConfig(base_url="ftp://records.example.com")


def test_results_limit_bounds():
    with pytest.raises(ValidationError):
        RecordStoreConfig(results_limit=0)


def test_empty_zone_name_rejected():
    with pytest.raises(ValidationError):
        ZoneConfig(zone_name="")


def test_http_without_api_key_warns(caplog):
    settings = Settings(record_store=RecordStoreConfig(backend="http", api_key=""))

    with caplog.at_level(logging.WARNING):
        settings.validate_configuration()

    assert any("RECORDSTORE_API_KEY not set" in r.message for r in caplog.records)


def test_memory_backend_in_production_warns(caplog):
    settings = Settings(
        record_store=RecordStoreConfig(backend="memory"),
        logging=LoggingConfig(environment="production"),
    )

    with caplog.at_level(logging.WARNING):
        settings.validate_configuration()

    assert any("not durable" in r.message for r in caplog.records)


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
