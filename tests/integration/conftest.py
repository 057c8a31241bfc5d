"""
Integration test fixtures for a live record service.

These tests talk to a real HTTP record service and are skipped unless one is
configured:

    export RECORDSTORE_BASE_URL=https://records.example.com/v1
    export RECORDSTORE_API_KEY=...
    pytest tests/integration/ -v

WARNING: the tests delete every Customer record in the configured zone.
"""

import os

import pytest

from recordstore.client import CustomerRecordClient, create_record_store
from recordstore.config import RecordStoreConfig, ZoneConfig
from recordstore.storage.local_settings import SQLiteLocalSettings

# Seconds to wait between writes and reads (the service is eventually consistent)
CONSISTENCY_PAUSE_SECONDS = float(os.environ.get("RECORDSTORE_TEST_PAUSE", "5"))


@pytest.fixture
def consistency_pause() -> float:
    return CONSISTENCY_PAUSE_SECONDS


@pytest.fixture
def skip_if_no_service():
    """Skip test if no live record service is configured."""
    if not os.environ.get("RECORDSTORE_BASE_URL"):
        pytest.skip("RECORDSTORE_BASE_URL not set; no live record service configured")


@pytest.fixture
async def live_client(skip_if_no_service, tmp_path):
    """Client against the live service with fresh local settings."""
    config = RecordStoreConfig(backend="http")
    zone = ZoneConfig()
    local_settings = SQLiteLocalSettings(str(tmp_path / "local_settings.db"))

    client = CustomerRecordClient(
        store=create_record_store(config),
        local_settings=local_settings,
        zone_name=zone.zone_name,
        record_type=zone.record_type,
        created_flag_key=zone.created_flag_key,
    )
    yield client
    await client.close()
    local_settings.close()
