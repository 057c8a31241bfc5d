"""
Pytest configuration and fixtures.

Provides shared fixtures for:
- In-memory record store and local settings
- Customer record clients wired to them
- Sample customers
- Isolation of global settings between tests
"""

import pytest

from recordstore.backend.memory import InMemoryRecordStore
from recordstore.client import CustomerRecordClient
from recordstore.models.customer import Customer
from recordstore.storage.local_settings import InMemoryLocalSettings


@pytest.fixture(autouse=True)
def _reset_global_settings(monkeypatch, tmp_path):
    """Keep global config and local settings from leaking between tests."""
    import recordstore.config as config_module
    import recordstore.storage.local_settings as local_settings_module

    monkeypatch.setenv("LOCAL_SETTINGS_PATH", str(tmp_path / "local_settings.db"))
    monkeypatch.setattr(config_module, "_settings", None)
    monkeypatch.setattr(local_settings_module, "_local_settings", None)


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    """Empty in-memory store with small pages so paging is exercised."""
    return InMemoryRecordStore(page_size=2)


@pytest.fixture
def local_settings() -> InMemoryLocalSettings:
    return InMemoryLocalSettings()


@pytest.fixture
def customer_client(
    memory_store: InMemoryRecordStore, local_settings: InMemoryLocalSettings
) -> CustomerRecordClient:
    return CustomerRecordClient(store=memory_store, local_settings=local_settings)


@pytest.fixture
def apple() -> Customer:
    return Customer.new(
        customer_name="Apple", contact_name="Tim Cook", contact_email="tim@apple.com"
    )


@pytest.fixture
def google() -> Customer:
    return Customer.new(
        customer_name="Google", contact_name="Sundar Pichai", contact_email="sundar@google.com"
    )
