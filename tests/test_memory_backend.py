"""
Tests for the in-memory RecordStore.

It stands in for the remote service in every other test, so its contract
(zones, paging, save policies, delete semantics) is pinned down here.
"""

import pytest

from recordstore.backend.base import (
    BackendError,
    ConflictError,
    RecordNotFoundError,
    ZoneNotFoundError,
)
from recordstore.backend.memory import InMemoryRecordStore
from recordstore.models.record import RawRecord, RecordID, SavePolicy

ZONE = "customerRecordZone"


def make_record(name: str, record_type: str = "Customer", **fields) -> RawRecord:
    return RawRecord(
        record_type=record_type,
        record_id=RecordID(zone_name=ZONE, record_name=name),
        fields=fields,
    )


async def scan(store: InMemoryRecordStore, record_type: str = "Customer") -> list[RawRecord]:
    records = []
    cursor = None
    while True:
        page = await store.query(record_type, ZONE, cursor)
        records.extend(page.records)
        if page.cursor is None:
            return records
        cursor = page.cursor


@pytest.fixture
async def store() -> InMemoryRecordStore:
    store = InMemoryRecordStore(page_size=2)
    await store.create_zone(ZONE)
    return store


class TestZones:
    @pytest.mark.asyncio
    async def test_operations_require_zone(self):
        store = InMemoryRecordStore()

        with pytest.raises(ZoneNotFoundError):
            await store.query("Customer", ZONE)
        with pytest.raises(ZoneNotFoundError):
            await store.upsert(make_record("a"))
        with pytest.raises(ZoneNotFoundError):
            await store.delete(RecordID(zone_name=ZONE, record_name="a"))

    @pytest.mark.asyncio
    async def test_create_zone_is_idempotent(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a", customerName="Apple"))

        await store.create_zone(ZONE)

        assert len(await scan(store)) == 1
        assert store.request_counts["create_zone"] == 2

    @pytest.mark.asyncio
    async def test_drop_zone(self, store: InMemoryRecordStore):
        store.drop_zone(ZONE)

        assert not store.zone_exists(ZONE)
        with pytest.raises(ZoneNotFoundError):
            await store.query("Customer", ZONE)


class TestPaging:
    @pytest.mark.asyncio
    async def test_pages_until_cursor_exhausted(self, store: InMemoryRecordStore):
        for i in range(5):
            await store.upsert(make_record(f"r{i}"))

        first = await store.query("Customer", ZONE)
        assert [r.record_id.record_name for r in first.records] == ["r0", "r1"]
        assert first.has_more

        records = await scan(store)
        assert [r.record_id.record_name for r in records] == ["r0", "r1", "r2", "r3", "r4"]

    @pytest.mark.asyncio
    async def test_exact_multiple_of_page_size_ends_without_cursor(
        self, store: InMemoryRecordStore
    ):
        for i in range(4):
            await store.upsert(make_record(f"r{i}"))

        first = await store.query("Customer", ZONE)
        second = await store.query("Customer", ZONE, first.cursor)

        assert len(second.records) == 2
        assert second.cursor is None

    @pytest.mark.asyncio
    async def test_empty_zone_single_empty_page(self, store: InMemoryRecordStore):
        page = await store.query("Customer", ZONE)

        assert page.records == []
        assert page.cursor is None

    @pytest.mark.asyncio
    async def test_scan_is_stable_under_concurrent_writes(self, store: InMemoryRecordStore):
        for i in range(4):
            await store.upsert(make_record(f"r{i}"))

        first = await store.query("Customer", ZONE)
        await store.delete(RecordID(zone_name=ZONE, record_name="r0"))
        await store.upsert(make_record("late"))
        second = await store.query("Customer", ZONE, first.cursor)

        names = [r.record_id.record_name for r in first.records + second.records]
        assert names == ["r0", "r1", "r2", "r3"]

    @pytest.mark.asyncio
    async def test_only_requested_type_returned(self, store: InMemoryRecordStore):
        await store.upsert(make_record("c1"))
        await store.upsert(make_record("o1", record_type="Order"))

        records = await scan(store)

        assert [r.record_id.record_name for r in records] == ["c1"]

    @pytest.mark.asyncio
    async def test_unknown_cursor_rejected(self, store: InMemoryRecordStore):
        with pytest.raises(BackendError, match="cursor"):
            await store.query("Customer", ZONE, "bogus:2")

    @pytest.mark.asyncio
    async def test_abandoned_scans_expire_oldest_first(self):
        store = InMemoryRecordStore(page_size=1, max_snapshots=2)
        await store.create_zone(ZONE)
        for name in ("a", "b", "c"):
            await store.upsert(make_record(name))

        first, second, third = [await store.query("Customer", ZONE) for _ in range(3)]

        assert len(store._snapshots) == 2
        with pytest.raises(BackendError, match="expired cursor"):
            await store.query("Customer", ZONE, first.cursor)
        page = await store.query("Customer", ZONE, second.cursor)
        assert [r.record_id.record_name for r in page.records] == ["b"]
        page = await store.query("Customer", ZONE, third.cursor)
        assert [r.record_id.record_name for r in page.records] == ["b"]

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValueError):
            InMemoryRecordStore(page_size=0)
        with pytest.raises(ValueError):
            InMemoryRecordStore(max_snapshots=0)


class TestSavePolicies:
    @pytest.mark.asyncio
    async def test_changed_keys_merges_fields(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a", customerName="Apple", contactName="Tim Cook"))

        result = await store.upsert(make_record("a", customerName="iApple"))

        assert result.saved_count == 1
        [record] = await scan(store)
        assert record.fields == {"customerName": "iApple", "contactName": "Tim Cook"}

    @pytest.mark.asyncio
    async def test_changed_keys_none_clears_field(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a", customerName="Apple", contactName="Tim Cook"))

        await store.upsert(make_record("a", contactName=None))

        [record] = await scan(store)
        assert record.fields == {"customerName": "Apple"}

    @pytest.mark.asyncio
    async def test_all_keys_replaces_fields(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a", customerName="Apple", contactName="Tim Cook"))

        await store.upsert(make_record("a", customerName="iApple"), SavePolicy.ALL_KEYS)

        [record] = await scan(store)
        assert record.fields == {"customerName": "iApple"}

    @pytest.mark.asyncio
    async def test_if_server_unchanged_rejects_existing(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a"), SavePolicy.IF_SERVER_UNCHANGED)

        with pytest.raises(ConflictError):
            await store.upsert(make_record("a"), SavePolicy.IF_SERVER_UNCHANGED)

    @pytest.mark.asyncio
    async def test_type_mismatch_conflicts(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a"))

        with pytest.raises(ConflictError):
            await store.upsert(make_record("a", record_type="Order"))

    @pytest.mark.asyncio
    async def test_update_keeps_position(self, store: InMemoryRecordStore):
        for name in ("a", "b", "c"):
            await store.upsert(make_record(name))

        await store.upsert(make_record("a", customerName="changed"))

        assert [r.record_id.record_name for r in await scan(store)] == ["a", "b", "c"]


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_existing(self, store: InMemoryRecordStore):
        await store.upsert(make_record("a"))

        result = await store.delete(RecordID(zone_name=ZONE, record_name="a"))

        assert result.deleted_count == 1
        assert await scan(store) == []

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, store: InMemoryRecordStore):
        with pytest.raises(RecordNotFoundError):
            await store.delete(RecordID(zone_name=ZONE, record_name="missing"))
