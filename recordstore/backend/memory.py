"""
In-process RecordStore.

Honors the same contract as the remote service: zones must exist before use,
queries are paged with opaque cursors, and upserts follow the requested save
policy. Used for local development and as the backend fake in tests.
"""

import asyncio
import logging
import uuid
from collections import Counter, OrderedDict

from recordstore.backend.base import (
    BackendError,
    ConflictError,
    RecordNotFoundError,
    RecordStore,
    ZoneNotFoundError,
)
from recordstore.models.record import (
    ModifyResult,
    QueryPage,
    RawRecord,
    RecordID,
    SavePolicy,
)

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """
    Dict-backed record store.

    Records keep insertion order; updates do not move a record. A query takes
    a snapshot of the matching record names on its first page so later pages
    of the same scan neither skip nor repeat records when the zone changes.
    At most max_snapshots scans are kept open; starting another expires the
    oldest, whose cursors are then rejected.
    """

    def __init__(
        self, page_size: int = 100, latency_seconds: float = 0.0, max_snapshots: int = 64
    ):
        """
        Args:
            page_size: Records returned per query page
            latency_seconds: Simulated round-trip delay per request
            max_snapshots: Open scans kept before the oldest is expired
        """
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        if max_snapshots < 1:
            raise ValueError(f"max_snapshots must be >= 1, got {max_snapshots}")
        self.page_size = page_size
        self.latency_seconds = latency_seconds
        self.max_snapshots = max_snapshots

        self._zones: dict[str, dict[str, RawRecord]] = {}
        self._snapshots: OrderedDict[str, list[RawRecord]] = OrderedDict()
        self.request_counts: Counter[str] = Counter()

    async def _round_trip(self, operation: str) -> None:
        self.request_counts[operation] += 1
        await asyncio.sleep(self.latency_seconds)

    def _zone(self, zone_name: str) -> dict[str, RawRecord]:
        try:
            return self._zones[zone_name]
        except KeyError:
            raise ZoneNotFoundError(f"Zone not found: {zone_name}") from None

    def zone_exists(self, zone_name: str) -> bool:
        return zone_name in self._zones

    def drop_zone(self, zone_name: str) -> None:
        """Remove a zone and its records, as another device might."""
        self._zones.pop(zone_name, None)

    async def create_zone(self, zone_name: str) -> None:
        await self._round_trip("create_zone")
        if zone_name in self._zones:
            logger.debug(f"Zone {zone_name} already exists")
            return
        self._zones[zone_name] = {}
        logger.info(f"Created zone {zone_name}")

    async def query(
        self, record_type: str, zone_name: str, cursor: str | None = None
    ) -> QueryPage:
        await self._round_trip("query")
        zone = self._zone(zone_name)

        if cursor is None:
            snapshot_id = uuid.uuid4().hex
            matching = [
                r.model_copy(deep=True) for r in zone.values() if r.record_type == record_type
            ]
            self._snapshots[snapshot_id] = matching
            while len(self._snapshots) > self.max_snapshots:
                expired, _ = self._snapshots.popitem(last=False)
                logger.debug(f"Expired query snapshot {expired}")
            offset = 0
        else:
            snapshot_id, _, raw_offset = cursor.partition(":")
            if snapshot_id not in self._snapshots or not raw_offset.isdigit():
                raise BackendError(f"Invalid or expired cursor: {cursor}")
            matching = self._snapshots[snapshot_id]
            offset = int(raw_offset)

        end = offset + self.page_size
        batch = matching[offset:end]
        if end < len(matching):
            next_cursor = f"{snapshot_id}:{end}"
        else:
            next_cursor = None
            del self._snapshots[snapshot_id]
        return QueryPage(records=batch, cursor=next_cursor)

    async def upsert(
        self, record: RawRecord, policy: SavePolicy = SavePolicy.CHANGED_KEYS
    ) -> ModifyResult:
        await self._round_trip("upsert")
        zone = self._zone(record.record_id.zone_name)
        name = record.record_id.record_name
        existing = zone.get(name)

        if existing is not None and existing.record_type != record.record_type:
            raise ConflictError(
                f"Record {record.record_id} has type {existing.record_type}, "
                f"not {record.record_type}"
            )
        if existing is not None and policy == SavePolicy.IF_SERVER_UNCHANGED:
            raise ConflictError(f"Server record changed: {record.record_id}")

        if existing is None or policy == SavePolicy.ALL_KEYS:
            fields = {}
        else:
            fields = dict(existing.fields)
        for key, value in record.fields.items():
            if value is None:
                fields.pop(key, None)
            else:
                fields[key] = value

        zone[name] = RawRecord(
            record_type=record.record_type, record_id=record.record_id, fields=fields
        )
        return ModifyResult(saved_count=1)

    async def delete(self, record_id: RecordID) -> ModifyResult:
        await self._round_trip("delete")
        zone = self._zone(record_id.zone_name)
        if zone.pop(record_id.record_name, None) is None:
            raise RecordNotFoundError(f"Record not found: {record_id}")
        return ModifyResult(deleted_count=1)
