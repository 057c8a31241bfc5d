"""
Record store client with lazy zone bootstrap.

RecordStoreClient gives create/update, delete and full-list access to one
record type inside one zone of a remote RecordStore. Before any operation it
makes sure the zone exists; once created, the fact is remembered in local
settings and creation is never requested again from this installation.

The client does no recovery of its own: backend errors reach the caller as
the same exception object, tagged with the failing operation.
"""

import asyncio
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, Protocol, TypeVar

from recordstore.backend.base import BackendError, ContractViolationError, RecordStore
from recordstore.config import RecordStoreConfig, Settings, get_settings
from recordstore.models.customer import Customer, CustomerCodec
from recordstore.models.record import RawRecord, RecordID, SavePolicy
from recordstore.observability.logging import OperationContext, get_logger
from recordstore.observability.metrics import (
    track_query_page,
    track_record_store_operation,
    track_zone_creation,
)
from recordstore.storage.local_settings import (
    InMemoryLocalSettings,
    LocalSettings,
    get_local_settings,
)

logger = get_logger(__name__)

T = TypeVar("T")


class RecordCodec(Protocol[T]):
    """Maps a typed entity to and from the backend's untyped record."""

    zone_name: str
    record_type: str

    def record_id(self, entity: T) -> RecordID: ...

    def encode(self, entity: T) -> RawRecord: ...

    def decode(self, record: RawRecord) -> T: ...


def _expect_one(operation: str, count: int | None) -> None:
    """A save/delete that reports no error must report exactly one record."""
    if count != 1:
        logger.critical(
            "Backend reported neither success nor error", operation=operation, count=count
        )
        raise ContractViolationError(operation, f"expected count 1, got {count}")


class RecordStoreClient(Generic[T]):
    """
    CRUD and full-scan access to one record type within one zone.

    Each public operation is a coroutine that completes once, with a result or
    an exception. Operations issued concurrently are not ordered relative to
    each other; await them in sequence when order matters.
    """

    def __init__(
        self,
        store: RecordStore,
        local_settings: LocalSettings,
        codec: RecordCodec[T],
        created_flag_key: str,
        save_policy: SavePolicy = SavePolicy.CHANGED_KEYS,
    ):
        """
        Args:
            store: Backend the records live in
            local_settings: Durable settings holding the zone-created flag
            codec: Entity <-> record mapping (also fixes zone and record type)
            created_flag_key: Settings key of the zone-created flag
            save_policy: Merge policy for saves
        """
        self.store = store
        self.local_settings = local_settings
        self.codec = codec
        self.created_flag_key = created_flag_key
        self.save_policy = save_policy

        self._zone_lock = asyncio.Lock()

    @property
    def zone_name(self) -> str:
        return self.codec.zone_name

    @property
    def record_type(self) -> str:
        return self.codec.record_type

    async def close(self) -> None:
        """Close the backend."""
        await self.store.close()

    async def __aenter__(self) -> "RecordStoreClient[T]":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @contextmanager
    def _operation(self, operation: str, **context) -> Iterator[None]:
        """Log, time and count one operation; tag backend errors with its name."""
        start = time.perf_counter()
        success = False
        try:
            with OperationContext(operation, zone=self.zone_name, **context):
                yield
            success = True
        except BackendError as e:
            if e.operation is None:
                e.operation = operation
                e.add_note(f"record store operation: {operation}")
            raise
        finally:
            track_record_store_operation(operation, success, time.perf_counter() - start)

    # ------------------------------------------------------------------
    # Zone management
    # ------------------------------------------------------------------

    @property
    def zone_known_to_exist(self) -> bool:
        return self.local_settings.get_bool(self.created_flag_key)

    async def ensure_zone_exists(self) -> None:
        """
        Create the zone unless this installation already did.

        The flag is only set after the backend confirms creation, so a failed
        attempt is retried by the next operation. The flag is never checked
        against the backend: a zone deleted elsewhere is not recreated until
        reset_zone_flag() is called.

        Raises:
            BackendError: If zone creation fails
            ContractViolationError: If the backend does not confirm the zone
        """
        if self.zone_known_to_exist:
            return

        async with self._zone_lock:
            if self.zone_known_to_exist:
                return

            with self._operation("ensure_zone"):
                try:
                    await self.store.create_zone(self.zone_name)
                except (BackendError, ContractViolationError):
                    track_zone_creation(self.zone_name, success=False)
                    raise
                track_zone_creation(self.zone_name, success=True)
                self.local_settings.set_bool(self.created_flag_key, True)
                logger.info("Zone created", zone=self.zone_name)

    def reset_zone_flag(self) -> None:
        """Forget that the zone was created; the next operation creates it again."""
        self.local_settings.remove(self.created_flag_key)
        logger.info("Zone flag reset", zone=self.zone_name, key=self.created_flag_key)

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    async def list_all(self) -> list[T]:
        """
        Fetch every record of the type, following cursors until exhausted.

        Records come back in backend order. If any page fails, the records
        gathered so far are dropped and the error is raised.

        Returns:
            All decoded records

        Raises:
            BackendError: On zone creation or query failure
        """
        await self.ensure_zone_exists()

        with self._operation("list", record_type=self.record_type):
            records: list[T] = []
            cursor: str | None = None
            pages = 0
            while True:
                page = await self.store.query(self.record_type, self.zone_name, cursor)
                pages += 1
                track_query_page(self.record_type)
                records.extend(self.codec.decode(r) for r in page.records)
                if page.cursor is None:
                    break
                cursor = page.cursor

            logger.debug("Listed records", count=len(records), pages=pages)
            return records

    async def save(self, entity: T) -> None:
        """
        Insert or update one record keyed by the entity's primary key.

        Raises:
            BackendError: On zone creation or save failure
            ContractViolationError: If the backend reports no error but not one saved record
        """
        await self.ensure_zone_exists()

        record = self.codec.encode(entity)
        with self._operation("save", record_name=record.record_id.record_name):
            result = await self.store.upsert(record, self.save_policy)
            _expect_one("save", result.saved_count)

    async def delete(self, entity: T) -> None:
        """
        Delete one record by the entity's primary key.

        Deleting a record that does not exist raises the backend's error.

        Raises:
            BackendError: On zone creation or delete failure
            ContractViolationError: If the backend reports no error but not one deleted record
        """
        await self.ensure_zone_exists()

        record_id = self.codec.record_id(entity)
        with self._operation("delete", record_name=record_id.record_name):
            result = await self.store.delete(record_id)
            _expect_one("delete", result.deleted_count)

    async def delete_all(self) -> int:
        """
        Delete every record of the type, one at a time.

        Returns:
            Number of records deleted
        """
        entities = await self.list_all()
        for entity in entities:
            await self.delete(entity)
        logger.info("Deleted all records", count=len(entities), record_type=self.record_type)
        return len(entities)


class CustomerRecordClient(RecordStoreClient[Customer]):
    """RecordStoreClient bound to Customer records."""

    def __init__(
        self,
        store: RecordStore,
        local_settings: LocalSettings,
        zone_name: str = "customerRecordZone",
        record_type: str = "Customer",
        created_flag_key: str = "customerRecordZoneCreatedKey",
    ):
        super().__init__(
            store=store,
            local_settings=local_settings,
            codec=CustomerCodec(zone_name=zone_name, record_type=record_type),
            created_flag_key=created_flag_key,
        )


def create_record_store(config: RecordStoreConfig) -> RecordStore:
    """
    Build the configured backend.

    Args:
        config: Record store configuration

    Returns:
        RecordStore: HTTP or in-memory backend
    """
    if config.backend == "http":
        from recordstore.backend.http import HTTPRecordStore

        return HTTPRecordStore(
            base_url=config.database_url,
            api_key=config.api_key,
            timeout_seconds=config.timeout_seconds,
            max_retries=config.max_retries,
            retry_backoff_seconds=config.retry_backoff_seconds,
            results_limit=config.results_limit,
        )

    from recordstore.backend.memory import InMemoryRecordStore

    return InMemoryRecordStore(page_size=config.results_limit or 100)


def create_customer_client(
    settings: Settings | None = None,
    store: RecordStore | None = None,
    local_settings: LocalSettings | None = None,
) -> CustomerRecordClient:
    """
    Build a CustomerRecordClient from configuration.

    Args:
        settings: Configuration (global settings if None)
        store: Backend override (built from settings if None)
        local_settings: Settings storage override (if None, global SQLite
            settings; in-memory settings when the in-memory backend is built here)
    """
    settings = settings or get_settings()
    if local_settings is None:
        if store is None and settings.record_store.backend == "memory":
            # The zone flag must not outlive the store it describes
            local_settings = InMemoryLocalSettings()
        else:
            local_settings = get_local_settings()
    return CustomerRecordClient(
        store=store or create_record_store(settings.record_store),
        local_settings=local_settings,
        zone_name=settings.zone.zone_name,
        record_type=settings.zone.record_type,
        created_flag_key=settings.zone.created_flag_key,
    )
