"""
RecordStore backend contract and its error taxonomy.

A RecordStore is the remote engine the client talks to. It owns query
execution, consistency and conflict resolution; the client only relies on
the four operations below.
"""

from abc import ABC, abstractmethod

from recordstore.models.record import (
    ModifyResult,
    QueryPage,
    RawRecord,
    RecordID,
    SavePolicy,
)


class BackendError(Exception):
    """
    Base exception for failures reported by the remote record store.

    The client surfaces these unchanged, only recording which client
    operation was running in ``operation``.
    """

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class ZoneNotFoundError(BackendError):
    """The zone addressed by the request does not exist."""

    pass


class RecordNotFoundError(BackendError):
    """The record addressed by the request does not exist."""

    pass


class ConflictError(BackendError):
    """The write conflicted with the server's copy of the record."""

    pass


class AuthenticationError(BackendError):
    """Credentials were missing, invalid or lack permission."""

    pass


class ServiceUnavailableError(BackendError):
    """The service is unreachable, overloaded or rate limiting."""

    pass


class RequestTimeoutError(BackendError):
    """Request exceeded timeout threshold."""

    pass


class ContractViolationError(RuntimeError):
    """
    The backend reported neither a definitive success count nor an error.

    Deliberately not a BackendError: it means the backend broke the contract
    this client depends on and must not be handled like a remote failure.
    """

    def __init__(self, operation: str, detail: str):
        super().__init__(f"{operation}: backend contract violated ({detail})")
        self.operation = operation


class RecordStore(ABC):
    """Backend capability interface used by RecordStoreClient."""

    @abstractmethod
    async def create_zone(self, zone_name: str) -> None:
        """
        Create a zone. Creating a zone that already exists succeeds.

        Raises:
            BackendError: On creation failure
        """

    @abstractmethod
    async def query(
        self, record_type: str, zone_name: str, cursor: str | None = None
    ) -> QueryPage:
        """
        Fetch one page of all records of a type in a zone.

        Args:
            record_type: Record type to scan
            zone_name: Zone to scan
            cursor: Continuation cursor from the previous page (None for the first)

        Returns:
            QueryPage with the batch and the next cursor (None when exhausted)

        Raises:
            BackendError: On query failure
        """

    @abstractmethod
    async def upsert(
        self, record: RawRecord, policy: SavePolicy = SavePolicy.CHANGED_KEYS
    ) -> ModifyResult:
        """
        Insert or update a record keyed by its record_id.

        Raises:
            BackendError: On save failure
        """

    @abstractmethod
    async def delete(self, record_id: RecordID) -> ModifyResult:
        """
        Delete a record by primary key.

        Raises:
            RecordNotFoundError: If the record does not exist
            BackendError: On deletion failure
        """

    async def close(self) -> None:
        """Release backend resources."""
        return None

    async def __aenter__(self) -> "RecordStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
