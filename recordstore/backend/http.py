"""
HTTP+JSON client for a remote record service.

Provides the RecordStore interface over a document-style REST API with:
- Bearer token authentication
- Retry with exponential backoff for transient failures
- Mapping of HTTP status codes onto the BackendError taxonomy
"""

import logging
from typing import Any

import httpx

from recordstore.backend.base import (
    AuthenticationError,
    BackendError,
    ConflictError,
    ContractViolationError,
    RecordNotFoundError,
    RecordStore,
    RequestTimeoutError,
    ServiceUnavailableError,
    ZoneNotFoundError,
)
from recordstore.models.record import (
    ModifyResult,
    QueryPage,
    RawRecord,
    RecordID,
    SavePolicy,
)
from recordstore.resilience.retry import with_retry

logger = logging.getLogger(__name__)


def record_to_json(record: RawRecord) -> dict[str, Any]:
    return {
        "recordName": record.record_id.record_name,
        "recordType": record.record_type,
        "fields": record.fields,
    }


def record_from_json(payload: dict[str, Any], zone_name: str) -> RawRecord:
    try:
        return RawRecord(
            record_type=payload["recordType"],
            record_id=RecordID(zone_name=zone_name, record_name=payload["recordName"]),
            fields=payload.get("fields") or {},
        )
    except (KeyError, TypeError) as e:
        raise BackendError(f"Malformed record in response: {e}") from e


class HTTPRecordStore(RecordStore):
    """
    Async HTTP client for a remote record service.

    One instance wraps one httpx.AsyncClient; use it as an async context
    manager or call close() when done.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 30.0,
        max_retries: int = 3,
        retry_backoff_seconds: float = 0.5,
        results_limit: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: Service URL including the database scope
            api_key: Bearer token (empty = unauthenticated)
            timeout_seconds: Request timeout
            max_retries: Maximum attempts for transient failures
            retry_backoff_seconds: Initial backoff for exponential retry
            results_limit: Records requested per query page (None = server default)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.max_retries = max_retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.results_limit = results_limit

        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()
        logger.info(f"Closed connection to {self.base_url}")

    async def _send(
        self, method: str, path: str, operation: str, body: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Issue one request, retrying transient failures.

        Returns:
            Decoded JSON body (empty dict for empty bodies)

        Raises:
            BackendError: On persistent failure
        """
        send = with_retry(
            max_attempts=self.max_retries,
            initial_wait=self.retry_backoff_seconds,
            exceptions=(ServiceUnavailableError,),
        )(self._send_once)
        return await send(method, path, operation, body)

    async def _send_once(
        self, method: str, path: str, operation: str, body: dict[str, Any] | None
    ) -> dict[str, Any]:
        try:
            response = await self._client.request(method, path, json=body)
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"{operation} exceeded {self.timeout_seconds}s timeout"
            ) from e
        except httpx.TransportError as e:
            raise ServiceUnavailableError(f"{operation} failed: {e}") from e

        if response.is_success:
            if not response.content:
                return {}
            try:
                payload = response.json()
            except ValueError as e:
                raise BackendError(f"{operation} returned invalid JSON") from e
            if not isinstance(payload, dict):
                raise BackendError(f"{operation} returned a non-object body")
            return payload

        raise self._error_for(response, operation)

    @staticmethod
    def _error_for(response: httpx.Response, operation: str) -> BackendError:
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if not isinstance(payload, dict):
            payload = {}
        reason = payload.get("reason", "")
        detail = payload.get("message") or response.reason_phrase
        message = f"{operation} failed ({response.status_code}): {detail}"

        status = response.status_code
        if status == 404:
            if reason == "zoneNotFound":
                return ZoneNotFoundError(message)
            return RecordNotFoundError(message)
        if status in (401, 403):
            return AuthenticationError(message)
        if status in (409, 412):
            return ConflictError(message)
        if status == 429 or status >= 500:
            return ServiceUnavailableError(message)
        return BackendError(message)

    async def create_zone(self, zone_name: str) -> None:
        """
        Raises:
            BackendError: On request failure
            ContractViolationError: If a success response does not name the zone
        """
        try:
            payload = await self._send("PUT", f"/zones/{zone_name}", "CreateZone")
        except ConflictError:
            logger.debug(f"Zone {zone_name} already exists")
            return
        if payload.get("zoneName") != zone_name:
            logger.critical(f"CreateZone for {zone_name} reported neither the zone nor an error")
            raise ContractViolationError(
                "create_zone", f"expected zoneName {zone_name!r}, got {payload.get('zoneName')!r}"
            )

    async def query(
        self, record_type: str, zone_name: str, cursor: str | None = None
    ) -> QueryPage:
        body: dict[str, Any] = {"recordType": record_type}
        if cursor is not None:
            body["cursor"] = cursor
        if self.results_limit is not None:
            body["resultsLimit"] = self.results_limit

        payload = await self._send("POST", f"/zones/{zone_name}/records/query", "Query", body)
        records = [record_from_json(r, zone_name) for r in payload.get("records") or []]
        return QueryPage(records=records, cursor=payload.get("cursor") or None)

    async def upsert(
        self, record: RawRecord, policy: SavePolicy = SavePolicy.CHANGED_KEYS
    ) -> ModifyResult:
        body = {"records": [record_to_json(record)], "savePolicy": policy.value}
        payload = await self._send(
            "POST", f"/zones/{record.record_id.zone_name}/records/save", "Save", body
        )
        return ModifyResult(saved_count=payload.get("savedCount"))

    async def delete(self, record_id: RecordID) -> ModifyResult:
        body = {"recordNames": [record_id.record_name]}
        payload = await self._send(
            "POST", f"/zones/{record_id.zone_name}/records/delete", "Delete", body
        )
        return ModifyResult(deleted_count=payload.get("deletedCount"))
