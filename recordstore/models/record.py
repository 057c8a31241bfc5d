"""
Backend record models.

Untyped representation exchanged with a RecordStore backend: a primary key
plus a mapping from field name to value. Typed entities (see customer.py)
encode to and decode from these.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SavePolicy(str, Enum):
    """How an upsert merges with an existing record."""

    CHANGED_KEYS = "changedKeys"  # Write only the supplied fields
    ALL_KEYS = "allKeys"  # Replace the record's fields wholesale
    IF_SERVER_UNCHANGED = "ifServerRecordUnchanged"


class RecordID(BaseModel):
    """Primary key of a record: (zone, record name)."""

    model_config = ConfigDict(frozen=True)

    zone_name: str = Field(..., min_length=1)
    record_name: str = Field(..., min_length=1)

    def __str__(self) -> str:
        return f"{self.zone_name}/{self.record_name}"


class RawRecord(BaseModel):
    """A record as the backend sees it."""

    record_type: str = Field(..., min_length=1)
    record_id: RecordID
    fields: dict[str, Any] = Field(default_factory=dict)

    def get(self, key: str) -> Any:
        return self.fields.get(key)


class QueryPage(BaseModel):
    """One batch of a paged query plus the cursor to the next batch, if any."""

    records: list[RawRecord] = Field(default_factory=list)
    cursor: str | None = None

    @property
    def has_more(self) -> bool:
        return self.cursor is not None


class ModifyResult(BaseModel):
    """
    Outcome counts reported by a save or delete.

    None means the backend did not report a count at all.
    """

    saved_count: int | None = None
    deleted_count: int | None = None
