"""
Customer data model and its record mapping.

A Customer is keyed by a client-minted guid inside the customer zone. The
three descriptive fields are optional and travel to the backend as the wire
fields customerName, contactName and contactEmail.
"""

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from recordstore.models.record import RawRecord, RecordID

CUSTOMER_ZONE_NAME = "customerRecordZone"
CUSTOMER_RECORD_TYPE = "Customer"


class CustomerField(str, Enum):
    """Wire field names of a Customer record."""

    CUSTOMER_NAME = "customerName"
    CONTACT_NAME = "contactName"
    CONTACT_EMAIL = "contactEmail"


class Customer(BaseModel):
    """
    Customer stored in the remote record store.

    guid is the record name of the primary key and never changes once minted.
    """

    model_config = ConfigDict(validate_assignment=True)

    guid: str = Field(..., min_length=1, frozen=True, description="Record name (primary key)")
    customer_name: str | None = Field(default=None)
    contact_name: str | None = Field(default=None)
    contact_email: str | None = Field(default=None)

    @classmethod
    def new(
        cls,
        customer_name: str | None = None,
        contact_name: str | None = None,
        contact_email: str | None = None,
    ) -> "Customer":
        """Create a customer with a freshly minted guid."""
        return cls(
            guid=str(uuid.uuid4()).upper(),
            customer_name=customer_name,
            contact_name=contact_name,
            contact_email=contact_email,
        )

    def record_id(self, zone_name: str = CUSTOMER_ZONE_NAME) -> RecordID:
        """Primary key of this customer within the given zone."""
        return RecordID(zone_name=zone_name, record_name=self.guid)


def _string_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


class CustomerCodec:
    """
    Pure mapping between Customer and RawRecord.

    Encoding always includes all three wire fields, with None for absent
    values, so a changed-keys save clears fields that were unset locally.
    Decoding maps missing or non-string values to None.
    """

    def __init__(
        self,
        zone_name: str = CUSTOMER_ZONE_NAME,
        record_type: str = CUSTOMER_RECORD_TYPE,
    ):
        self.zone_name = zone_name
        self.record_type = record_type

    def record_id(self, customer: Customer) -> RecordID:
        return customer.record_id(self.zone_name)

    def encode(self, customer: Customer) -> RawRecord:
        return RawRecord(
            record_type=self.record_type,
            record_id=self.record_id(customer),
            fields={
                CustomerField.CUSTOMER_NAME.value: customer.customer_name,
                CustomerField.CONTACT_NAME.value: customer.contact_name,
                CustomerField.CONTACT_EMAIL.value: customer.contact_email,
            },
        )

    def decode(self, record: RawRecord) -> Customer:
        return Customer(
            guid=record.record_id.record_name,
            customer_name=_string_or_none(record.get(CustomerField.CUSTOMER_NAME.value)),
            contact_name=_string_or_none(record.get(CustomerField.CONTACT_NAME.value)),
            contact_email=_string_or_none(record.get(CustomerField.CONTACT_EMAIL.value)),
        )
