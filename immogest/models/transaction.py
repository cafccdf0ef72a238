"""Financial transaction record."""

from datetime import date
from typing import Optional

from immogest.models.base import Record
from immogest.models.enums import TransactionType


class Transaction(Record):
    """Income or expense booked against a property."""

    property_id: str
    unit_id: Optional[str] = None
    tenant_id: Optional[str] = None
    transaction_type: TransactionType
    amount: float
    description: Optional[str] = None
    category: Optional[str] = None
    transaction_date: date
