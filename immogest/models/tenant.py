"""Tenant record."""

from datetime import date
from typing import Optional

from immogest.models.base import Record


class Tenant(Record):
    """A person occupying, or waiting to occupy, a unit.

    A tenant with a non-null ``unit_id`` is active for that unit.
    """

    unit_id: Optional[str] = None
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    rent_amount: float = 0
    deposit_amount: float = 0
    emergency_contact: Optional[str] = None
    occupation: Optional[str] = None
