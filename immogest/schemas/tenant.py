"""Tenant schemas and projections."""

from datetime import date
from typing import Optional

from pydantic import Field, model_validator

from immogest.models.property import Unit
from immogest.models.tenant import Tenant
from immogest.schemas.base import BaseSchema


class TenantCreate(BaseSchema):
    """Create a tenant, optionally placing them in a unit."""

    name: str = Field(..., min_length=2, max_length=255)
    unit_id: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    rent_amount: float = Field(default=0, ge=0)
    deposit_amount: float = Field(default=0, ge=0)
    emergency_contact: Optional[str] = None
    occupation: Optional[str] = None

    @model_validator(mode="after")
    def validate_lease_dates(self):
        """A lease cannot end before it starts."""
        if self.lease_start and self.lease_end and self.lease_end < self.lease_start:
            raise ValueError("lease_end must not be before lease_start")
        return self


class TenantUpdate(BaseSchema):
    """Update tenant. Setting ``unit_id`` moves the tenant between units."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    unit_id: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    lease_start: Optional[date] = None
    lease_end: Optional[date] = None
    rent_amount: Optional[float] = Field(None, ge=0)
    deposit_amount: Optional[float] = Field(None, ge=0)
    emergency_contact: Optional[str] = None
    occupation: Optional[str] = None


class TenantAssignRequest(BaseSchema):
    """Move a tenant into a unit."""

    unit_id: str


class TenantWithUnit(Tenant):
    """Tenant row with the number of the unit it occupies."""

    unit_number: Optional[str] = None

    @classmethod
    def from_records(cls, tenant: Tenant, unit: Optional[Unit]) -> "TenantWithUnit":
        return cls(
            **tenant.model_dump(),
            unit_number=unit.unit_number if unit else None,
        )
