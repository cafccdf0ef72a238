"""Dashboard aggregates and connection status schemas."""

from typing import Optional

from pydantic import BaseModel, Field, computed_field

from immogest.models.enums import MaintenanceStatus, UnitStatus
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.property import Unit
from immogest.models.tenant import Tenant


class PropertyStats(BaseModel):
    """Occupancy, maintenance and revenue figures for one property."""

    total_units: int = 0
    occupied_units: int = 0
    available_units: int = 0
    maintenance_units: int = 0
    total_tenants: int = 0
    pending_maintenance: int = 0
    in_progress_maintenance: int = 0
    scheduled_maintenance: int = 0
    completed_maintenance: int = 0
    monthly_revenue: float = 0

    @computed_field
    @property
    def occupancy_rate(self) -> int:
        """Occupied share of units, as a rounded percentage."""
        if not self.total_units:
            return 0
        return round(self.occupied_units / self.total_units * 100)

    @classmethod
    def compute(
        cls,
        units: list[Unit],
        tenants: list[Tenant],
        requests: list[MaintenanceRequest],
    ) -> "PropertyStats":
        """Build stats from a property's units, all tenants and its requests."""
        unit_ids = {u.id for u in units}
        housed = [t for t in tenants if t.unit_id and t.unit_id in unit_ids]
        unit_statuses = [u.status for u in units]
        request_statuses = [r.status for r in requests]
        return cls(
            total_units=len(units),
            occupied_units=unit_statuses.count(UnitStatus.OCCUPIED),
            available_units=unit_statuses.count(UnitStatus.AVAILABLE),
            maintenance_units=unit_statuses.count(UnitStatus.MAINTENANCE),
            total_tenants=len(housed),
            pending_maintenance=request_statuses.count(MaintenanceStatus.PENDING),
            in_progress_maintenance=request_statuses.count(MaintenanceStatus.IN_PROGRESS),
            scheduled_maintenance=request_statuses.count(MaintenanceStatus.SCHEDULED),
            completed_maintenance=request_statuses.count(MaintenanceStatus.COMPLETED),
            monthly_revenue=sum(t.rent_amount for t in housed),
        )


class UnitWithDetails(Unit):
    """Unit with its current tenant and maintenance history."""

    tenant: Optional[Tenant] = None
    maintenance_requests: list[MaintenanceRequest] = Field(default_factory=list)

    @classmethod
    def from_records(
        cls,
        unit: Unit,
        tenant: Optional[Tenant],
        requests: list[MaintenanceRequest],
    ) -> "UnitWithDetails":
        return cls(
            **unit.model_dump(),
            tenant=tenant,
            maintenance_requests=[r for r in requests if r.unit_id == unit.id],
        )


class ConnectionStatus(BaseModel):
    """Which data source is currently serving requests."""

    is_backend_connected: bool
    connection_type: str


class ConnectionTestResult(BaseModel):
    """Outcome of an explicit connectivity test."""

    success: bool
    message: str
