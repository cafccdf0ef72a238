"""Maintenance schemas and projections."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from immogest.models.enums import MaintenanceCategory, MaintenancePriority, MaintenanceStatus
from immogest.models.maintenance import MaintenanceRequest
from immogest.models.property import Unit
from immogest.schemas.base import BaseSchema


class MaintenanceCreate(BaseSchema):
    """Create a maintenance request."""

    unit_id: str
    title: str = Field(..., min_length=3, max_length=255)
    description: Optional[str] = None
    category: MaintenanceCategory = MaintenanceCategory.GENERAL
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    status: MaintenanceStatus = MaintenanceStatus.PENDING
    reported_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, ge=0)


class MaintenanceUpdate(BaseSchema):
    """Update maintenance request."""

    title: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = None
    category: Optional[MaintenanceCategory] = None
    priority: Optional[MaintenancePriority] = None
    status: Optional[MaintenanceStatus] = None
    scheduled_date: Optional[date] = None
    completed_date: Optional[datetime] = None
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = Field(None, ge=0)
    actual_cost: Optional[float] = Field(None, ge=0)


class MaintenanceStatusRequest(BaseSchema):
    """Change a request's status, with optional extra field updates."""

    status: MaintenanceStatus
    completed_date: Optional[datetime] = None
    actual_cost: Optional[float] = Field(None, ge=0)
    assigned_to: Optional[str] = None


class MaintenanceAssignRequest(BaseSchema):
    """Assign a request to a contractor."""

    assigned_to: str = Field(..., min_length=2, max_length=255)


class MaintenanceScheduleRequest(BaseSchema):
    """Schedule a request for a given day."""

    scheduled_date: date


class MaintenanceRequestWithUnit(MaintenanceRequest):
    """Maintenance request with the number of its unit."""

    unit_number: Optional[str] = None

    @classmethod
    def from_records(
        cls, request: MaintenanceRequest, unit: Optional[Unit]
    ) -> "MaintenanceRequestWithUnit":
        return cls(
            **request.model_dump(),
            unit_number=unit.unit_number if unit else None,
        )


class MaintenanceStats(BaseModel):
    """Request counts per status for a property."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    scheduled: int = 0
    completed: int = 0

    @classmethod
    def from_requests(cls, requests: list) -> "MaintenanceStats":
        statuses = [r.status for r in requests]
        return cls(
            total=len(statuses),
            pending=statuses.count(MaintenanceStatus.PENDING),
            in_progress=statuses.count(MaintenanceStatus.IN_PROGRESS),
            scheduled=statuses.count(MaintenanceStatus.SCHEDULED),
            completed=statuses.count(MaintenanceStatus.COMPLETED),
        )
