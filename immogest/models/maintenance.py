"""MaintenanceRequest record."""

from datetime import date, datetime
from typing import Optional

from immogest.models.base import Record
from immogest.models.enums import MaintenanceCategory, MaintenancePriority, MaintenanceStatus


class MaintenanceRequest(Record):
    """A maintenance request raised against a unit."""

    unit_id: str
    title: str
    description: Optional[str] = None
    category: MaintenanceCategory = MaintenanceCategory.GENERAL
    priority: MaintenancePriority = MaintenancePriority.MEDIUM
    status: MaintenanceStatus = MaintenanceStatus.PENDING

    reported_date: Optional[date] = None
    scheduled_date: Optional[date] = None
    # Stamped automatically when the status moves to completed
    completed_date: Optional[datetime] = None

    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None

    estimated_cost: Optional[float] = None
    actual_cost: Optional[float] = None
