"""Maintenance router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from immogest.core.dependencies import (
    get_data_context,
    get_maintenance_service,
    get_tenant_service,
    get_unit_service,
    raise_write_failed,
)
from immogest.core.security import SessionContext, require_landlord, require_permission
from immogest.models.enums import MaintenanceStatus
from immogest.models.maintenance import MaintenanceRequest
from immogest.schemas.maintenance import (
    MaintenanceAssignRequest,
    MaintenanceCreate,
    MaintenanceRequestWithUnit,
    MaintenanceScheduleRequest,
    MaintenanceStats,
    MaintenanceStatusRequest,
    MaintenanceUpdate,
)
from immogest.services.context import DataContext
from immogest.services.maintenance_service import MaintenanceService
from immogest.services.tenant_service import TenantService
from immogest.services.unit_service import UnitService

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


async def _existing_request(service: MaintenanceService, request_id: str) -> MaintenanceRequest:
    request = await service.get_request(request_id)
    if not request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Maintenance request not found")
    return request


async def _own_unit(session: SessionContext, tenants: TenantService) -> Optional[str]:
    """The unit a tenant session is limited to; None when they hold none."""
    tenant = await tenants.get_tenant(session.user_id)
    return tenant.unit_id if tenant else None


@router.get("", response_model=List[MaintenanceRequest])
async def list_maintenance_requests(
    property_id: Optional[str] = None,
    unit_id: Optional[str] = None,
    request_status: Optional[MaintenanceStatus] = Query(None, alias="status"),
    service: MaintenanceService = Depends(get_maintenance_service),
    tenants: TenantService = Depends(get_tenant_service),
    session: SessionContext = Depends(require_permission("read", "maintenance")),
):
    """List maintenance requests, newest first. Tenants only see their own unit's."""
    if session.is_tenant:
        own_unit = await _own_unit(session, tenants)
        if not own_unit or (unit_id and unit_id != own_unit):
            return []
        return await service.list_requests(unit_id=own_unit, status=request_status)
    return await service.list_requests(property_id, unit_id, request_status)


@router.get("/with-units", response_model=List[MaintenanceRequestWithUnit])
async def list_requests_with_units(
    property_id: str,
    request_status: Optional[MaintenanceStatus] = Query(None, alias="status"),
    service: MaintenanceService = Depends(get_maintenance_service),
    session: SessionContext = Depends(require_landlord),
):
    """A property's requests with their unit numbers."""
    return await service.get_requests_with_units(property_id, request_status)


@router.get("/stats", response_model=MaintenanceStats)
async def get_maintenance_stats(
    property_id: str,
    service: MaintenanceService = Depends(get_maintenance_service),
    session: SessionContext = Depends(require_landlord),
):
    """Request counts per status for a property."""
    return await service.get_maintenance_stats(property_id)


@router.post("", response_model=MaintenanceRequest, status_code=status.HTTP_201_CREATED)
async def create_maintenance_request(
    data: MaintenanceCreate,
    service: MaintenanceService = Depends(get_maintenance_service),
    units: UnitService = Depends(get_unit_service),
    tenants: TenantService = Depends(get_tenant_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("create", "maintenance")),
):
    """Report a maintenance issue on a unit."""
    if not await units.get_unit(data.unit_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    if session.is_tenant and data.unit_id != await _own_unit(session, tenants):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Tenants report issues on their own unit")
    request = await service.create_request(data)
    if not request:
        raise_write_failed(ctx, "create maintenance request")
    return request


@router.get("/{request_id}", response_model=MaintenanceRequestWithUnit)
async def get_maintenance_request(
    request_id: str,
    service: MaintenanceService = Depends(get_maintenance_service),
    tenants: TenantService = Depends(get_tenant_service),
    session: SessionContext = Depends(require_permission("read", "maintenance")),
):
    """Get a maintenance request with its unit number."""
    request = await service.get_request_with_unit(request_id)
    if not request:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Maintenance request not found")
    if session.is_tenant and request.unit_id != await _own_unit(session, tenants):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a request on your unit")
    return request


@router.patch("/{request_id}", response_model=MaintenanceRequest)
async def update_maintenance_request(
    request_id: str,
    data: MaintenanceUpdate,
    service: MaintenanceService = Depends(get_maintenance_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "maintenance")),
):
    """Update a maintenance request."""
    await _existing_request(service, request_id)
    request = await service.update_request(request_id, data)
    if not request:
        raise_write_failed(ctx, "update maintenance request")
    return request


@router.post("/{request_id}/status", response_model=MaintenanceRequest)
async def update_maintenance_status(
    request_id: str,
    data: MaintenanceStatusRequest,
    service: MaintenanceService = Depends(get_maintenance_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "maintenance")),
):
    """Move a request through its workflow; completion is date-stamped."""
    await _existing_request(service, request_id)
    request = await service.update_status(request_id, data)
    if not request:
        raise_write_failed(ctx, "update maintenance status")
    return request


@router.post("/{request_id}/assign", response_model=MaintenanceRequest)
async def assign_maintenance_request(
    request_id: str,
    data: MaintenanceAssignRequest,
    service: MaintenanceService = Depends(get_maintenance_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "maintenance")),
):
    """Assign a request to a contractor."""
    await _existing_request(service, request_id)
    request = await service.assign_request(request_id, data.assigned_to)
    if not request:
        raise_write_failed(ctx, "assign maintenance request")
    return request


@router.post("/{request_id}/schedule", response_model=MaintenanceRequest)
async def schedule_maintenance_request(
    request_id: str,
    data: MaintenanceScheduleRequest,
    service: MaintenanceService = Depends(get_maintenance_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "maintenance")),
):
    """Schedule a request for a given day."""
    await _existing_request(service, request_id)
    request = await service.schedule_request(request_id, data.scheduled_date)
    if not request:
        raise_write_failed(ctx, "schedule maintenance request")
    return request


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_maintenance_request(
    request_id: str,
    service: MaintenanceService = Depends(get_maintenance_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("delete", "maintenance")),
):
    """Delete a maintenance request."""
    await _existing_request(service, request_id)
    if not await service.delete_request(request_id):
        raise_write_failed(ctx, "delete maintenance request")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
