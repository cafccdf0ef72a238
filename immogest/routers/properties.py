"""Properties and units router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from immogest.core.dependencies import (
    get_data_context,
    get_property_service,
    get_tenant_service,
    get_unit_service,
    raise_write_failed,
)
from immogest.core.security import SessionContext, require_permission
from immogest.models.enums import UnitStatus
from immogest.models.property import Property, Unit
from immogest.models.tenant import Tenant
from immogest.schemas.dashboard import PropertyStats, UnitWithDetails
from immogest.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    UnitCreate,
    UnitStatusUpdate,
    UnitUpdate,
)
from immogest.schemas.tenant import TenantWithUnit
from immogest.services.context import DataContext
from immogest.services.property_service import PropertyService
from immogest.services.tenant_service import TenantService
from immogest.services.unit_service import UnitService

router = APIRouter(prefix="/properties", tags=["properties"])
units_router = APIRouter(prefix="/units", tags=["units"])


async def _existing_property(service: PropertyService, property_id: str) -> Property:
    prop = await service.get_property(property_id)
    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")
    return prop


async def _existing_unit(service: UnitService, unit_id: str) -> Unit:
    unit = await service.get_unit(unit_id)
    if not unit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    return unit


async def _ensure_unique_number(
    service: UnitService, property_id: str, unit_number: str, unit_id: Optional[str] = None
) -> None:
    siblings = await service.list_units(property_id)
    if any(u.unit_number == unit_number and u.id != unit_id for u in siblings):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Unit {unit_number} already exists in this property",
        )


async def _ensure_status_matches_occupancy(
    tenants: TenantService, unit_id: str, new_status: UnitStatus
) -> None:
    """A unit is occupied exactly when a tenant holds it."""
    holder = await tenants.get_tenant_by_unit(unit_id)
    if holder and new_status != UnitStatus.OCCUPIED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Unit is held by {holder.name}; release the tenant first",
        )
    if not holder and new_status == UnitStatus.OCCUPIED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A unit becomes occupied by assigning a tenant to it",
        )


# --- Properties ---

@router.get("", response_model=List[Property])
async def list_properties(
    owner_id: Optional[str] = None,
    service: PropertyService = Depends(get_property_service),
    session: SessionContext = Depends(require_permission("read", "property")),
):
    """List properties, newest first."""
    return await service.list_properties(owner_id)


@router.post("", response_model=Property, status_code=status.HTTP_201_CREATED)
async def create_property(
    data: PropertyCreate,
    service: PropertyService = Depends(get_property_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("create", "property")),
):
    """Create a property owned by the caller unless an owner is given."""
    if not data.owner_id:
        data.owner_id = session.user_id
    prop = await service.create_property(data)
    if not prop:
        raise_write_failed(ctx, "create property")
    return prop


@router.get("/{property_id}", response_model=Property)
async def get_property(
    property_id: str,
    service: PropertyService = Depends(get_property_service),
    session: SessionContext = Depends(require_permission("read", "property")),
):
    """Get a property by ID."""
    return await _existing_property(service, property_id)


@router.patch("/{property_id}", response_model=Property)
async def update_property(
    property_id: str,
    data: PropertyUpdate,
    service: PropertyService = Depends(get_property_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "property")),
):
    """Update a property."""
    await _existing_property(service, property_id)
    prop = await service.update_property(property_id, data)
    if not prop:
        raise_write_failed(ctx, "update property")
    return prop


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    property_id: str,
    service: PropertyService = Depends(get_property_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("delete", "property")),
):
    """Delete a property with its units, requests and transactions."""
    await _existing_property(service, property_id)
    if not await service.delete_property(property_id):
        raise_write_failed(ctx, "delete property")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{property_id}/stats", response_model=PropertyStats)
async def get_property_stats(
    property_id: str,
    service: PropertyService = Depends(get_property_service),
    session: SessionContext = Depends(require_permission("read", "property")),
):
    """Occupancy, maintenance and revenue figures."""
    await _existing_property(service, property_id)
    return await service.get_property_stats(property_id)


@router.get("/{property_id}/units", response_model=List[Unit])
async def list_property_units(
    property_id: str,
    unit_status: Optional[UnitStatus] = Query(None, alias="status"),
    service: UnitService = Depends(get_unit_service),
    session: SessionContext = Depends(require_permission("read", "unit")),
):
    """Units of a property in unit-number order, optionally by status."""
    if unit_status:
        return await service.get_units_by_status(property_id, unit_status)
    return await service.list_units(property_id)


@router.get("/{property_id}/tenants", response_model=List[TenantWithUnit])
async def list_property_tenants(
    property_id: str,
    service: TenantService = Depends(get_tenant_service),
    session: SessionContext = Depends(require_permission("update", "tenant")),
):
    """Tenants of a property and unassigned tenants, with their unit numbers."""
    return await service.get_tenants_with_units(property_id)


# --- Units ---

@units_router.post("", response_model=Unit, status_code=status.HTTP_201_CREATED)
async def create_unit(
    data: UnitCreate,
    service: UnitService = Depends(get_unit_service),
    properties: PropertyService = Depends(get_property_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("create", "unit")),
):
    """Create a unit within a property."""
    await _existing_property(properties, data.property_id)
    await _ensure_unique_number(service, data.property_id, data.unit_number)
    unit = await service.create_unit(data)
    if not unit:
        raise_write_failed(ctx, "create unit")
    return unit


@units_router.get("/{unit_id}", response_model=UnitWithDetails)
async def get_unit(
    unit_id: str,
    service: UnitService = Depends(get_unit_service),
    session: SessionContext = Depends(require_permission("read", "unit")),
):
    """Get a unit with its tenant and maintenance history."""
    unit = await service.get_unit_with_details(unit_id)
    if not unit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    return unit


@units_router.get("/{unit_id}/tenant", response_model=Optional[Tenant])
async def get_unit_tenant(
    unit_id: str,
    service: TenantService = Depends(get_tenant_service),
    session: SessionContext = Depends(require_permission("update", "tenant")),
):
    """The tenant currently occupying a unit, if any."""
    return await service.get_tenant_by_unit(unit_id)


@units_router.patch("/{unit_id}", response_model=Unit)
async def update_unit(
    unit_id: str,
    data: UnitUpdate,
    service: UnitService = Depends(get_unit_service),
    tenants: TenantService = Depends(get_tenant_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "unit")),
):
    """Update a unit."""
    unit = await _existing_unit(service, unit_id)
    if data.unit_number:
        await _ensure_unique_number(service, unit.property_id, data.unit_number, unit_id)
    if data.status:
        await _ensure_status_matches_occupancy(tenants, unit_id, data.status)
    unit = await service.update_unit(unit_id, data)
    if not unit:
        raise_write_failed(ctx, "update unit")
    return unit


@units_router.put("/{unit_id}/status", response_model=Unit)
async def update_unit_status(
    unit_id: str,
    data: UnitStatusUpdate,
    service: UnitService = Depends(get_unit_service),
    tenants: TenantService = Depends(get_tenant_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "unit")),
):
    """Set a unit's status directly, e.g. take a vacant unit out for maintenance."""
    await _existing_unit(service, unit_id)
    await _ensure_status_matches_occupancy(tenants, unit_id, data.status)
    unit = await service.update_unit_status(unit_id, data.status)
    if not unit:
        raise_write_failed(ctx, "update unit status")
    return unit


@units_router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unit(
    unit_id: str,
    service: UnitService = Depends(get_unit_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("delete", "unit")),
):
    """Delete a unit, releasing its tenant."""
    await _existing_unit(service, unit_id)
    if not await service.delete_unit(unit_id):
        raise_write_failed(ctx, "delete unit")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
