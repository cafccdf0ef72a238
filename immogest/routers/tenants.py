"""Tenants router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from immogest.core.dependencies import (
    get_data_context,
    get_tenant_service,
    get_unit_service,
    raise_write_failed,
)
from immogest.core.security import SessionContext, require_permission, require_session
from immogest.models.tenant import Tenant
from immogest.schemas.tenant import (
    TenantAssignRequest,
    TenantCreate,
    TenantUpdate,
    TenantWithUnit,
)
from immogest.services.context import DataContext
from immogest.services.tenant_service import TenantService
from immogest.services.unit_service import UnitService

router = APIRouter(prefix="/tenants", tags=["tenants"])


async def _ensure_unit_free(
    tenants: TenantService,
    units: UnitService,
    unit_id: str,
    tenant_id: Optional[str] = None,
) -> None:
    if not await units.get_unit(unit_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unit not found")
    holder = await tenants.get_tenant_by_unit(unit_id)
    if holder and holder.id != tenant_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Unit is already occupied by another tenant",
        )


async def _existing_tenant(service: TenantService, tenant_id: str) -> Tenant:
    tenant = await service.get_tenant(tenant_id)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return tenant


@router.get("", response_model=List[Tenant])
async def list_tenants(
    property_id: Optional[str] = None,
    service: TenantService = Depends(get_tenant_service),
    session: SessionContext = Depends(require_permission("update", "tenant")),
):
    """List tenants by name; with a property, its tenants plus unassigned ones."""
    return await service.list_tenants(property_id)


@router.post("", response_model=Tenant, status_code=status.HTTP_201_CREATED)
async def create_tenant(
    data: TenantCreate,
    service: TenantService = Depends(get_tenant_service),
    units: UnitService = Depends(get_unit_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("create", "tenant")),
):
    """Create a tenant, occupying their unit if one is given."""
    if data.unit_id:
        await _ensure_unit_free(service, units, data.unit_id)
    tenant = await service.create_tenant(data)
    if not tenant:
        raise_write_failed(ctx, "create tenant")
    return tenant


@router.get("/{tenant_id}", response_model=TenantWithUnit)
async def get_tenant(
    tenant_id: str,
    service: TenantService = Depends(get_tenant_service),
    session: SessionContext = Depends(require_session),
):
    """Get a tenant with their unit number. Tenants may only read themselves."""
    if not session.can_access_tenant_data(tenant_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    tenant = await service.get_tenant_with_unit(tenant_id)
    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Tenant not found")
    return tenant


@router.patch("/{tenant_id}", response_model=Tenant)
async def update_tenant(
    tenant_id: str,
    data: TenantUpdate,
    service: TenantService = Depends(get_tenant_service),
    units: UnitService = Depends(get_unit_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "tenant")),
):
    """Update a tenant. Setting ``unit_id`` moves them between units."""
    await _existing_tenant(service, tenant_id)
    if data.unit_id:
        await _ensure_unit_free(service, units, data.unit_id, tenant_id)
    tenant = await service.update_tenant(tenant_id, data)
    if not tenant:
        raise_write_failed(ctx, "update tenant")
    return tenant


@router.post("/{tenant_id}/assign", response_model=Tenant)
async def assign_tenant(
    tenant_id: str,
    data: TenantAssignRequest,
    service: TenantService = Depends(get_tenant_service),
    units: UnitService = Depends(get_unit_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "tenant")),
):
    """Move a tenant into a unit, freeing their previous one."""
    await _existing_tenant(service, tenant_id)
    await _ensure_unit_free(service, units, data.unit_id, tenant_id)
    tenant = await service.assign_tenant_to_unit(tenant_id, data.unit_id)
    if not tenant:
        raise_write_failed(ctx, "assign tenant")
    return tenant


@router.post("/{tenant_id}/release", response_model=Tenant)
async def release_tenant(
    tenant_id: str,
    service: TenantService = Depends(get_tenant_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "tenant")),
):
    """Remove a tenant from their unit; the unit becomes available."""
    await _existing_tenant(service, tenant_id)
    tenant = await service.remove_tenant_from_unit(tenant_id)
    if not tenant:
        raise_write_failed(ctx, "remove tenant from unit")
    return tenant


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tenant(
    tenant_id: str,
    service: TenantService = Depends(get_tenant_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("delete", "tenant")),
):
    """Delete a tenant; their unit becomes available."""
    await _existing_tenant(service, tenant_id)
    if not await service.delete_tenant(tenant_id):
        raise_write_failed(ctx, "delete tenant")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
