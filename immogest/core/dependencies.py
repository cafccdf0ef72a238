"""FastAPI dependencies giving routers access to the data services."""

from typing import NoReturn

from fastapi import Depends, HTTPException, Request, status

from immogest.services.context import DataContext
from immogest.services.maintenance_service import MaintenanceService
from immogest.services.property_service import PropertyService
from immogest.services.tenant_service import TenantService
from immogest.services.transaction_service import TransactionService
from immogest.services.unit_service import UnitService


def get_data_context(request: Request) -> DataContext:
    """The application's data context, built in the lifespan handler."""
    return request.app.state.data_context


def get_property_service(ctx: DataContext = Depends(get_data_context)) -> PropertyService:
    return PropertyService(ctx)


def get_unit_service(ctx: DataContext = Depends(get_data_context)) -> UnitService:
    return UnitService(ctx)


def get_tenant_service(ctx: DataContext = Depends(get_data_context)) -> TenantService:
    return TenantService(ctx)


def get_maintenance_service(ctx: DataContext = Depends(get_data_context)) -> MaintenanceService:
    return MaintenanceService(ctx)


def get_transaction_service(ctx: DataContext = Depends(get_data_context)) -> TransactionService:
    return TransactionService(ctx)


def raise_write_failed(ctx: DataContext, action: str) -> NoReturn:
    """Turn a failed write into an HTTP error.

    A backend failure reported during this request is a 502 carrying its
    message; otherwise the fallback store refused the change (409).
    """
    reason = ctx.write_failure()
    if reason is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Could not {action}",
        )
    raise HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Could not {action}: {reason}",
    )
