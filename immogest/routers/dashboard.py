"""Dashboard router - data source status, notifications and overview."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from immogest.core.dependencies import (
    get_data_context,
    get_maintenance_service,
    get_property_service,
    get_transaction_service,
)
from immogest.core.security import SessionContext, require_landlord, require_session
from immogest.schemas.dashboard import ConnectionStatus, ConnectionTestResult, PropertyStats
from immogest.schemas.maintenance import MaintenanceStats
from immogest.schemas.transaction import FinancialSummary
from immogest.services.context import DataContext
from immogest.services.maintenance_service import MaintenanceService
from immogest.services.notifications import Notification
from immogest.services.property_service import PropertyService
from immogest.services.transaction_service import TransactionService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class PropertyOverview(BaseModel):
    """Everything the landlord dashboard shows for one property."""

    property_id: str
    stats: PropertyStats
    maintenance: MaintenanceStats
    finances: FinancialSummary


@router.get("/connection", response_model=ConnectionStatus)
async def get_connection_status(ctx: DataContext = Depends(get_data_context)):
    """Which data source is serving requests."""
    return ctx.connection_status()


@router.post("/connection/test", response_model=ConnectionTestResult)
async def test_connection(
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_session),
):
    """Probe the hosted backend without switching data source."""
    return await ctx.test_connection()


@router.post("/connection/refresh", response_model=ConnectionStatus)
async def refresh_connection(
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_landlord),
):
    """Probe the hosted backend again and switch data source on the result."""
    return await ctx.refresh_connection()


@router.get("/notifications", response_model=List[Notification])
async def drain_notifications(
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_session),
):
    """Return and clear pending notifications, oldest first."""
    return ctx.notifier.drain()


@router.post("/fallback/reset", status_code=status.HTTP_204_NO_CONTENT)
async def reset_fallback_store(
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_landlord),
):
    """Restore the in-memory store to its demonstration data."""
    ctx.store.reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/properties/{property_id}", response_model=PropertyOverview)
async def get_property_overview(
    property_id: str,
    year: Optional[int] = None,
    properties: PropertyService = Depends(get_property_service),
    maintenance: MaintenanceService = Depends(get_maintenance_service),
    transactions: TransactionService = Depends(get_transaction_service),
    session: SessionContext = Depends(require_landlord),
):
    """Occupancy, maintenance and financial figures for one property."""
    summary = await transactions.get_financial_summary(property_id, year or date.today().year)
    return PropertyOverview(
        property_id=property_id,
        stats=await properties.get_property_stats(property_id),
        maintenance=await maintenance.get_maintenance_stats(property_id),
        finances=summary,
    )
