"""Transactions and finance router."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import ValidationError

from immogest.core.dependencies import (
    get_data_context,
    get_transaction_service,
    raise_write_failed,
)
from immogest.core.security import SessionContext, require_landlord, require_permission
from immogest.models.enums import TransactionType
from immogest.models.transaction import Transaction
from immogest.schemas.transaction import (
    DateRange,
    FinancialSummary,
    TransactionCreate,
    TransactionUpdate,
)
from immogest.services.context import DataContext
from immogest.services.transaction_service import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])


async def _existing_transaction(service: TransactionService, transaction_id: str) -> Transaction:
    tx = await service.get_transaction(transaction_id)
    if not tx:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found")
    return tx


@router.get("", response_model=List[Transaction])
async def list_transactions(
    property_id: Optional[str] = None,
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    service: TransactionService = Depends(get_transaction_service),
    session: SessionContext = Depends(require_permission("read", "transaction")),
):
    """List transactions, most recent first. Tenants only see their own payments."""
    if start_date and end_date:
        try:
            DateRange(start_date=start_date, end_date=end_date)
        except ValidationError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="end_date must not be before start_date",
            )
    tenant_id = session.user_id if session.is_tenant else None
    return await service.list_transactions(
        property_id, transaction_type, start_date, end_date, tenant_id=tenant_id
    )


@router.get("/summary", response_model=FinancialSummary)
async def get_financial_summary(
    property_id: str,
    year: Optional[int] = Query(None, ge=1900, le=2100),
    service: TransactionService = Depends(get_transaction_service),
    session: SessionContext = Depends(require_landlord),
):
    """Yearly income, expenses and monthly breakdown for a property."""
    return await service.get_financial_summary(property_id, year or date.today().year)


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("create", "transaction")),
):
    """Record an income or expense."""
    tx = await service.create_transaction(data)
    if not tx:
        raise_write_failed(ctx, "record transaction")
    return tx


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
    session: SessionContext = Depends(require_permission("read", "transaction")),
):
    """Get a transaction by ID."""
    tx = await _existing_transaction(service, transaction_id)
    if session.is_tenant and tx.tenant_id != session.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your transaction")
    return tx


@router.patch("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    service: TransactionService = Depends(get_transaction_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("update", "transaction")),
):
    """Update a transaction."""
    await _existing_transaction(service, transaction_id)
    tx = await service.update_transaction(transaction_id, data)
    if not tx:
        raise_write_failed(ctx, "update transaction")
    return tx


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
    ctx: DataContext = Depends(get_data_context),
    session: SessionContext = Depends(require_permission("delete", "transaction")),
):
    """Delete a transaction."""
    await _existing_transaction(service, transaction_id)
    if not await service.delete_transaction(transaction_id):
        raise_write_failed(ctx, "delete transaction")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
