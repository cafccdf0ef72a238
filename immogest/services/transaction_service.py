"""Financial transaction data access."""

from datetime import date, datetime, timezone
from typing import Optional

from immogest.core.remote_client import eq, gte, lte
from immogest.models.enums import TransactionType
from immogest.models.transaction import Transaction
from immogest.schemas.transaction import (
    FinancialSummary,
    TransactionCreate,
    TransactionUpdate,
)
from immogest.services.context import DataContext

TABLE = "transactions"


class TransactionService:
    """Income and expenses booked against properties."""

    def __init__(self, ctx: DataContext):
        self.ctx = ctx

    async def list_transactions(
        self,
        property_id: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        tenant_id: Optional[str] = None,
    ) -> list[Transaction]:
        async def primary():
            filters = []
            if property_id:
                filters.append(eq("property_id", property_id))
            if tenant_id:
                filters.append(eq("tenant_id", tenant_id))
            if transaction_type:
                filters.append(eq("transaction_type", transaction_type))
            if start_date:
                filters.append(gte("transaction_date", start_date))
            if end_date:
                filters.append(lte("transaction_date", end_date))
            rows = await self.ctx.remote.select(TABLE, filters, order="transaction_date", descending=True)
            return [Transaction.model_validate(r) for r in rows]

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_transactions(
                property_id, transaction_type, start_date, end_date, tenant_id
            ),
            "loading transactions",
        )

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        async def primary():
            row = await self.ctx.remote.select_one(TABLE, [eq("id", transaction_id)])
            return Transaction.model_validate(row) if row else None

        return await self.ctx.read(
            primary,
            lambda: self.ctx.store.get_transaction(transaction_id),
            "loading transaction",
        )

    async def get_financial_summary(self, property_id: str, year: int) -> FinancialSummary:
        """Yearly totals and monthly breakdown for a property."""
        transactions = await self.list_transactions(
            property_id,
            start_date=date(year, 1, 1),
            end_date=date(year, 12, 31),
        )
        return FinancialSummary.from_transactions(property_id, year, transactions)

    async def create_transaction(self, payload: TransactionCreate) -> Optional[Transaction]:
        fields = payload.model_dump()

        async def remote_op():
            return Transaction.model_validate(await self.ctx.remote.insert(TABLE, fields))

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.create_transaction(fields),
            "creating transaction",
            success_message="Transaction recorded",
        )

    async def update_transaction(
        self, transaction_id: str, payload: TransactionUpdate
    ) -> Optional[Transaction]:
        changes = payload.changes()

        async def remote_op():
            row = await self.ctx.remote.update(
                TABLE,
                {**changes, "updated_at": datetime.now(timezone.utc)},
                [eq("id", transaction_id)],
            )
            return Transaction.model_validate(row) if row else None

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.update_transaction(transaction_id, changes),
            "updating transaction",
            success_message="Transaction updated",
        )

    async def delete_transaction(self, transaction_id: str) -> bool:
        async def remote_op():
            return await self.ctx.remote.delete(TABLE, [eq("id", transaction_id)]) > 0

        return await self.ctx.write(
            remote_op,
            lambda: self.ctx.store.delete_transaction(transaction_id),
            "deleting transaction",
            failed=False,
            success_message="Transaction deleted",
        )
