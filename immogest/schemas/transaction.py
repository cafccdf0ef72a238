"""Transaction schemas and financial summaries."""

import calendar
from datetime import date
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from immogest.models.enums import TransactionType
from immogest.models.transaction import Transaction
from immogest.schemas.base import BaseSchema


class TransactionCreate(BaseSchema):
    """Book an income or expense."""

    property_id: str
    unit_id: Optional[str] = None
    tenant_id: Optional[str] = None
    transaction_type: TransactionType
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    transaction_date: date = Field(default_factory=date.today)


class TransactionUpdate(BaseSchema):
    """Update transaction."""

    transaction_type: Optional[TransactionType] = None
    amount: Optional[float] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    transaction_date: Optional[date] = None


class DateRange(BaseSchema):
    """Inclusive date window."""

    start_date: date
    end_date: date

    @model_validator(mode="after")
    def validate_order(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class MonthlyBreakdown(BaseModel):
    """Income and expenses for one calendar month."""

    month: int
    label: str
    income: float = 0
    expenses: float = 0
    net: float = 0


class FinancialSummary(BaseModel):
    """Yearly totals for a property with a month-by-month breakdown."""

    property_id: str
    year: int
    total_income: float = 0
    total_expenses: float = 0
    net_income: float = 0
    monthly_breakdown: list[MonthlyBreakdown] = Field(default_factory=list)

    @classmethod
    def from_transactions(
        cls, property_id: str, year: int, transactions: Iterable[Transaction]
    ) -> "FinancialSummary":
        in_year = [t for t in transactions if t.transaction_date.year == year]

        months = []
        for month in range(1, 13):
            income = sum(
                t.amount
                for t in in_year
                if t.transaction_date.month == month and t.transaction_type == TransactionType.INCOME
            )
            expenses = sum(
                t.amount
                for t in in_year
                if t.transaction_date.month == month and t.transaction_type == TransactionType.EXPENSE
            )
            months.append(
                MonthlyBreakdown(
                    month=month,
                    label=calendar.month_abbr[month],
                    income=income,
                    expenses=expenses,
                    net=income - expenses,
                )
            )

        total_income = sum(m.income for m in months)
        total_expenses = sum(m.expenses for m in months)
        return cls(
            property_id=property_id,
            year=year,
            total_income=total_income,
            total_expenses=total_expenses,
            net_income=total_income - total_expenses,
            monthly_breakdown=months,
        )
