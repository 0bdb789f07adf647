# teenbudget/schemas/transaction.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from teenbudget.db.models import TransactionType
from teenbudget.schemas.category import CategorySummary
from teenbudget.schemas.common import DEFAULT_PAGE_LIMIT, CamelModel, Pagination, naive_utc

# upper bound on a single amount; plenty for a teen budget
MAX_AMOUNT = Decimal("999999.99")

class TransactionSortKey(str, Enum):
    date = "date"
    amount = "amount"
    description = "description"

class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"

class TransactionBase(CamelModel):
    amount: Decimal = Field(..., gt=0, le=MAX_AMOUNT, decimal_places=2)
    type: TransactionType
    description: Optional[str] = Field(None, max_length=255)
    date: datetime
    category_id: int
    savings_goal_id: Optional[int] = None
    receipt_url: Optional[str] = Field(None, max_length=2048)

    @field_validator("date")
    @classmethod
    def _normalise_date(cls, value):
        return naive_utc(value)

    @field_validator("receipt_url")
    @classmethod
    def _blank_receipt_is_none(cls, value):
        if value is not None and not value.strip():
            return None
        return value

class TransactionCreate(TransactionBase):
    pass

class TransactionUpdate(CamelModel):
    amount: Optional[Decimal] = Field(None, gt=0, le=MAX_AMOUNT, decimal_places=2)
    type: Optional[TransactionType] = None
    description: Optional[str] = Field(None, max_length=255)
    date: Optional[datetime] = None
    category_id: Optional[int] = None
    savings_goal_id: Optional[int] = None
    receipt_url: Optional[str] = Field(None, max_length=2048)

    @field_validator("date")
    @classmethod
    def _normalise_date(cls, value):
        return naive_utc(value)

    @field_validator("receipt_url")
    @classmethod
    def _blank_receipt_is_none(cls, value):
        if value is not None and not value.strip():
            return None
        return value

class TransactionFilters(CamelModel):
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_LIMIT, ge=1, le=100)
    type: Optional[TransactionType] = None
    category_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_amount: Optional[Decimal] = Field(None, gt=0)
    max_amount: Optional[Decimal] = Field(None, gt=0)
    search: Optional[str] = Field(None, max_length=255)
    sort_by: TransactionSortKey = TransactionSortKey.date
    sort_order: SortOrder = SortOrder.desc

    @field_validator("start_date", "end_date")
    @classmethod
    def _normalise_bounds(cls, value):
        return naive_utc(value)

class TransactionOut(CamelModel):
    id: int
    amount: float
    type: TransactionType
    description: Optional[str] = None
    date: datetime
    category_id: int
    user_id: int
    savings_goal_id: Optional[int] = None
    receipt_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    category: Optional[CategorySummary] = None

class TransactionPage(CamelModel):
    data: List[TransactionOut]
    pagination: Pagination

class TransactionStatsOut(CamelModel):
    total_balance: float
    monthly_income: float
    monthly_expenses: float
    current_month_balance: float
    previous_month_balance: float
    balance_change: float
    balance_change_percent: float
