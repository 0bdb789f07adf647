# teenbudget/schemas/budget.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from teenbudget.db.models import BudgetPeriod, TransactionType
from teenbudget.schemas.category import CategorySummary
from teenbudget.schemas.common import DEFAULT_PAGE_LIMIT, CamelModel, Pagination, naive_utc
from teenbudget.schemas.transaction import MAX_AMOUNT, SortOrder

class BudgetSortKey(str, Enum):
    name = "name"
    startDate = "startDate"
    createdAt = "createdAt"

class BudgetItemIn(CamelModel):
    category_id: int
    amount: Decimal = Field(..., gt=0, le=MAX_AMOUNT, decimal_places=2)
    type: TransactionType
    notes: Optional[str] = Field(None, max_length=500)

class BudgetCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    period: BudgetPeriod
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    budget_items: List[BudgetItemIn] = Field(..., min_length=1)

    @field_validator("start_date")
    @classmethod
    def _normalise_start(cls, value):
        return naive_utc(value)

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, value, info):
        value = naive_utc(value)
        start = info.data.get("start_date")
        if value is not None and start is not None and value <= start:
            raise ValueError("End date must be after start date")
        return value

class BudgetUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    period: Optional[BudgetPeriod] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    budget_items: Optional[List[BudgetItemIn]] = None

    @field_validator("start_date")
    @classmethod
    def _normalise_start(cls, value):
        return naive_utc(value)

    @field_validator("end_date")
    @classmethod
    def _end_after_start(cls, value, info):
        value = naive_utc(value)
        start = info.data.get("start_date")
        if value is not None and start is not None and value <= start:
            raise ValueError("End date must be after start date")
        return value

class BudgetFilters(CamelModel):
    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_LIMIT, ge=1, le=100)
    period: Optional[BudgetPeriod] = None
    is_active: Optional[bool] = None
    search: Optional[str] = Field(None, max_length=255)
    sort_by: BudgetSortKey = BudgetSortKey.startDate
    sort_order: SortOrder = SortOrder.desc

class BudgetItemOut(CamelModel):
    id: int
    budget_id: int
    category_id: int
    amount: float
    type: TransactionType
    notes: Optional[str] = None
    category: Optional[CategorySummary] = None

class BudgetTotalsOut(CamelModel):
    total_income: float
    total_expenses: float
    net_income: float
    income_item_count: int
    expense_item_count: int

class BudgetOut(CamelModel):
    id: int
    name: str
    period: BudgetPeriod
    start_date: datetime
    end_date: datetime
    is_active: bool
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    budget_items: List[BudgetItemOut] = []
    totals: Optional[BudgetTotalsOut] = None

class BudgetPage(CamelModel):
    data: List[BudgetOut]
    pagination: Pagination

class BudgetOverviewRow(CamelModel):
    budget_id: int
    budget_name: str
    category_name: str
    category_icon: str
    category_color: str
    budget_amount: float
    spent_amount: float
    remaining_amount: float
    percentage: float
    status: str
    period: BudgetPeriod
    start_date: datetime
    end_date: datetime
