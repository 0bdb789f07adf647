# teenbudget/schemas/category.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from teenbudget.db.models import TransactionType
from teenbudget.schemas.common import CamelModel

class CategoryBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=50)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=100)

class CategoryCreate(CategoryBase):
    type: TransactionType

class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    icon: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=100)
    type: Optional[TransactionType] = None

class CategorySummary(CamelModel):
    id: int
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None
    type: TransactionType

class CategoryOut(CategorySummary):
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # only filled when the caller asks for counts
    transaction_count: Optional[int] = None

class RecentTransaction(CamelModel):
    id: int
    amount: float
    description: Optional[str] = None
    date: datetime

class CategoryUsage(CamelModel):
    total_amount: float
    average_amount: float
    recent_transactions: List[RecentTransaction]

class CategoryDetailOut(CategoryOut):
    budget_item_count: int = 0
    usage: Optional[CategoryUsage] = None
