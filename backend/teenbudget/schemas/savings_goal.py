# teenbudget/schemas/savings_goal.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, field_validator

from teenbudget.db.models import SavingsGoalStatus
from teenbudget.schemas.common import CamelModel, naive_utc
from teenbudget.schemas.transaction import MAX_AMOUNT

class SavingsGoalCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    target_amount: Decimal = Field(..., gt=0, le=MAX_AMOUNT, decimal_places=2)
    deadline: Optional[datetime] = None

    @field_validator("deadline")
    @classmethod
    def _normalise_deadline(cls, value):
        return naive_utc(value)

class SavingsGoalUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    target_amount: Optional[Decimal] = Field(None, gt=0, le=MAX_AMOUNT, decimal_places=2)
    deadline: Optional[datetime] = None

    @field_validator("deadline")
    @classmethod
    def _normalise_deadline(cls, value):
        return naive_utc(value)

class SavingsGoalStatusUpdate(CamelModel):
    status: SavingsGoalStatus

class SavingsGoalOut(CamelModel):
    id: int
    user_id: int
    title: str
    description: Optional[str] = None
    target_amount: float
    deadline: Optional[datetime] = None
    status: SavingsGoalStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # derived on every read, never stored
    current_amount: float = 0
    progress: float = 0
    is_deadline_missed: bool = False
