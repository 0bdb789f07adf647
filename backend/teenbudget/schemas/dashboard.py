# teenbudget/schemas/dashboard.py
from typing import Optional

from teenbudget.schemas.common import CamelModel

class DashboardSummary(CamelModel):
    total_balance: float
    monthly_income: float
    monthly_expenses: float
    # progress of the ACTIVE goal, null when there is none
    savings_goal_progress: Optional[float] = None
