# teenbudget/api/v1/dashboard.py
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teenbudget.api.v1.deps import get_current_identity, get_db
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.budget import BudgetOverviewRow
from teenbudget.schemas.dashboard import DashboardSummary
from teenbudget.services import overview, savings_goals, transactions

router = APIRouter(tags=["dashboard"])

@router.get("/budget-overview", response_model=List[BudgetOverviewRow])
def budget_overview(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """Top five expense lines of the active budgets, most consumed first."""
    rows = overview.budget_overview(db, identity)
    return [BudgetOverviewRow.model_validate(row) for row in rows]

@router.get("/summary", response_model=DashboardSummary)
def summary(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    stats = transactions.transaction_stats(db, identity)
    goal = savings_goals.get_active_goal(db, identity)
    return DashboardSummary(
        total_balance=float(stats.total_balance),
        monthly_income=float(stats.monthly_income),
        monthly_expenses=float(stats.monthly_expenses),
        savings_goal_progress=float(goal.progress.progress) if goal else None,
    )
