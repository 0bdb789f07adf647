# teenbudget/api/v1/budgets.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teenbudget.api.v1.deps import get_current_identity, get_db
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.budget import (
    BudgetCreate, BudgetFilters, BudgetItemOut, BudgetOut, BudgetPage, BudgetSortKey,
    BudgetTotalsOut, BudgetUpdate,
)
from teenbudget.schemas.common import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, SuccessOut
from teenbudget.schemas.transaction import SortOrder
from teenbudget.services import budgets as service

router = APIRouter(tags=["budgets"])

def budget_to_out(budget: models.Budget) -> BudgetOut:
    out = BudgetOut.model_validate(budget)
    out.budget_items = [BudgetItemOut.model_validate(item) for item in service.sorted_items(budget)]
    out.totals = BudgetTotalsOut.model_validate(service.budget_totals(budget.budget_items))
    return out

@router.get("", response_model=BudgetPage)
def list_budgets(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    period: Optional[models.BudgetPeriod] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    search: Optional[str] = Query(None, max_length=255),
    sort_by: BudgetSortKey = Query(BudgetSortKey.startDate, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.desc, alias="sortOrder"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    filters = BudgetFilters(
        page=page,
        limit=limit,
        period=period,
        is_active=is_active,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    budgets, pagination = service.list_budgets(db, identity, filters)
    return BudgetPage(data=[budget_to_out(b) for b in budgets], pagination=pagination)

@router.post("", response_model=BudgetOut, status_code=status.HTTP_201_CREATED)
def create_budget(payload: BudgetCreate, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return budget_to_out(service.create_budget(db, identity, payload))

@router.get("/{budget_id}", response_model=BudgetOut)
def get_budget(budget_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return budget_to_out(service.get_budget(db, identity, budget_id))

@router.put("/{budget_id}", response_model=BudgetOut)
def update_budget(
    budget_id: int,
    payload: BudgetUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return budget_to_out(service.update_budget(db, identity, budget_id, payload))

@router.delete("/{budget_id}", response_model=SuccessOut)
def delete_budget(budget_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    service.delete_budget(db, identity, budget_id)
    return SuccessOut()
