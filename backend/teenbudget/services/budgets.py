# teenbudget/services/budgets.py
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Tuple

from sqlalchemy.orm import Session, selectinload

from teenbudget.core.errors import BadRequestError, NotFoundError, ValidationFailed
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.budget import BudgetCreate, BudgetFilters, BudgetItemIn, BudgetSortKey, BudgetUpdate
from teenbudget.schemas.common import Pagination, build_pagination
from teenbudget.schemas.transaction import SortOrder
from teenbudget.services.transactions import ZERO, to_decimal

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {
    BudgetSortKey.name: models.Budget.name,
    BudgetSortKey.startDate: models.Budget.start_date,
    BudgetSortKey.createdAt: models.Budget.created_at,
}


@dataclass(frozen=True)
class BudgetTotals:
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    income_item_count: int
    expense_item_count: int


def budget_totals(items: Iterable[models.BudgetItem]) -> BudgetTotals:
    """Planned income/expense totals of a budget; recomputed on every read."""
    income = ZERO
    expenses = ZERO
    income_count = 0
    expense_count = 0
    for item in items:
        if item.type == models.TransactionType.INCOME:
            income += to_decimal(item.amount)
            income_count += 1
        elif item.type == models.TransactionType.EXPENSE:
            expenses += to_decimal(item.amount)
            expense_count += 1
    return BudgetTotals(
        total_income=income,
        total_expenses=expenses,
        net_income=income - expenses,
        income_item_count=income_count,
        expense_item_count=expense_count,
    )


def _with_items(q):
    return q.options(
        selectinload(models.Budget.budget_items).selectinload(models.BudgetItem.category)
    )


def get_budget(db: Session, identity: Identity, budget_id: int) -> models.Budget:
    budget = (
        _with_items(db.query(models.Budget))
        .filter(models.Budget.id == budget_id, models.Budget.user_id == identity.user_id)
        .first()
    )
    if not budget:
        raise NotFoundError("Budget not found")
    return budget


def sorted_items(budget: models.Budget) -> List[models.BudgetItem]:
    """Expense items before income items, then by category name."""
    return sorted(
        budget.budget_items,
        key=lambda item: (item.type.value, item.category.name if item.category else ""),
    )


def list_budgets(
    db: Session, identity: Identity, filters: BudgetFilters
) -> Tuple[List[models.Budget], Pagination]:
    q = db.query(models.Budget).filter(models.Budget.user_id == identity.user_id)
    if filters.period:
        q = q.filter(models.Budget.period == filters.period)
    if filters.is_active is not None:
        q = q.filter(models.Budget.is_active == filters.is_active)
    if filters.search:
        q = q.filter(models.Budget.name.icontains(filters.search, autoescape=True))

    total = q.count()

    column = _SORT_COLUMNS[filters.sort_by]
    if filters.sort_order == SortOrder.asc:
        ordering = (column.asc(), models.Budget.id.asc())
    else:
        ordering = (column.desc(), models.Budget.id.desc())

    budgets = (
        _with_items(q)
        .order_by(*ordering)
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return budgets, build_pagination(filters.page, filters.limit, total)


def _check_item_categories(db: Session, identity: Identity, items: List[BudgetItemIn]) -> None:
    """Every referenced category must exist and belong to the caller."""
    requested = {item.category_id for item in items}
    if not requested:
        return
    found = (
        db.query(models.Category.id)
        .filter(models.Category.id.in_(requested), models.Category.user_id == identity.user_id)
        .count()
    )
    if found != len(requested):
        raise BadRequestError("One or more categories not found or do not belong to user")


def _build_items(items: List[BudgetItemIn]) -> List[models.BudgetItem]:
    return [
        models.BudgetItem(
            category_id=item.category_id,
            amount=item.amount,
            type=item.type,
            notes=item.notes or None,
        )
        for item in items
    ]


def create_budget(db: Session, identity: Identity, payload: BudgetCreate) -> models.Budget:
    if payload.end_date <= payload.start_date:
        raise ValidationFailed("End date must be after start date", field="endDate")
    _check_item_categories(db, identity, payload.budget_items)

    budget = models.Budget(
        user_id=identity.user_id,
        name=payload.name,
        period=payload.period,
        start_date=payload.start_date,
        end_date=payload.end_date,
        is_active=payload.is_active,
        budget_items=_build_items(payload.budget_items),
    )
    try:
        db.add(budget)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("user %s created budget %s with %d items", identity.user_id, budget.id, len(payload.budget_items))
    return get_budget(db, identity, budget.id)


def update_budget(db: Session, identity: Identity, budget_id: int, payload: BudgetUpdate) -> models.Budget:
    budget = get_budget(db, identity, budget_id)
    changes = payload.model_dump(exclude_unset=True, exclude={"budget_items"})

    start = changes.get("start_date") or budget.start_date
    end = changes.get("end_date") or budget.end_date
    if end <= start:
        raise ValidationFailed("End date must be after start date", field="endDate")
    if payload.budget_items is not None:
        _check_item_categories(db, identity, payload.budget_items)

    try:
        for field, value in changes.items():
            if value is None:
                continue
            setattr(budget, field, value)
        if payload.budget_items is not None:
            # full replacement: the old rows are deleted, the new ones inserted
            budget.budget_items.clear()
            db.flush()
            budget.budget_items.extend(_build_items(payload.budget_items))
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.expire_all()
    return get_budget(db, identity, budget_id)


def delete_budget(db: Session, identity: Identity, budget_id: int) -> None:
    budget = get_budget(db, identity, budget_id)
    db.delete(budget)
    db.commit()
    logger.info("user %s deleted budget %s", identity.user_id, budget_id)
