# teenbudget/services/transactions.py
import calendar
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session, joinedload

from teenbudget.core.errors import NotFoundError, ValidationFailed
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.common import Pagination, build_pagination, utcnow
from teenbudget.schemas.transaction import (
    SortOrder, TransactionCreate, TransactionFilters, TransactionSortKey, TransactionUpdate,
)
from teenbudget.services.categories import get_owned_category

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
TYPE_MISMATCH = "Transaction type must match category type"

_SORT_COLUMNS = {
    TransactionSortKey.date: models.Transaction.date,
    TransactionSortKey.amount: models.Transaction.amount,
    TransactionSortKey.description: models.Transaction.description,
}


def to_decimal(amount) -> Decimal:
    if amount is None:
        return ZERO
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))


def _owned_goal(db: Session, identity: Identity, goal_id: int) -> models.SavingsGoal:
    goal = (
        db.query(models.SavingsGoal)
        .filter(models.SavingsGoal.id == goal_id, models.SavingsGoal.user_id == identity.user_id)
        .first()
    )
    if not goal:
        raise NotFoundError("Savings goal not found")
    return goal


def get_transaction(db: Session, identity: Identity, txn_id: int) -> models.Transaction:
    txn = (
        db.query(models.Transaction)
        .options(joinedload(models.Transaction.category))
        .filter(models.Transaction.id == txn_id, models.Transaction.user_id == identity.user_id)
        .first()
    )
    if not txn:
        raise NotFoundError("Transaction not found")
    return txn


def list_transactions(
    db: Session, identity: Identity, filters: TransactionFilters
) -> Tuple[List[models.Transaction], Pagination]:
    """
    Paginated transactions for the caller, with optional type, category,
    date range, amount range and description search filters.
    """
    q = db.query(models.Transaction).filter(models.Transaction.user_id == identity.user_id)

    if filters.type:
        q = q.filter(models.Transaction.type == filters.type)
    if filters.category_id:
        q = q.filter(models.Transaction.category_id == filters.category_id)
    if filters.start_date:
        q = q.filter(models.Transaction.date >= filters.start_date)
    if filters.end_date:
        q = q.filter(models.Transaction.date <= filters.end_date)
    if filters.min_amount:
        q = q.filter(models.Transaction.amount >= filters.min_amount)
    if filters.max_amount:
        q = q.filter(models.Transaction.amount <= filters.max_amount)
    if filters.search:
        q = q.filter(models.Transaction.description.icontains(filters.search, autoescape=True))

    total = q.count()

    column = _SORT_COLUMNS[filters.sort_by]
    if filters.sort_order == SortOrder.asc:
        ordering = (column.asc(), models.Transaction.id.asc())
    else:
        ordering = (column.desc(), models.Transaction.id.desc())

    items = (
        q.options(joinedload(models.Transaction.category))
        .order_by(*ordering)
        .offset((filters.page - 1) * filters.limit)
        .limit(filters.limit)
        .all()
    )
    return items, build_pagination(filters.page, filters.limit, total)


def create_transaction(db: Session, identity: Identity, payload: TransactionCreate) -> models.Transaction:
    category = get_owned_category(db, identity, payload.category_id)
    if payload.type != category.type:
        raise ValidationFailed(TYPE_MISMATCH, field="type")
    if payload.savings_goal_id is not None:
        _owned_goal(db, identity, payload.savings_goal_id)

    txn = models.Transaction(
        user_id=identity.user_id,
        type=payload.type,
        amount=payload.amount,
        description=payload.description,
        date=payload.date,
        category_id=category.id,
        savings_goal_id=payload.savings_goal_id,
        receipt_url=payload.receipt_url,
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    return txn


def update_transaction(
    db: Session, identity: Identity, txn_id: int, payload: TransactionUpdate
) -> models.Transaction:
    txn = get_transaction(db, identity, txn_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("category_id") is not None:
        category = get_owned_category(db, identity, changes["category_id"])
        txn_type = changes.get("type") or txn.type
        if txn_type != category.type:
            raise ValidationFailed(TYPE_MISMATCH, field="type")
    elif changes.get("type") is not None:
        # no new category: the type has to agree with the one already linked
        current = db.get(models.Category, txn.category_id)
        if current is not None and changes["type"] != current.type:
            raise ValidationFailed(TYPE_MISMATCH, field="type")

    if changes.get("savings_goal_id") is not None:
        _owned_goal(db, identity, changes["savings_goal_id"])

    for field, value in changes.items():
        # nullable columns may be cleared; the rest ignore explicit nulls
        if value is None and field not in ("description", "savings_goal_id", "receipt_url"):
            continue
        setattr(txn, field, value)

    db.commit()
    db.refresh(txn)
    return txn


def delete_transaction(db: Session, identity: Identity, txn_id: int) -> None:
    txn = get_transaction(db, identity, txn_id)
    db.delete(txn)
    db.commit()


@dataclass(frozen=True)
class TransactionStats:
    total_balance: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal
    current_month_balance: Decimal
    previous_month_balance: Decimal
    balance_change: Decimal
    balance_change_percent: Decimal


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """First instant and last second (23:59:59) of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59)


def _previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def _net(rows: Iterable[Tuple[Decimal, models.TransactionType]]) -> Tuple[Decimal, Decimal]:
    income = ZERO
    expenses = ZERO
    for amount, txn_type in rows:
        if txn_type == models.TransactionType.INCOME:
            income += to_decimal(amount)
        else:
            expenses += to_decimal(amount)
    return income, expenses


def compute_stats(rows: List[Tuple[Decimal, models.TransactionType, datetime]], now: datetime) -> TransactionStats:
    """Balance figures over (amount, type, date) rows relative to ``now``."""
    cur_start, cur_end = month_bounds(now.year, now.month)
    prev_start, prev_end = month_bounds(*_previous_month(now.year, now.month))

    all_income, all_expenses = _net((amount, t) for amount, t, _ in rows)
    monthly_income, monthly_expenses = _net(
        (amount, t) for amount, t, d in rows if cur_start <= d <= cur_end
    )
    prev_income, prev_expenses = _net(
        (amount, t) for amount, t, d in rows if prev_start <= d <= prev_end
    )

    current_balance = monthly_income - monthly_expenses
    previous_balance = prev_income - prev_expenses
    change = current_balance - previous_balance
    if previous_balance != 0:
        change_percent = change / abs(previous_balance) * 100
    else:
        change_percent = ZERO

    return TransactionStats(
        total_balance=all_income - all_expenses,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        current_month_balance=current_balance,
        previous_month_balance=previous_balance,
        balance_change=change,
        balance_change_percent=change_percent,
    )


def transaction_stats(db: Session, identity: Identity, now: Optional[datetime] = None) -> TransactionStats:
    rows = (
        db.query(models.Transaction.amount, models.Transaction.type, models.Transaction.date)
        .filter(models.Transaction.user_id == identity.user_id)
        .all()
    )
    return compute_stats([tuple(r) for r in rows], now or utcnow())
