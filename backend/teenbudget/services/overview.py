# teenbudget/services/overview.py
"""Dashboard view of spending against the expense lines of active budgets.

All transactions for the union of the active budgets' windows are fetched in a
single query; each budget item is then matched in memory against its own
budget's window, so the number of queries does not grow with the number of
budget items.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from teenbudget.core.errors import InternalError
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.common import MAX_PAGE_LIMIT
from teenbudget.services.transactions import ZERO, to_decimal

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
NEAR_THRESHOLD = Decimal("80")
OVERVIEW_LIMIT = 5

DEFAULT_ICON = "📦"
DEFAULT_COLOR = "bg-gray-100 text-gray-800"


@dataclass(frozen=True)
class OverviewRow:
    budget_id: int
    budget_name: str
    category_name: str
    category_icon: str
    category_color: str
    budget_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    percentage: Decimal
    status: str
    period: models.BudgetPeriod
    start_date: datetime
    end_date: datetime


def spending_status(percentage: Decimal) -> str:
    if percentage >= HUNDRED:
        return "over"
    if percentage >= NEAR_THRESHOLD:
        return "near"
    return "under"


def _spent(transactions: Iterable[models.Transaction], item: models.BudgetItem, budget: models.Budget) -> Decimal:
    total = ZERO
    for txn in transactions:
        if txn.category_id != item.category_id:
            continue
        if txn.type != models.TransactionType.EXPENSE:
            continue
        if not (budget.start_date <= txn.date <= budget.end_date):
            continue
        total += to_decimal(txn.amount)
    return total


def build_overview_rows(
    budgets: Sequence[models.Budget],
    transactions: Sequence[models.Transaction],
    limit: int = OVERVIEW_LIMIT,
) -> List[OverviewRow]:
    """One row per (budget, expense item), highest percentage first, top ``limit``."""
    rows: List[OverviewRow] = []
    for budget in budgets:
        for item in budget.budget_items:
            # income lines are not part of an "am I overspending" view
            if item.type != models.TransactionType.EXPENSE:
                continue

            budget_amount = to_decimal(item.amount)
            spent = _spent(transactions, item, budget)
            raw_percentage = spent / budget_amount * HUNDRED if budget_amount > 0 else ZERO
            category = item.category

            rows.append(
                OverviewRow(
                    budget_id=budget.id,
                    budget_name=budget.name,
                    category_name=category.name if category else "Unknown Category",
                    category_icon=(category.icon if category else None) or DEFAULT_ICON,
                    category_color=(category.color if category else None) or DEFAULT_COLOR,
                    budget_amount=budget_amount,
                    spent_amount=spent,
                    remaining_amount=budget_amount - spent,
                    percentage=min(raw_percentage, HUNDRED),
                    status=spending_status(raw_percentage),
                    period=budget.period,
                    start_date=budget.start_date,
                    end_date=budget.end_date,
                )
            )

    # stable sort keeps budget/item order among equal percentages
    rows.sort(key=lambda row: row.percentage, reverse=True)
    return rows[:limit]


def budget_overview(db: Session, identity: Identity, limit: int = OVERVIEW_LIMIT) -> List[OverviewRow]:
    budgets = (
        db.query(models.Budget)
        .options(selectinload(models.Budget.budget_items).selectinload(models.BudgetItem.category))
        .filter(models.Budget.user_id == identity.user_id, models.Budget.is_active.is_(True))
        .order_by(models.Budget.start_date.desc(), models.Budget.id.desc())
        .limit(MAX_PAGE_LIMIT)
        .all()
    )
    if not budgets:
        return []

    window_start = min(b.start_date for b in budgets)
    window_end = max(b.end_date for b in budgets)

    try:
        transactions = (
            db.query(models.Transaction)
            .filter(
                models.Transaction.user_id == identity.user_id,
                models.Transaction.date >= window_start,
                models.Transaction.date <= window_end,
            )
            .all()
        )
    except SQLAlchemyError as exc:
        logger.exception("budget overview: transaction fetch failed for user %s", identity.user_id)
        raise InternalError("Failed to load transactions for budget overview") from exc

    logger.debug(
        "budget overview for user %s: %d budgets, %d transactions in %s..%s",
        identity.user_id, len(budgets), len(transactions), window_start, window_end,
    )
    return build_overview_rows(budgets, transactions, limit=limit)
