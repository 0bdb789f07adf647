# teenbudget/services/categories.py
"""User-scoped category rules: unique names, a type that freezes once used,
and deletion refused while anything still points at the category."""
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teenbudget.core.errors import BadRequestError, ConflictError, NotFoundError
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.category import (
    CategoryCreate, CategoryDetailOut, CategoryOut, CategoryUpdate, CategoryUsage, RecentTransaction,
)

logger = logging.getLogger(__name__)

DUPLICATE_NAME = "Category with this name already exists"

DEFAULT_CATEGORIES = [
    {"name": "Allowance", "icon": "💰", "color": "bg-green-100 text-green-800", "type": models.TransactionType.INCOME},
    {"name": "Part-time Job", "icon": "💼", "color": "bg-green-100 text-green-800", "type": models.TransactionType.INCOME},
    {"name": "Gifts", "icon": "🎁", "color": "bg-green-100 text-green-800", "type": models.TransactionType.INCOME},
    {"name": "Savings", "icon": "🎯", "color": "bg-emerald-100 text-emerald-800", "type": models.TransactionType.INCOME},
    {"name": "Food & Drinks", "icon": "🍔", "color": "bg-orange-100 text-orange-800", "type": models.TransactionType.EXPENSE},
    {"name": "Clothes", "icon": "👕", "color": "bg-purple-100 text-purple-800", "type": models.TransactionType.EXPENSE},
    {"name": "Entertainment", "icon": "🎮", "color": "bg-blue-100 text-blue-800", "type": models.TransactionType.EXPENSE},
    {"name": "Transportation", "icon": "🚌", "color": "bg-yellow-100 text-yellow-800", "type": models.TransactionType.EXPENSE},
    {"name": "School Supplies", "icon": "📚", "color": "bg-indigo-100 text-indigo-800", "type": models.TransactionType.EXPENSE},
    {"name": "Other", "icon": "📦", "color": "bg-slate-100 text-slate-800", "type": models.TransactionType.EXPENSE},
]


def create_default_categories(db: Session, user: models.User) -> None:
    """Add the starter categories to a freshly created user (caller commits)."""
    for fields in DEFAULT_CATEGORIES:
        db.add(models.Category(user_id=user.id, **fields))


def get_owned_category(db: Session, identity: Identity, category_id: int) -> models.Category:
    cat = (
        db.query(models.Category)
        .filter(models.Category.id == category_id, models.Category.user_id == identity.user_id)
        .first()
    )
    if not cat:
        raise NotFoundError("Category not found")
    return cat


def count_transactions(db: Session, identity: Identity, category_id: int) -> int:
    return (
        db.query(func.count(models.Transaction.id))
        .filter(models.Transaction.category_id == category_id, models.Transaction.user_id == identity.user_id)
        .scalar()
    )


def count_budget_items(db: Session, category_id: int) -> int:
    return db.query(func.count(models.BudgetItem.id)).filter(models.BudgetItem.category_id == category_id).scalar()


def _name_taken(db: Session, identity: Identity, name: str, exclude_id: Optional[int] = None) -> bool:
    q = db.query(models.Category.id).filter(
        models.Category.user_id == identity.user_id, models.Category.name == name
    )
    if exclude_id is not None:
        q = q.filter(models.Category.id != exclude_id)
    return q.first() is not None


def list_categories(
    db: Session,
    identity: Identity,
    type: Optional[models.TransactionType] = None,
    include_count: bool = False,
) -> List[CategoryOut]:
    q = db.query(models.Category).filter(models.Category.user_id == identity.user_id)
    if type is not None:
        q = q.filter(models.Category.type == type)
    # income first, then expenses; alphabetical inside each. Native enums sort
    # by declaration order on some backends, so rank the type explicitly.
    type_rank = case((models.Category.type == models.TransactionType.INCOME, 0), else_=1)
    cats = q.order_by(type_rank, models.Category.name.asc()).all()

    counts = {}
    if include_count and cats:
        rows = (
            db.query(models.Transaction.category_id, func.count(models.Transaction.id))
            .filter(models.Transaction.user_id == identity.user_id)
            .group_by(models.Transaction.category_id)
            .all()
        )
        counts = {category_id: n for category_id, n in rows}

    out = []
    for cat in cats:
        item = CategoryOut.model_validate(cat)
        if include_count:
            item.transaction_count = counts.get(cat.id, 0)
        out.append(item)
    return out


def get_category_detail(db: Session, identity: Identity, category_id: int) -> CategoryDetailOut:
    cat = get_owned_category(db, identity, category_id)

    total, average = (
        db.query(func.sum(models.Transaction.amount), func.avg(models.Transaction.amount))
        .filter(models.Transaction.category_id == cat.id, models.Transaction.user_id == identity.user_id)
        .one()
    )
    recent = (
        db.query(models.Transaction)
        .filter(models.Transaction.category_id == cat.id, models.Transaction.user_id == identity.user_id)
        .order_by(models.Transaction.date.desc(), models.Transaction.id.desc())
        .limit(5)
        .all()
    )

    detail = CategoryDetailOut.model_validate(cat)
    detail.transaction_count = count_transactions(db, identity, cat.id)
    detail.budget_item_count = count_budget_items(db, cat.id)
    detail.usage = CategoryUsage(
        total_amount=Decimal(str(total or 0)),
        average_amount=Decimal(str(average or 0)),
        recent_transactions=[RecentTransaction.model_validate(t) for t in recent],
    )
    return detail


def create_category(db: Session, identity: Identity, payload: CategoryCreate) -> models.Category:
    if _name_taken(db, identity, payload.name):
        raise ConflictError(DUPLICATE_NAME)

    cat = models.Category(
        user_id=identity.user_id,
        name=payload.name,
        icon=payload.icon,
        color=payload.color,
        type=payload.type,
    )
    db.add(cat)
    try:
        db.commit()
    except IntegrityError as exc:
        # lost a race against a concurrent create with the same name
        db.rollback()
        raise ConflictError(DUPLICATE_NAME) from exc
    db.refresh(cat)
    logger.info("user %s created category %s (%s)", identity.user_id, cat.id, cat.type.value)
    return cat


def update_category(db: Session, identity: Identity, category_id: int, payload: CategoryUpdate) -> models.Category:
    cat = get_owned_category(db, identity, category_id)
    changes = payload.model_dump(exclude_unset=True)

    new_name = changes.get("name")
    if new_name is not None and new_name != cat.name and _name_taken(db, identity, new_name, exclude_id=cat.id):
        raise ConflictError(DUPLICATE_NAME)

    new_type = changes.get("type")
    if new_type is not None and new_type != cat.type:
        used = count_transactions(db, identity, cat.id)
        if used > 0:
            raise BadRequestError(
                f"Cannot change category type: {used} existing transaction(s) use this category",
                details=f"This category has {used} existing transactions. Create a new category instead.",
            )

    for field, value in changes.items():
        # name and type are required columns; icon and colour may be cleared
        if value is None and field in ("name", "type"):
            continue
        setattr(cat, field, value)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(DUPLICATE_NAME) from exc
    db.refresh(cat)
    return cat


def delete_category(db: Session, identity: Identity, category_id: int) -> None:
    cat = get_owned_category(db, identity, category_id)

    txn_count = count_transactions(db, identity, cat.id)
    if txn_count > 0:
        raise BadRequestError(
            f"Cannot delete category with {txn_count} existing transaction(s)",
            details=f"Found {txn_count} transactions using this category",
        )
    item_count = count_budget_items(db, cat.id)
    if item_count > 0:
        raise BadRequestError(
            f"Cannot delete category with {item_count} existing budget item(s)",
            details=f"Found {item_count} budget items using this category",
        )

    db.delete(cat)
    db.commit()
    logger.info("user %s deleted category %s", identity.user_id, category_id)
