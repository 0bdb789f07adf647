# teenbudget/services/savings_goals.py
"""One ACTIVE savings goal per user.

A goal's saved amount is never stored: it is the sum of the INCOME
transactions linked to it, recomputed on every read. Status only moves
forward, ACTIVE -> ACHIEVED or ACTIVE -> DISCARDED.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teenbudget.core.errors import BadRequestError, ConflictError, NotFoundError, ValidationFailed
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.common import utcnow
from teenbudget.schemas.savings_goal import SavingsGoalCreate, SavingsGoalUpdate
from teenbudget.services.transactions import ZERO, to_decimal

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
ALREADY_ACTIVE = "Active savings goal already exists"


@dataclass(frozen=True)
class GoalProgress:
    current_amount: Decimal
    progress: Decimal
    is_deadline_missed: bool


@dataclass(frozen=True)
class GoalView:
    goal: models.SavingsGoal
    progress: GoalProgress


def goal_progress(goal: models.SavingsGoal, current_amount: Decimal, now: datetime) -> GoalProgress:
    target = to_decimal(goal.target_amount)
    progress = current_amount / target * HUNDRED if target > 0 else ZERO
    return GoalProgress(
        current_amount=current_amount,
        progress=min(progress, HUNDRED),
        is_deadline_missed=goal.deadline is not None and now > goal.deadline,
    )


def linked_income_total(db: Session, goal_id: int) -> Decimal:
    total = (
        db.query(func.sum(models.Transaction.amount))
        .filter(
            models.Transaction.savings_goal_id == goal_id,
            models.Transaction.type == models.TransactionType.INCOME,
        )
        .scalar()
    )
    return to_decimal(total)


def _view(db: Session, goal: models.SavingsGoal, now: Optional[datetime]) -> GoalView:
    return GoalView(goal=goal, progress=goal_progress(goal, linked_income_total(db, goal.id), now or utcnow()))


def _owned_goal(db: Session, identity: Identity, goal_id: int) -> models.SavingsGoal:
    goal = (
        db.query(models.SavingsGoal)
        .filter(models.SavingsGoal.id == goal_id, models.SavingsGoal.user_id == identity.user_id)
        .first()
    )
    if not goal:
        raise NotFoundError("Savings goal not found")
    return goal


def _active_goal(db: Session, identity: Identity) -> Optional[models.SavingsGoal]:
    return (
        db.query(models.SavingsGoal)
        .filter(
            models.SavingsGoal.user_id == identity.user_id,
            models.SavingsGoal.status == models.SavingsGoalStatus.ACTIVE,
        )
        .first()
    )


def get_active_goal(db: Session, identity: Identity, now: Optional[datetime] = None) -> Optional[GoalView]:
    goal = _active_goal(db, identity)
    if goal is None:
        return None
    return _view(db, goal, now)


def get_goal(db: Session, identity: Identity, goal_id: int, now: Optional[datetime] = None) -> GoalView:
    return _view(db, _owned_goal(db, identity, goal_id), now)


def create_goal(
    db: Session, identity: Identity, payload: SavingsGoalCreate, now: Optional[datetime] = None
) -> GoalView:
    now = now or utcnow()
    if _active_goal(db, identity) is not None:
        raise ConflictError(
            ALREADY_ACTIVE,
            details="You can only have one active savings goal at a time. "
            "Complete or discard your current goal before creating a new one.",
        )
    if payload.deadline is not None and payload.deadline <= now:
        raise ValidationFailed("Deadline must be in the future", field="deadline")

    goal = models.SavingsGoal(
        user_id=identity.user_id,
        title=payload.title,
        description=payload.description,
        target_amount=payload.target_amount,
        deadline=payload.deadline,
        status=models.SavingsGoalStatus.ACTIVE,
    )
    db.add(goal)
    try:
        db.commit()
    except IntegrityError as exc:
        # the partial unique index caught a concurrent create
        db.rollback()
        raise ConflictError(ALREADY_ACTIVE) from exc
    db.refresh(goal)
    logger.info("user %s created savings goal %s", identity.user_id, goal.id)
    return _view(db, goal, now)


def update_goal(
    db: Session, identity: Identity, goal_id: int, payload: SavingsGoalUpdate, now: Optional[datetime] = None
) -> GoalView:
    goal = _owned_goal(db, identity, goal_id)
    if goal.status != models.SavingsGoalStatus.ACTIVE:
        raise BadRequestError("Cannot update completed or discarded savings goal")

    for field, value in payload.model_dump(exclude_unset=True).items():
        # description and deadline may be cleared, the rest are required
        if value is None and field not in ("description", "deadline"):
            continue
        setattr(goal, field, value)

    db.commit()
    db.refresh(goal)
    return _view(db, goal, now)


def change_goal_status(
    db: Session,
    identity: Identity,
    goal_id: int,
    new_status: models.SavingsGoalStatus,
    now: Optional[datetime] = None,
) -> GoalView:
    goal = _owned_goal(db, identity, goal_id)
    if goal.status == new_status:
        raise BadRequestError(f"Savings goal is already {new_status.value.lower()}")
    if goal.status != models.SavingsGoalStatus.ACTIVE and new_status == models.SavingsGoalStatus.ACTIVE:
        raise BadRequestError("Cannot reactivate a completed or discarded savings goal")
    if goal.status != models.SavingsGoalStatus.ACTIVE:
        # ACHIEVED and DISCARDED are terminal
        raise BadRequestError(f"Cannot change status of a {goal.status.value.lower()} savings goal")

    previous = goal.status
    goal.status = new_status
    db.commit()
    db.refresh(goal)
    logger.info("savings goal %s: %s -> %s", goal.id, previous.value, new_status.value)
    return _view(db, goal, now)


def delete_goal(db: Session, identity: Identity, goal_id: int) -> int:
    """Unlink the goal's transactions, then delete it. Returns the number unlinked."""
    goal = _owned_goal(db, identity, goal_id)
    try:
        unlinked = (
            db.query(models.Transaction)
            .filter(models.Transaction.savings_goal_id == goal.id)
            .update({models.Transaction.savings_goal_id: None}, synchronize_session="fetch")
        )
        db.delete(goal)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("deleted savings goal %s, unlinked %d transaction(s)", goal_id, unlinked)
    return unlinked
