# teenbudget/api/v1/savings_goal.py
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from teenbudget.api.v1.deps import get_current_identity, get_db
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.common import SuccessOut
from teenbudget.schemas.savings_goal import (
    SavingsGoalCreate, SavingsGoalOut, SavingsGoalStatusUpdate, SavingsGoalUpdate,
)
from teenbudget.services import savings_goals as service

router = APIRouter(tags=["savings-goal"])

def goal_to_out(view: service.GoalView) -> SavingsGoalOut:
    out = SavingsGoalOut.model_validate(view.goal)
    out.current_amount = float(view.progress.current_amount)
    out.progress = float(view.progress.progress)
    out.is_deadline_missed = view.progress.is_deadline_missed
    return out

@router.get("", response_model=Optional[SavingsGoalOut])
def get_active_goal(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    """The caller's ACTIVE goal, or null."""
    view = service.get_active_goal(db, identity)
    return goal_to_out(view) if view else None

@router.post("", response_model=SavingsGoalOut, status_code=status.HTTP_201_CREATED)
def create_goal(
    payload: SavingsGoalCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return goal_to_out(service.create_goal(db, identity, payload))

@router.get("/{goal_id}", response_model=SavingsGoalOut)
def get_goal(goal_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return goal_to_out(service.get_goal(db, identity, goal_id))

@router.put("/{goal_id}", response_model=SavingsGoalOut)
def update_goal(
    goal_id: int,
    payload: SavingsGoalUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return goal_to_out(service.update_goal(db, identity, goal_id, payload))

@router.patch("/{goal_id}/status", response_model=SavingsGoalOut)
def change_status(
    goal_id: int,
    payload: SavingsGoalStatusUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return goal_to_out(service.change_goal_status(db, identity, goal_id, payload.status))

@router.delete("/{goal_id}", response_model=SuccessOut)
def delete_goal(goal_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    service.delete_goal(db, identity, goal_id)
    return SuccessOut()
