# teenbudget/api/v1/categories.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teenbudget.api.v1.deps import get_current_identity, get_db
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.category import CategoryCreate, CategoryDetailOut, CategoryOut, CategoryUpdate
from teenbudget.schemas.common import SuccessOut
from teenbudget.services import categories as service

router = APIRouter(tags=["categories"])

@router.get("", response_model=List[CategoryOut], response_model_exclude_none=True)
def list_categories(
    type: Optional[models.TransactionType] = Query(None),
    include_count: bool = Query(False, alias="includeCount"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return service.list_categories(db, identity, type=type, include_count=include_count)

@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED, response_model_exclude_none=True)
def create_category(
    payload: CategoryCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return CategoryOut.model_validate(service.create_category(db, identity, payload))

@router.get("/{category_id}", response_model=CategoryDetailOut)
def get_category(category_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return service.get_category_detail(db, identity, category_id)

@router.put("/{category_id}", response_model=CategoryOut, response_model_exclude_none=True)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    return CategoryOut.model_validate(service.update_category(db, identity, category_id, payload))

@router.delete("/{category_id}", response_model=SuccessOut)
def delete_category(category_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    service.delete_category(db, identity, category_id)
    return SuccessOut()
