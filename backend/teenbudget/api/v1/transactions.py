# teenbudget/api/v1/transactions.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teenbudget.api.v1.deps import get_current_identity, get_db
from teenbudget.db import models
from teenbudget.schemas.auth import Identity
from teenbudget.schemas.common import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, SuccessOut
from teenbudget.schemas.transaction import (
    SortOrder, TransactionCreate, TransactionFilters, TransactionOut, TransactionPage,
    TransactionSortKey, TransactionStatsOut, TransactionUpdate,
)
from teenbudget.services import transactions as service

router = APIRouter(tags=["transactions"])

@router.get("", response_model=TransactionPage)
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    type: Optional[models.TransactionType] = Query(None),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    min_amount: Optional[Decimal] = Query(None, alias="minAmount", gt=0),
    max_amount: Optional[Decimal] = Query(None, alias="maxAmount", gt=0),
    search: Optional[str] = Query(None, max_length=255),
    sort_by: TransactionSortKey = Query(TransactionSortKey.date, alias="sortBy"),
    sort_order: SortOrder = Query(SortOrder.desc, alias="sortOrder"),
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """
    Paginated transactions for the current user, newest first by default.
    """
    filters = TransactionFilters(
        page=page,
        limit=limit,
        type=type,
        category_id=category_id,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    items, pagination = service.list_transactions(db, identity, filters)
    return TransactionPage(data=[TransactionOut.model_validate(t) for t in items], pagination=pagination)

# declared before /{txn_id} so "stats" is not parsed as an id
@router.get("/stats", response_model=TransactionStatsOut)
def transaction_stats(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    stats = service.transaction_stats(db, identity)
    return TransactionStatsOut.model_validate(stats)

@router.post("", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
def create_transaction(
    payload: TransactionCreate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    txn = service.create_transaction(db, identity, payload)
    return TransactionOut.model_validate(txn)

@router.get("/{txn_id}", response_model=TransactionOut)
def get_transaction(txn_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return TransactionOut.model_validate(service.get_transaction(db, identity, txn_id))

@router.put("/{txn_id}", response_model=TransactionOut)
def update_transaction(
    txn_id: int,
    payload: TransactionUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    txn = service.update_transaction(db, identity, txn_id, payload)
    return TransactionOut.model_validate(txn)

@router.delete("/{txn_id}", response_model=SuccessOut)
def delete_transaction(txn_id: int, identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    service.delete_transaction(db, identity, txn_id)
    return SuccessOut()
