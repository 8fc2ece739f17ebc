from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from expense_tracker.db.core import NotFoundError, get_db
from expense_tracker.models.transaction import (
    ALL_FILTER,
    TransactionCreate,
    TransactionUpdate,
    TransactionResponse,
    TransactionFilter,
    TransactionPage,
    TransactionStats,
    TransactionTypeEnum,
)
from expense_tracker.crud.crud_transaction import (
    create_db_transaction,
    read_db_transaction,
    read_db_transactions,
    update_db_transaction,
    delete_db_transaction,
    get_transaction_stats,
)
from expense_tracker.routers.deps import get_current_user_id

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)

@router.post("/", status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionResponse:
    try:
        db_transaction = create_db_transaction(db, user_id, transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)

@router.get("/")
def read_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    transaction_type: Optional[str] = Query(None, alias="type", pattern="^(income|expense|all)$"),
    category: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionPage:
    """
    List transactions, newest first. `type=all` and `category=all` disable those filters.
    """
    filters = TransactionFilter(
        transaction_type=None if transaction_type in (None, ALL_FILTER) else TransactionTypeEnum(transaction_type),
        category=category,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    transactions, pagination = read_db_transactions(db, user_id, filters, page=page, limit=limit)
    return TransactionPage(
        transactions=[TransactionResponse.model_validate(t) for t in transactions],
        pagination=pagination,
    )

@router.get("/stats")
def read_transaction_stats(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionStats:
    """
    Totals by type, expense totals by category, and monthly totals.
    """
    return get_transaction_stats(db, user_id, date_from=date_from, date_to=date_to)

@router.get("/{transaction_id}")
def read_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionResponse:
    db_transaction = read_db_transaction(db, transaction_id=transaction_id, user_id=user_id)
    if not db_transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return TransactionResponse.model_validate(db_transaction)

@router.put("/{transaction_id}")
def update_transaction(
    transaction_id: int,
    transaction: TransactionUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> TransactionResponse:
    try:
        db_transaction = update_db_transaction(db, transaction_id=transaction_id, user_id=user_id, transaction_updates=transaction)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Transaction not found") from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionResponse.model_validate(db_transaction)

@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
) -> dict:
    """
    Soft-delete a transaction. It stops counting towards budgets and statistics.
    """
    try:
        delete_db_transaction(db, transaction_id=transaction_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail="Transaction not found") from e
    return {"message": "Transaction deleted successfully"}
