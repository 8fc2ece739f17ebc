from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List, Optional

from expense_tracker.crud import crud_budget
from expense_tracker.models import budget as budget_models
from expense_tracker.models.transaction import TransactionResponse
from expense_tracker.services import budget_reconciler, budget_alerts
from expense_tracker.db.core import get_db, NotFoundError
from expense_tracker.routers.deps import get_current_user_id

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)

@router.post("/", response_model=budget_models.BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: budget_models.BudgetCreate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Create a new budget.
    """
    try:
        return crud_budget.create_db_budget(db=db, user_id=user_id, budget_data=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.get("/", response_model=List[budget_models.BudgetResponse])
def read_budgets(
    active: Optional[bool] = None,
    category: Optional[str] = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Retrieve the user's budgets, newest first, with spent recomputed from transactions.
    """
    return budget_reconciler.reconcile_all(db=db, user_id=user_id, active=active, category=category)

@router.get("/alerts", response_model=List[budget_models.BudgetAlert])
def read_budget_alerts(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Alerts for active budgets with notifications enabled whose progress has reached their threshold.
    """
    return budget_alerts.evaluate(db=db, user_id=user_id)

@router.get("/{budget_id}", response_model=budget_models.BudgetDetail)
def read_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Retrieve a reconciled budget with its ten most recent matching expenses.
    """
    try:
        db_budget, recent_transactions = crud_budget.read_budget_detail(db=db, budget_id=budget_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return budget_models.BudgetDetail(
        budget=budget_models.BudgetResponse.model_validate(db_budget),
        recent_transactions=[TransactionResponse.model_validate(t) for t in recent_transactions],
    )

@router.put("/{budget_id}", response_model=budget_models.BudgetResponse)
def update_budget(
    budget_id: int,
    budget: budget_models.BudgetUpdate,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Update a budget. Omitted fields keep their values.
    """
    try:
        return crud_budget.update_db_budget(db=db, budget_id=budget_id, user_id=user_id, budget_updates=budget)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: int,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id)
):
    """
    Delete a budget.
    """
    try:
        crud_budget.delete_db_budget(db=db, budget_id=budget_id, user_id=user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
