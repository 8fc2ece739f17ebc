"""
Budget Reconciliation Service

Keeps each budget's cached ``spent`` column in step with the expense
transactions it covers. Recomputation is read-triggered: every budget read
path sums the matching transactions afresh and persists the result, so
transaction writes never touch budgets.

A transaction counts towards a budget when it belongs to the budget's owner,
is an expense, has exactly the budget's category (case-sensitive), falls on a
date within [start_date, end_date] inclusive, and is not soft-deleted.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import func, desc
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from expense_tracker.db.core import BudgetDB, TransactionDB, TransactionType
from expense_tracker.models.transaction import ALL_FILTER
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)


def matching_transactions_filter(budget: BudgetDB) -> list:
    """SQL conditions selecting the transactions counted against a budget."""
    return [
        TransactionDB.user_id == budget.user_id,
        TransactionDB.transaction_type == TransactionType.EXPENSE,
        TransactionDB.category == budget.category,
        TransactionDB.transaction_date >= budget.start_date,
        TransactionDB.transaction_date <= budget.end_date,
        TransactionDB.is_deleted.is_(False),
    ]


def calculate_budget_spending(db: Session, budget: BudgetDB) -> Decimal:
    """Sum of matching expense amounts; 0.00 when nothing matches."""

    result = db.query(func.coalesce(func.sum(TransactionDB.amount), 0)).filter(
        *matching_transactions_filter(budget)
    ).scalar()

    return Decimal(str(result)).quantize(Decimal("0.01")) if result else Decimal("0.00")


def _apply_spending(db: Session, budget: BudgetDB) -> BudgetDB:
    budget.spent = calculate_budget_spending(db, budget)
    budget.spent_computed_at = datetime.utcnow()
    db.flush()
    return budget


def _commit_or_rollback(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def reconcile(db: Session, budget: BudgetDB) -> BudgetDB:
    """
    Recompute ``budget.spent`` from its matching transactions and persist it.

    Storage failures roll the session back and propagate to the caller.
    """
    try:
        _apply_spending(db, budget)
    except SQLAlchemyError:
        db.rollback()
        raise
    _commit_or_rollback(db)
    db.refresh(budget)

    logger.debug(f"Reconciled budget {budget.id}: spent={budget.spent}")
    return budget


def reconcile_many(db: Session, budgets: List[BudgetDB]) -> List[BudgetDB]:
    """
    Reconcile budgets one after another and commit them together.

    If any budget fails to recompute or persist, the whole batch is rolled
    back and the error propagates.
    """
    try:
        for budget in budgets:
            _apply_spending(db, budget)
    except SQLAlchemyError:
        db.rollback()
        raise
    _commit_or_rollback(db)

    for budget in budgets:
        db.refresh(budget)

    logger.info(f"Reconciled {len(budgets)} budget(s)")
    return budgets


def reconcile_all(db: Session, user_id: int, active: Optional[bool] = None,
                  category: Optional[str] = None) -> List[BudgetDB]:
    """Reconcile a user's budgets and return them newest first."""

    query = db.query(BudgetDB).filter(BudgetDB.user_id == user_id)

    if active is not None:
        query = query.filter(BudgetDB.is_active.is_(active))

    if category and category != ALL_FILTER:
        query = query.filter(BudgetDB.category == category)

    budgets = query.order_by(desc(BudgetDB.created_at), desc(BudgetDB.id)).all()
    return reconcile_many(db, budgets)
