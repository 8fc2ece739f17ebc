from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import desc
from typing import Optional, List, Tuple
from datetime import datetime
from decimal import Decimal

from expense_tracker.db.core import BudgetDB, UserDB, TransactionDB, NotFoundError, BudgetPeriod
from expense_tracker.models.budget import BudgetCreate, BudgetUpdate
from expense_tracker.services.budget_reconciler import reconcile, matching_transactions_filter
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)


# ===== DATABASE OPERATIONS =====

def create_db_budget(db: Session, user_id: int, budget_data: BudgetCreate) -> BudgetDB:
    """Create a new budget. spent starts at zero until the first reconciliation."""

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    db_budget = BudgetDB(
        user_id=user_id,
        name=budget_data.name,
        amount=budget_data.amount,
        spent=Decimal("0.00"),
        category=budget_data.category,
        period=BudgetPeriod(budget_data.period.value),
        start_date=budget_data.start_date,
        end_date=budget_data.end_date,
        alert_threshold=budget_data.alert_threshold,
        is_active=budget_data.is_active,
        notifications=budget_data.notifications,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_budget)
        db.commit()
        db.refresh(db_budget)
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget creation failed due to database constraint")

    logger.info(f"Created budget {db_budget.id} '{db_budget.name}' for user {user_id}")
    return db_budget


def read_db_budget(db: Session, budget_id: int, user_id: int) -> Optional[BudgetDB]:
    """Read a budget by ID, scoped to its owner"""
    return db.query(BudgetDB).filter(
        BudgetDB.id == budget_id,
        BudgetDB.user_id == user_id
    ).first()


def read_budget_detail(db: Session, budget_id: int, user_id: int,
                       recent_limit: int = 10) -> Tuple[BudgetDB, List[TransactionDB]]:
    """Reconcile a budget and fetch the most recent expenses counted against it"""

    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    reconcile(db, db_budget)

    recent_transactions = (
        db.query(TransactionDB)
        .filter(*matching_transactions_filter(db_budget))
        .order_by(desc(TransactionDB.transaction_date), desc(TransactionDB.id))
        .limit(recent_limit)
        .all()
    )
    return db_budget, recent_transactions


def update_db_budget(db: Session, budget_id: int, user_id: int, budget_updates: BudgetUpdate) -> BudgetDB:
    """Update an existing budget"""

    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    update_data = budget_updates.model_dump(exclude_unset=True)
    if not update_data:
        raise ValueError("No update fields provided")

    null_fields = [field for field, value in update_data.items() if value is None]
    if null_fields:
        raise ValueError(f"Fields cannot be null: {', '.join(null_fields)}")

    # Validate the resulting window against whichever dates are not being changed
    start_date = update_data.get('start_date', db_budget.start_date)
    end_date = update_data.get('end_date', db_budget.end_date)
    if end_date <= start_date:
        raise ValueError("end_date must be after start_date")

    for field, value in update_data.items():
        if field == 'period':
            value = BudgetPeriod(value.value)
        setattr(db_budget, field, value)

    db_budget.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_budget)
        return db_budget
    except IntegrityError:
        db.rollback()
        raise ValueError("Budget update failed due to database constraint")


def delete_db_budget(db: Session, budget_id: int, user_id: int) -> bool:
    """Delete a budget"""

    db_budget = read_db_budget(db, budget_id, user_id)
    if not db_budget:
        raise NotFoundError(f"Budget with id {budget_id} not found")

    db.delete(db_budget)
    db.commit()
    logger.info(f"Deleted budget {budget_id} for user {user_id}")
    return True
