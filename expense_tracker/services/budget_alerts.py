"""
Budget Alert Evaluation

Alerts are derived on request and never stored. A budget raises an alert
when its progress reaches its own alert_threshold; at 100% or more the alert
is "exceeded", otherwise it is a "warning". Budgets below threshold produce
nothing.
"""
from sqlalchemy.orm import Session
from sqlalchemy import asc
from decimal import Decimal, ROUND_HALF_UP
from typing import List

from expense_tracker.db.core import BudgetDB
from expense_tracker.models.budget import AlertType, BudgetAlert, BudgetResponse
from expense_tracker.services.budget_reconciler import reconcile_many
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)

EXCEEDED_AT = Decimal("100")


def round_progress(progress: Decimal) -> int:
    """Round a progress percentage to an integer, halves rounding up."""
    return int(Decimal(progress).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def classify_progress(progress: Decimal) -> AlertType:
    return AlertType.EXCEEDED if progress >= EXCEEDED_AT else AlertType.WARNING


def build_alert(budget: BudgetDB) -> BudgetAlert:
    progress = budget.progress
    return BudgetAlert(
        budget=BudgetResponse.model_validate(budget),
        progress=round_progress(progress),
        spent=budget.spent,
        remaining=budget.remaining,
        type=classify_progress(progress),
    )


def evaluate(db: Session, user_id: int) -> List[BudgetAlert]:
    """
    Reconcile the user's active, notifying budgets and return an alert for each
    one at or above its threshold, in budget creation order.
    """
    budgets = (
        db.query(BudgetDB)
        .filter(
            BudgetDB.user_id == user_id,
            BudgetDB.is_active.is_(True),
            BudgetDB.notifications.is_(True),
        )
        .order_by(asc(BudgetDB.created_at), asc(BudgetDB.id))
        .all()
    )

    reconcile_many(db, budgets)

    alerts = [
        build_alert(budget)
        for budget in budgets
        if budget.progress >= Decimal(budget.alert_threshold)
    ]

    logger.info(f"Evaluated {len(budgets)} budget(s) for user {user_id}: {len(alerts)} alert(s)")
    return alerts
