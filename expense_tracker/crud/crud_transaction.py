from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from sqlalchemy import or_, desc, asc, func, cast, extract, String
from typing import Optional, List, Tuple
from datetime import datetime, date
from decimal import Decimal
import math

from expense_tracker.db.core import TransactionDB, UserDB, NotFoundError, TransactionType, PaymentMethod, RecurringFrequency
from expense_tracker.models.transaction import (
    ALL_FILTER,
    TransactionCreate,
    TransactionUpdate,
    TransactionFilter,
    TransactionStats,
    TypeTotal,
    CategoryTotal,
    MonthlyTotal,
    Pagination,
)
from expense_tracker.logging_config import get_logger

logger = get_logger(__name__)

# Columns an update may clear; every other column is NOT NULL
NULLABLE_UPDATE_FIELDS = {"comments", "recurring_frequency"}


def _to_decimal(value) -> Decimal:
    """SQLite hands aggregates back as floats; normalise to cents."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))


def _active_transactions(db: Session, user_id: int):
    return db.query(TransactionDB).filter(
        TransactionDB.user_id == user_id,
        TransactionDB.is_deleted.is_(False)
    )


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, user_id: int, transaction_data: TransactionCreate) -> TransactionDB:
    """Create a new transaction"""

    user = db.query(UserDB).filter(UserDB.id == user_id).first()
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")

    db_transaction = TransactionDB(
        user_id=user_id,
        amount=transaction_data.amount,
        transaction_type=TransactionType(transaction_data.transaction_type.value),
        category=transaction_data.category,
        subcategory=transaction_data.subcategory,
        description=transaction_data.description,
        transaction_date=transaction_data.transaction_date,
        payment_method=PaymentMethod(transaction_data.payment_method.value),
        location=transaction_data.location,
        tags=transaction_data.tags,
        comments=transaction_data.comments,
        is_recurring=transaction_data.is_recurring,
        recurring_frequency=RecurringFrequency(transaction_data.recurring_frequency.value) if transaction_data.recurring_frequency else None,
        currency=transaction_data.currency.upper(),
        exchange_rate=transaction_data.exchange_rate,
        is_deleted=False,
        created_at=datetime.utcnow(),
        updated_at=datetime.utcnow()
    )

    try:
        db.add(db_transaction)
        db.commit()
        db.refresh(db_transaction)
    except IntegrityError:
        db.rollback()
        raise ValueError("Transaction creation failed due to database constraint")

    logger.info(f"Created {db_transaction.transaction_type.value} transaction {db_transaction.id} for user {user_id}")
    return db_transaction


def read_db_transaction(db: Session, transaction_id: int, user_id: int) -> Optional[TransactionDB]:
    """Read a transaction by ID. Soft-deleted transactions are not returned."""
    return _active_transactions(db, user_id).filter(TransactionDB.id == transaction_id).first()


def read_db_transactions(db: Session, user_id: int, filters: Optional[TransactionFilter] = None,
                         page: int = 1, limit: int = 10) -> Tuple[List[TransactionDB], Pagination]:
    """List a user's transactions, newest first, with filtering and pagination"""

    query = _active_transactions(db, user_id)

    if filters:
        if filters.transaction_type:
            query = query.filter(TransactionDB.transaction_type == TransactionType(filters.transaction_type.value))
        if filters.category and filters.category != ALL_FILTER:
            query = query.filter(TransactionDB.category == filters.category)
        if filters.date_from:
            query = query.filter(TransactionDB.transaction_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(TransactionDB.transaction_date <= filters.date_to)
        if filters.search:
            pattern = f"%{filters.search}%"
            query = query.filter(or_(
                TransactionDB.description.ilike(pattern),
                TransactionDB.category.ilike(pattern),
                cast(TransactionDB.tags, String).ilike(pattern)
            ))

    total = query.count()
    transactions = (
        query.order_by(desc(TransactionDB.transaction_date), desc(TransactionDB.id))
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    pagination = Pagination(current=page, pages=math.ceil(total / limit) if limit else 0, total=total)
    return transactions, pagination


def update_db_transaction(db: Session, transaction_id: int, user_id: int,
                          transaction_updates: TransactionUpdate) -> TransactionDB:
    """Update an existing, non-deleted transaction"""

    db_transaction = read_db_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    update_data = transaction_updates.model_dump(exclude_unset=True)
    if not update_data:
        raise ValueError("No update fields provided")

    null_fields = [field for field, value in update_data.items()
                   if value is None and field not in NULLABLE_UPDATE_FIELDS]
    if null_fields:
        raise ValueError(f"Fields cannot be null: {', '.join(null_fields)}")

    for field, value in update_data.items():
        if field == "transaction_type" and value is not None:
            value = TransactionType(value.value)
        elif field == "payment_method" and value is not None:
            value = PaymentMethod(value.value)
        elif field == "recurring_frequency" and value is not None:
            value = RecurringFrequency(value.value)
        setattr(db_transaction, field, value)

    db_transaction.updated_at = datetime.utcnow()

    try:
        db.commit()
        db.refresh(db_transaction)
        return db_transaction
    except IntegrityError:
        db.rollback()
        raise ValueError("Transaction update failed due to database constraint")


def delete_db_transaction(db: Session, transaction_id: int, user_id: int) -> TransactionDB:
    """Soft-delete a transaction by setting its is_deleted flag"""

    db_transaction = read_db_transaction(db, transaction_id, user_id)
    if not db_transaction:
        raise NotFoundError(f"Transaction with id {transaction_id} not found")

    db_transaction.is_deleted = True
    db_transaction.updated_at = datetime.utcnow()

    db.commit()
    db.refresh(db_transaction)
    logger.info(f"Soft-deleted transaction {transaction_id} for user {user_id}")
    return db_transaction


# ===== STATISTICS =====

def get_transaction_stats(db: Session, user_id: int, date_from: Optional[date] = None,
                          date_to: Optional[date] = None) -> TransactionStats:
    """Totals per type, expense totals per category, and per-month totals"""

    conditions = [
        TransactionDB.user_id == user_id,
        TransactionDB.is_deleted.is_(False),
    ]
    if date_from:
        conditions.append(TransactionDB.transaction_date >= date_from)
    if date_to:
        conditions.append(TransactionDB.transaction_date <= date_to)

    total = func.sum(TransactionDB.amount)
    count = func.count(TransactionDB.id)

    overview_rows = (
        db.query(TransactionDB.transaction_type, total, count)
        .filter(*conditions)
        .group_by(TransactionDB.transaction_type)
        .all()
    )

    category_rows = (
        db.query(TransactionDB.category, total.label("total"), count)
        .filter(*conditions, TransactionDB.transaction_type == TransactionType.EXPENSE)
        .group_by(TransactionDB.category)
        .order_by(desc("total"))
        .all()
    )

    year = extract("year", TransactionDB.transaction_date)
    month = extract("month", TransactionDB.transaction_date)
    monthly_rows = (
        db.query(year.label("year"), month.label("month"), TransactionDB.transaction_type, total, count)
        .filter(*conditions)
        .group_by(year, month, TransactionDB.transaction_type)
        .order_by(asc("year"), asc("month"), TransactionDB.transaction_type)
        .all()
    )

    return TransactionStats(
        overview=[
            TypeTotal(transaction_type=t_type.value, total=_to_decimal(t_total), count=t_count)
            for t_type, t_total, t_count in overview_rows
        ],
        categories=[
            CategoryTotal(category=c_name, total=_to_decimal(c_total), count=c_count)
            for c_name, c_total, c_count in category_rows
        ],
        monthly=[
            MonthlyTotal(year=int(m_year), month=int(m_month), transaction_type=t_type.value,
                         total=_to_decimal(m_total), count=m_count)
            for m_year, m_month, t_type, m_total, m_count in monthly_rows
        ],
    )
