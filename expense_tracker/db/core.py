import os
from typing import Optional, List
from sqlalchemy import create_engine, ForeignKey, Index, UniqueConstraint, Boolean, String, Text, JSON, DECIMAL, DateTime, Date
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, relationship, mapped_column
from datetime import datetime, date
from decimal import Decimal
import enum


DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///expense_tracker.db")


class NotFoundError(Exception):
    pass


class Base(DeclarativeBase):
    pass


class TransactionType(enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethod(enum.Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    DIGITAL_WALLET = "digital_wallet"
    OTHER = "other"


class RecurringFrequency(enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BudgetPeriod(enum.Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        Index("idx_users_email", "email"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Identity
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Preferences
    currency: Mapped[str] = mapped_column(String(3), default="INR")
    monthly_budget: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0.00"))

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    transactions = relationship("TransactionDB", back_populates="user")
    budgets = relationship("BudgetDB", back_populates="user")


class TransactionDB(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        # Budget reconciliation filters on these columns
        Index("idx_transactions_user_type_category_date", "user_id", "transaction_type", "category", "transaction_date"),
        Index("idx_transactions_user_date", "user_id", "transaction_date"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Basic Transaction Data
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(Enum(TransactionType), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    subcategory: Mapped[str] = mapped_column(String(100), default="")
    description: Mapped[str] = mapped_column(String(200), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Details
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod), default=PaymentMethod.CASH)
    location: Mapped[str] = mapped_column(String(255), default="")
    tags: Mapped[List[str]] = mapped_column(JSON, default=list)
    comments: Mapped[Optional[str]] = mapped_column(Text)

    # Recurrence
    is_recurring: Mapped[bool] = mapped_column(Boolean, default=False)
    recurring_frequency: Mapped[Optional[RecurringFrequency]] = mapped_column(Enum(RecurringFrequency))

    # Currency
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    exchange_rate: Mapped[Decimal] = mapped_column(DECIMAL(15, 6), default=Decimal("1"))

    # Soft delete
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="transactions")


class BudgetDB(Base):
    __tablename__ = "budgets"

    __table_args__ = (
        Index("idx_budgets_user_active", "user_id", "is_active"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)

    # Budget Data
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    period: Mapped[BudgetPeriod] = mapped_column(Enum(BudgetPeriod), default=BudgetPeriod.MONTHLY)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Cached sum of matching expenses, overwritten by every reconciliation
    spent: Mapped[Decimal] = mapped_column(DECIMAL(15, 2), default=Decimal("0.00"), nullable=False)
    spent_computed_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    # Alerting
    alert_threshold: Mapped[Decimal] = mapped_column(DECIMAL(5, 2), default=Decimal("80"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    notifications: Mapped[bool] = mapped_column(Boolean, default=True)

    # Audit Trail
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserDB", back_populates="budgets")

    @property
    def progress(self) -> Decimal:
        """Percentage of the budget consumed. A non-positive amount counts as fully consumed."""
        spent = Decimal(self.spent or 0)
        amount = Decimal(self.amount or 0)
        if amount <= 0:
            return Decimal("100")
        return spent / amount * 100

    @property
    def remaining(self) -> Decimal:
        return Decimal(self.amount or 0) - Decimal(self.spent or 0)


engine = create_engine(DATABASE_URL, echo=os.getenv("SQL_ECHO", "false").lower() == "true")
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    finally:
        database.close()
