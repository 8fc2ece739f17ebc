from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

# Filter value meaning "do not filter on this field"
ALL_FILTER = "all"

# ===== TRANSACTION PYDANTIC MODELS =====

class TransactionTypeEnum(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class PaymentMethodEnum(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    DIGITAL_WALLET = "digital_wallet"
    OTHER = "other"


class RecurringFrequencyEnum(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransactionCreate(BaseModel):
    amount: Decimal = Field(..., ge=Decimal("0.01"), description="Transaction amount, always positive")
    transaction_type: TransactionTypeEnum = Field(..., description="income or expense")
    category: str = Field(..., min_length=1, max_length=100, description="Category name, matched exactly by budgets")
    subcategory: str = Field(default="", max_length=100)
    description: str = Field(..., min_length=1, max_length=200, description="Transaction description")
    transaction_date: date = Field(default_factory=date.today, description="Date of the transaction")
    payment_method: PaymentMethodEnum = Field(default=PaymentMethodEnum.CASH)
    location: str = Field(default="", max_length=255)
    tags: List[str] = Field(default_factory=list)
    comments: Optional[str] = None
    is_recurring: bool = False
    recurring_frequency: Optional[RecurringFrequencyEnum] = None
    currency: str = Field(default="USD", min_length=3, max_length=3)
    exchange_rate: Decimal = Field(default=Decimal("1"), gt=0)

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('Description is required')
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip() for tag in v if tag and tag.strip()]


class TransactionUpdate(BaseModel):
    """Update transaction - all fields optional"""
    amount: Optional[Decimal] = Field(None, ge=Decimal("0.01"))
    transaction_type: Optional[TransactionTypeEnum] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    subcategory: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=200)
    transaction_date: Optional[date] = None
    payment_method: Optional[PaymentMethodEnum] = None
    location: Optional[str] = Field(None, max_length=255)
    tags: Optional[List[str]] = None
    comments: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurring_frequency: Optional[RecurringFrequencyEnum] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class TransactionResponse(BaseModel):
    """Transaction data returned to client"""
    id: int
    amount: Decimal
    transaction_type: TransactionTypeEnum
    category: str
    subcategory: Optional[str]
    description: str
    transaction_date: date
    payment_method: PaymentMethodEnum
    location: Optional[str]
    tags: List[str] = []
    comments: Optional[str]
    is_recurring: bool
    recurring_frequency: Optional[RecurringFrequencyEnum]
    currency: str
    exchange_rate: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionFilter(BaseModel):
    """Filter parameters for transaction queries"""
    transaction_type: Optional[TransactionTypeEnum] = None
    category: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search: Optional[str] = None


class Pagination(BaseModel):
    current: int
    pages: int
    total: int


class TransactionPage(BaseModel):
    transactions: List[TransactionResponse]
    pagination: Pagination


class TypeTotal(BaseModel):
    transaction_type: TransactionTypeEnum
    total: Decimal
    count: int


class CategoryTotal(BaseModel):
    category: str
    total: Decimal
    count: int


class MonthlyTotal(BaseModel):
    year: int
    month: int
    transaction_type: TransactionTypeEnum
    total: Decimal
    count: int


class TransactionStats(BaseModel):
    """Spending statistics over an optional date range"""
    overview: List[TypeTotal]
    categories: List[CategoryTotal]
    monthly: List[MonthlyTotal]
