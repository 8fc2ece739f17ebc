from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from enum import Enum

from expense_tracker.models.transaction import TransactionResponse

# ===== BUDGET PYDANTIC MODELS =====

class BudgetPeriodEnum(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class AlertType(str, Enum):
    WARNING = "warning"
    EXCEEDED = "exceeded"


class BudgetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Budget name")
    amount: Decimal = Field(..., ge=1, description="Spending ceiling for the window")
    category: str = Field(..., min_length=1, max_length=100, description="Transaction category this budget tracks")
    period: BudgetPeriodEnum = Field(default=BudgetPeriodEnum.MONTHLY, description="Informational only")
    start_date: date = Field(..., description="Budget start date (inclusive)")
    end_date: date = Field(..., description="Budget end date (inclusive)")
    alert_threshold: Decimal = Field(default=Decimal("80"), gt=0, le=999, description="Alert when progress reaches this percentage")
    is_active: bool = True
    notifications: bool = True

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @field_validator('end_date')
    @classmethod
    def validate_end_date(cls, v: date, info) -> date:
        if 'start_date' in info.data and v <= info.data['start_date']:
            raise ValueError('end_date must be after start_date')
        return v


class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[Decimal] = Field(None, ge=1)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    period: Optional[BudgetPeriodEnum] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    alert_threshold: Optional[Decimal] = Field(None, gt=0, le=999)
    is_active: Optional[bool] = None
    notifications: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v


class BudgetResponse(BaseModel):
    id: int
    name: str
    amount: Decimal
    spent: Decimal
    spent_computed_at: Optional[datetime] = None
    progress: float
    remaining: Decimal
    category: str
    period: BudgetPeriodEnum
    start_date: date
    end_date: date
    alert_threshold: Decimal
    is_active: bool
    notifications: bool
    created_at: datetime
    updated_at: datetime

    @field_validator('progress', mode='before')
    @classmethod
    def validate_progress(cls, v) -> float:
        return round(float(v), 2)

    class Config:
        from_attributes = True


class BudgetDetail(BaseModel):
    """A reconciled budget with the latest expenses counted against it"""
    budget: BudgetResponse
    recent_transactions: List[TransactionResponse]


class BudgetAlert(BaseModel):
    budget: BudgetResponse
    progress: int
    spent: Decimal
    remaining: Decimal
    type: AlertType
