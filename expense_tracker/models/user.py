from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
import re


# ===== USER PYDANTIC MODELS =====

class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: str = Field(..., description="User's email address")
    password: str = Field(..., min_length=6, description="Password (minimum 6 characters)")
    currency: str = Field(default="INR", min_length=3, max_length=3, description="Preferred currency code")
    monthly_budget: Decimal = Field(default=Decimal("0.00"), ge=0)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        if not re.match(email_pattern, v.strip()):
            raise ValueError('Invalid email format')
        return v.lower().strip()

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return v.upper()


class UserResponse(BaseModel):
    """User data returned to client - no sensitive info"""
    id: int
    email: str
    name: str
    currency: str
    monthly_budget: Optional[Decimal]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
