"""Billing schemas - read and record only, no payment processing"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

SubscriptionStatus = Literal["active", "cancelled", "expired"]
TransactionStatus = Literal["pending", "completed", "failed", "refunded"]


class PlanResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Decimal
    billing_interval: Optional[str] = None
    features: list[str]
    is_active: bool

    class Config:
        from_attributes = True


class SubscriptionCreate(BaseModel):
    user_id: str
    plan_id: str
    expires_at: Optional[datetime] = None


class SubscriptionStatusUpdate(BaseModel):
    status: SubscriptionStatus


class SubscriptionResponse(BaseModel):
    id: str
    user_id: str
    plan_id: str
    plan_name: Optional[str] = None
    plan_price: Optional[Decimal] = None
    status: str
    started_at: datetime
    expires_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime


class TransactionCreate(BaseModel):
    user_id: Optional[str] = None
    subscription_id: Optional[str] = None
    amount: Decimal = Field(gt=0)
    currency: str = "USD"
    status: TransactionStatus = "pending"
    payment_method: Optional[str] = None
    description: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter ISO code")
        return v


class TransactionStatusUpdate(BaseModel):
    status: TransactionStatus


class TransactionResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    subscription_id: Optional[str] = None
    amount: Decimal
    currency: str
    status: str
    payment_method: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
