"""Pydantic schemas for subscription plans and user subscriptions."""

from decimal import Decimal
from typing import Literal

from pydantic import Field

from petwash.schemas.base import CamelModel


class PlanCreateSchema(CamelModel):
    """Schema for creating or updating a subscription plan."""

    plan_code: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=100)
    name_he: str | None = Field(default=None, max_length=100)
    description: str | None = None
    price: Decimal = Field(..., ge=0)
    currency: str = Field(default="ILS", min_length=3, max_length=3)
    billing_interval: Literal["monthly", "quarterly", "yearly"] = "monthly"
    trial_days: int = Field(default=0, ge=0)
    wash_credits_per_month: int = Field(default=0, ge=0)
    discount_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    perks: list[str] | None = None
    max_pets: int = Field(default=1, ge=1)
    max_family_members: int = Field(default=1, ge=1)
    is_active: bool = True
    country_id: int | None = Field(default=None, gt=0)


class SubscriptionCreateSchema(CamelModel):
    """Enrols a user; period window, status and credits come from the plan."""

    user_id: str = Field(..., min_length=1, max_length=128)
    plan_id: int = Field(..., gt=0)
    payment_method: str | None = Field(default=None, max_length=50)


class SubscriptionUpdateSchema(CamelModel):
    """Operator-editable subscription fields."""

    status: Literal["trial", "active", "paused", "cancelled", "expired", "past_due"]
    cancel_at_period_end: bool = False
    payment_method: str | None = Field(default=None, max_length=50)
    wash_credits_remaining: int = Field(..., ge=0)


class SubscriptionUseSchema(CamelModel):
    station_id: int = Field(..., gt=0)
    wash_type: str = Field(default="standard", min_length=1, max_length=50)
    original_price: Decimal = Field(..., ge=0)


class SubscriptionCancelSchema(CamelModel):
    reason: str | None = None
    at_period_end: bool = False


class SubscriptionRenewSchema(CamelModel):
    payment_method: str | None = Field(default=None, max_length=50)
