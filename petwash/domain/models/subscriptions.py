"""Wash subscription plans, user subscriptions and credit usage."""

from decimal import Decimal

from petwash.domain.models.base import SerializerMixin, TimestampMixin, money, utcnow
from petwash.extensions import db


class SubscriptionPlan(SerializerMixin, TimestampMixin, db.Model):
    """A recurring plan granting monthly wash credits and a discount."""

    __tablename__ = "subscription_plans"

    id = db.Column(db.Integer, primary_key=True)
    plan_code = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    name_he = db.Column(db.String(100))
    description = db.Column(db.Text)
    price = money(nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="ILS")
    billing_interval = db.Column(db.String(20), nullable=False, default="monthly")
    trial_days = db.Column(db.Integer, nullable=False, default=0)
    wash_credits_per_month = db.Column(db.Integer, nullable=False, default=0)
    discount_percent = db.Column(db.Numeric(5, 2), nullable=False, default=Decimal("0"))
    perks = db.Column(db.JSON)
    max_pets = db.Column(db.Integer, nullable=False, default=1)
    max_family_members = db.Column(db.Integer, nullable=False, default=1)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    country_id = db.Column(db.Integer, db.ForeignKey("countries.id"), index=True)


class UserSubscription(SerializerMixin, TimestampMixin, db.Model):
    """A customer's enrolment in a plan for the current billing window."""

    __tablename__ = "user_subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(128), nullable=False, index=True)
    plan_id = db.Column(
        db.Integer, db.ForeignKey("subscription_plans.id"), nullable=False, index=True,
    )
    start_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    current_period_start = db.Column(db.DateTime, nullable=False)
    current_period_end = db.Column(db.DateTime, nullable=False)
    trial_start = db.Column(db.DateTime)
    trial_end = db.Column(db.DateTime)
    status = db.Column(db.String(20), nullable=False, default="active", index=True)
    cancel_at_period_end = db.Column(db.Boolean, nullable=False, default=False)
    cancelled_at = db.Column(db.DateTime)
    cancellation_reason = db.Column(db.Text)
    wash_credits_remaining = db.Column(db.Integer, nullable=False, default=0)
    wash_credits_used = db.Column(db.Integer, nullable=False, default=0)
    total_washes_completed = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(50))
    last_payment_date = db.Column(db.DateTime)
    next_billing_date = db.Column(db.DateTime)
    total_paid = money(nullable=False, default=Decimal("0"))

    plan = db.relationship("SubscriptionPlan")


class SubscriptionUsage(SerializerMixin, db.Model):
    """One credit redeemed against a subscription at a station."""

    __tablename__ = "subscription_usage_history"

    id = db.Column(db.Integer, primary_key=True)
    subscription_id = db.Column(
        db.Integer, db.ForeignKey("user_subscriptions.id"), nullable=False, index=True,
    )
    user_id = db.Column(db.String(128), nullable=False, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey("pet_wash_stations.id"), index=True)
    wash_type = db.Column(db.String(50))
    credits_used = db.Column(db.Integer, nullable=False, default=1)
    original_price = money()
    discount_applied = money()
    final_price = money()
    used_at = db.Column(db.DateTime, nullable=False, default=utcnow)
