"""Subscription service — plans, enrolment, credit redemption and renewal."""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from dateutil.relativedelta import relativedelta

from petwash.domain.amounts import to_money
from petwash.domain.exceptions import BusinessRuleError, ConflictError, ResourceNotFoundError
from petwash.domain.models import UserSubscription
from petwash.extensions import transaction
from petwash.repositories.network_repository import CountryRepository, StationRepository
from petwash.repositories.subscription_repository import (
    PlanRepository,
    UsageRepository,
    UserSubscriptionRepository,
)
from petwash.services.crud_service import CrudService

logger = logging.getLogger(__name__)

BILLING_INTERVALS = {
    "monthly": relativedelta(months=1),
    "quarterly": relativedelta(months=3),
    "yearly": relativedelta(years=1),
}
REDEEMABLE_STATUSES = ("trial", "active")
CLOSED_STATUSES = ("cancelled", "expired")


class PlanService(CrudService):
    def __init__(self):
        super().__init__(
            PlanRepository(),
            "SubscriptionPlan",
            references={"country_id": (CountryRepository(), "Country")},
        )


class SubscriptionService(CrudService):
    """Manages user subscriptions and their wash-credit balance."""

    def __init__(self):
        self._plans = PlanRepository()
        self._subscriptions = UserSubscriptionRepository()
        self._usage = UsageRepository()
        self._stations = StationRepository()
        super().__init__(self._subscriptions, "UserSubscription")

    def _before_update(self, instance: UserSubscription, values: dict) -> dict:
        new_status = values.get("status", instance.status)
        if new_status == instance.status:
            return values
        if instance.status in CLOSED_STATUSES:
            raise ConflictError(
                f"Subscription {instance.id} is {instance.status} and cannot be reopened",
                details={"status": instance.status, "requestedStatus": new_status},
            )
        if new_status == "cancelled":
            values["cancelled_at"] = datetime.now(timezone.utc)
            values["next_billing_date"] = None
        return values

    def subscribe(self, user_id: str, plan_id: int, payment_method: str | None = None) -> dict:
        """Enrol ``user_id`` in a plan.

        Plans with trial days start in ``trial`` and are charged when renewed;
        otherwise the first period is charged immediately.
        """
        plan = self._plans.get_by_id(plan_id)
        if plan is None:
            raise ResourceNotFoundError("SubscriptionPlan", plan_id)
        if not plan.is_active:
            raise BusinessRuleError(f"Plan {plan.plan_code} is not open for new subscriptions")

        now = datetime.now(timezone.utc)
        period_end = now + BILLING_INTERVALS[plan.billing_interval]
        values = {
            "user_id": user_id,
            "plan_id": plan.id,
            "start_date": now,
            "current_period_start": now,
            "current_period_end": period_end,
            "wash_credits_remaining": plan.wash_credits_per_month,
            "payment_method": payment_method,
        }
        if plan.trial_days:
            trial_end = now + timedelta(days=plan.trial_days)
            values.update(
                status="trial",
                trial_start=now,
                trial_end=trial_end,
                next_billing_date=trial_end,
                total_paid=Decimal("0.00"),
            )
        else:
            values.update(
                status="active",
                last_payment_date=now,
                next_billing_date=period_end,
                total_paid=to_money(plan.price),
            )

        with transaction():
            subscription = self._subscriptions.create(**values)
        logger.info(
            "User %s subscribed to plan %s (subscription id=%s, status=%s)",
            user_id, plan.plan_code, subscription.id, subscription.status,
        )
        return subscription.to_dict()

    def redeem_wash(self, subscription_id: int, station_id: int, wash_type: str, original_price) -> dict:
        """Spend one wash credit at a station and record the discounted price."""
        if self._stations.get_by_id(station_id) is None:
            raise ResourceNotFoundError("Station", station_id)

        with transaction():
            subscription = self.get_instance(subscription_id, for_update=True)
            if subscription.status not in REDEEMABLE_STATUSES:
                raise ConflictError(
                    f"Subscription {subscription_id} is {subscription.status}",
                    details={"status": subscription.status},
                )
            if subscription.wash_credits_remaining <= 0:
                raise BusinessRuleError(
                    "No wash credits remaining in the current period",
                    details={"currentPeriodEnd": subscription.current_period_end.isoformat()},
                )

            original = to_money(original_price)
            discount = to_money(original * Decimal(subscription.plan.discount_percent) / 100)
            subscription.wash_credits_remaining -= 1
            subscription.wash_credits_used += 1
            subscription.total_washes_completed += 1
            usage = self._usage.create(
                subscription_id=subscription.id,
                user_id=subscription.user_id,
                station_id=station_id,
                wash_type=wash_type,
                credits_used=1,
                original_price=original,
                discount_applied=discount,
                final_price=original - discount,
            )
        logger.info(
            "Subscription id=%s redeemed a wash at station id=%s, %s credit(s) left",
            subscription_id, station_id, subscription.wash_credits_remaining,
        )
        return {"subscription": subscription.to_dict(), "usage": usage.to_dict()}

    def cancel(self, subscription_id: int, reason: str | None = None, at_period_end: bool = False) -> dict:
        with transaction():
            subscription = self.get_instance(subscription_id, for_update=True)
            if subscription.status in CLOSED_STATUSES:
                raise ConflictError(f"Subscription {subscription_id} is already {subscription.status}")
            subscription.cancellation_reason = reason
            if at_period_end:
                subscription.cancel_at_period_end = True
            else:
                subscription.status = "cancelled"
                subscription.cancelled_at = datetime.now(timezone.utc)
                subscription.next_billing_date = None
        logger.info("Cancelled subscription id=%s (at period end: %s)", subscription_id, at_period_end)
        return subscription.to_dict()

    def renew(self, subscription_id: int, payment_method: str | None = None) -> dict:
        """Charge the plan price and roll the billing window forward one interval."""
        with transaction():
            subscription = self.get_instance(subscription_id, for_update=True)
            self._check_renewable(subscription)
            plan = subscription.plan
            now = datetime.now(timezone.utc)

            start = subscription.current_period_end
            end = start + BILLING_INTERVALS[plan.billing_interval]
            subscription.current_period_start = start
            subscription.current_period_end = end
            subscription.next_billing_date = end
            subscription.wash_credits_remaining = plan.wash_credits_per_month
            subscription.status = "active"
            subscription.last_payment_date = now
            subscription.total_paid = to_money(subscription.total_paid) + to_money(plan.price)
            if payment_method:
                subscription.payment_method = payment_method
        logger.info("Renewed subscription id=%s until %s", subscription_id, end.isoformat())
        return subscription.to_dict()

    @staticmethod
    def _check_renewable(subscription: UserSubscription) -> None:
        if subscription.status in CLOSED_STATUSES:
            raise ConflictError(f"Subscription {subscription.id} is {subscription.status}")
        if subscription.cancel_at_period_end:
            raise ConflictError(f"Subscription {subscription.id} is set to cancel at period end")

    def usage_history(self, subscription_id: int) -> list[dict]:
        self.get_instance(subscription_id)
        return [row.to_dict() for row in self._usage.get_for_subscription(subscription_id)]
