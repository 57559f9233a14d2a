"""Repositories for subscription plans, user subscriptions and usage history."""

from petwash.domain.models import SubscriptionPlan, SubscriptionUsage, UserSubscription
from petwash.repositories.base import BaseRepository


class PlanRepository(BaseRepository[SubscriptionPlan]):
    def __init__(self):
        super().__init__(SubscriptionPlan, default_order=SubscriptionPlan.price)


class UserSubscriptionRepository(BaseRepository[UserSubscription]):
    def __init__(self):
        super().__init__(
            UserSubscription,
            default_order=[UserSubscription.created_at.desc(), UserSubscription.id.desc()],
        )


class UsageRepository(BaseRepository[SubscriptionUsage]):
    def __init__(self):
        super().__init__(SubscriptionUsage)

    def get_for_subscription(self, subscription_id: int) -> list[SubscriptionUsage]:
        return (
            SubscriptionUsage.query
            .filter_by(subscription_id=subscription_id)
            .order_by(SubscriptionUsage.used_at.desc(), SubscriptionUsage.id.desc())
            .all()
        )
