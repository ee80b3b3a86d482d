from sqlalchemy.orm import Session
from typing import Iterable
import logging

from app.core.exceptions import AuthorizationError
from app.models.subscription import Subscription, PlanEnum, SubscriptionStatusEnum
from app.services.plan_limits import PlanLimits, limits_for
from app.utils.audit import audit

logger = logging.getLogger(__name__)

UPGRADE_REQUIRED_MESSAGE = "Upgrade required. Please upgrade your plan to access this feature."


class BillingService:
    """Per-shop subscription record. Shops without a row are on FREE/active."""

    def __init__(self, db: Session):
        self.db = db

    def get_subscription(self, shop_domain: str) -> Subscription:
        subscription = self.db.query(Subscription).filter(
            Subscription.shop_domain == shop_domain
        ).first()
        if subscription is None:
            # Transient default, intentionally not added to the session
            return Subscription(
                shop_domain=shop_domain,
                plan=PlanEnum.FREE,
                status=SubscriptionStatusEnum.ACTIVE,
            )
        return subscription

    def set_subscription(
        self,
        shop_domain: str,
        plan: PlanEnum,
        status: SubscriptionStatusEnum = SubscriptionStatusEnum.ACTIVE,
    ) -> Subscription:
        subscription = self.db.query(Subscription).filter(
            Subscription.shop_domain == shop_domain
        ).first()
        previous = subscription.plan.value if subscription else None

        if subscription:
            subscription.plan = plan
            subscription.status = status
        else:
            subscription = Subscription(shop_domain=shop_domain, plan=plan, status=status)
            self.db.add(subscription)

        self.db.commit()
        self.db.refresh(subscription)

        logger.info("Subscription for %s set to %s/%s", shop_domain, plan.value, status.value)
        audit("subscription.set", shop=shop_domain, plan=plan.value, status=status.value, previous_plan=previous)
        return subscription

    def get_effective_plan(self, shop_domain: str) -> PlanEnum:
        """Plan whose quotas apply: a subscription that is not active falls back to FREE."""
        subscription = self.get_subscription(shop_domain)
        if subscription.status != SubscriptionStatusEnum.ACTIVE:
            return PlanEnum.FREE
        return subscription.plan

    def get_limits(self, shop_domain: str) -> PlanLimits:
        return limits_for(self.get_effective_plan(shop_domain))

    def is_plan_active(self, shop_domain: str, allowed_plans: Iterable[PlanEnum]) -> bool:
        subscription = self.get_subscription(shop_domain)
        return (
            subscription.status == SubscriptionStatusEnum.ACTIVE
            and subscription.plan in set(allowed_plans)
        )

    def assert_plan_active(self, shop_domain: str, allowed_plans: Iterable[PlanEnum]) -> Subscription:
        subscription = self.get_subscription(shop_domain)
        if (
            subscription.status == SubscriptionStatusEnum.ACTIVE
            and subscription.plan in set(allowed_plans)
        ):
            return subscription
        raise AuthorizationError(
            UPGRADE_REQUIRED_MESSAGE,
            current_plan=subscription.plan.value,
            current_status=subscription.status.value,
        )
