from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from app.core.exceptions import LimitExceededError, ValidationError
from app.models.subscription import PlanEnum


@dataclass(frozen=True)
class PlanLimits:
    max_pre_orders: Optional[int]  # None => unlimited
    max_waitlist_emails: Optional[int]

    def to_dict(self) -> dict:
        return {
            "max_pre_orders": self.max_pre_orders,
            "max_waitlist_emails": self.max_waitlist_emails,
        }


PLAN_LIMITS = {
    PlanEnum.FREE: PlanLimits(max_pre_orders=1, max_waitlist_emails=20),
    PlanEnum.BASIC: PlanLimits(max_pre_orders=None, max_waitlist_emails=500),
    PlanEnum.PRO: PlanLimits(max_pre_orders=None, max_waitlist_emails=None),
}

# Every plan must have limits; fail at import rather than at request time
_missing = set(PlanEnum) - set(PLAN_LIMITS)
if _missing:
    raise RuntimeError(f"Plan limits missing for: {sorted(p.value for p in _missing)}")

# Recurring charges for the paid tiers (USD / 30 days)
PLAN_PRICES = {
    PlanEnum.BASIC: Decimal("9.99"),
    PlanEnum.PRO: Decimal("29.99"),
}

PLAN_NAMES = {
    PlanEnum.BASIC: "Basic Plan",
    PlanEnum.PRO: "Pro Plan",
}

UPGRADE_SUGGESTIONS = {
    "pre_orders": "Upgrade your plan to enable more pre-order products.",
    "waitlist_emails": "Upgrade your plan to collect more back-in-stock signups.",
}


def limits_for(plan: PlanEnum) -> PlanLimits:
    return PLAN_LIMITS[plan]


def parse_plan(value) -> PlanEnum:
    """Accept a PlanEnum or a case-insensitive plan name."""
    if isinstance(value, PlanEnum):
        return value
    try:
        return PlanEnum(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid plan: {value!r}", error_code="invalid_plan")


def assert_within_limit(plan: PlanEnum, resource: str, limit: Optional[int], current: int) -> None:
    """Raise LimitExceededError when adding one more item would go past `limit`."""
    if limit is None:
        return
    if current >= limit:
        label = resource.replace("_", "-")
        raise LimitExceededError(
            f"Plan limit reached. Maximum {limit} {label} allowed on the {plan.value} plan.",
            resource=resource,
            limit=limit,
            current=current,
            plan=plan.value,
        )
