# Import all models here for Alembic
from app.models.subscription import Subscription, PlanEnum, SubscriptionStatusEnum
from app.models.preorder_setting import PreOrderSetting
from app.models.waitlist_entry import WaitlistEntry
from app.models.shop_session import ShopSession

__all__ = [
    "Subscription",
    "PlanEnum",
    "SubscriptionStatusEnum",
    "PreOrderSetting",
    "WaitlistEntry",
    "ShopSession",
]
