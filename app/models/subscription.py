from sqlalchemy import Column, String, DateTime, Enum as SQLEnum
from sqlalchemy.sql import func
import uuid
import enum

from app.core.database import Base
from app.core.types import GUID


class PlanEnum(enum.Enum):
    FREE = "FREE"
    BASIC = "BASIC"
    PRO = "PRO"


class SubscriptionStatusEnum(enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    shop_domain = Column(String, unique=True, index=True, nullable=False)
    plan = Column(
        SQLEnum(PlanEnum, name="planenum", values_callable=lambda x: [e.value for e in x]),
        default=PlanEnum.FREE,
        nullable=False,
    )
    status = Column(
        SQLEnum(SubscriptionStatusEnum, name="subscriptionstatusenum", values_callable=lambda x: [e.value for e in x]),
        default=SubscriptionStatusEnum.ACTIVE,
        nullable=False,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Subscription {self.shop_domain} {self.plan.value}/{self.status.value}>"
