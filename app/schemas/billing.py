from pydantic import BaseModel, Field
from typing import Optional

from app.models.subscription import PlanEnum, SubscriptionStatusEnum


class PlanLimitsOut(BaseModel):
    max_pre_orders: Optional[int] = Field(None, description="None means unlimited")
    max_waitlist_emails: Optional[int] = Field(None, description="None means unlimited")


class SubscriptionOut(BaseModel):
    shop_domain: str
    plan: PlanEnum
    status: SubscriptionStatusEnum

    class Config:
        from_attributes = True


class BillingInfo(BaseModel):
    subscription: SubscriptionOut
    limits: PlanLimitsOut


class SubscribeRequest(BaseModel):
    plan: str = Field(..., description="FREE, BASIC or PRO")


class SubscribeResponse(BaseModel):
    plan: PlanEnum
    status: str = Field(..., description="active when applied, pending when awaiting merchant approval")
    confirmation_url: Optional[str] = Field(None, description="Shopify charge approval page for paid plans")
    redirect_to: Optional[str] = None
