from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Callable, Optional
from urllib.parse import urlencode
import logging

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import ShopContext, get_admin_client, get_current_shop, get_shopify_client_factory
from app.core.exceptions import ValidationError
from app.models.subscription import PlanEnum, SubscriptionStatusEnum
from app.schemas.billing import BillingInfo, PlanLimitsOut, SubscribeRequest, SubscribeResponse, SubscriptionOut
from app.services.billing_service import BillingService
from app.services.plan_limits import PLAN_NAMES, PLAN_PRICES, parse_plan
from app.services.shopify_client import ShopifyAPIError, ShopifyGraphQLClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=BillingInfo)
async def get_billing_info(
    shop: ShopContext = Depends(get_current_shop),
    db: Session = Depends(get_db),
):
    """Current plan and the limits in force (FREE limits unless the subscription is active)"""
    billing = BillingService(db)
    return BillingInfo(
        subscription=SubscriptionOut.from_orm(billing.get_subscription(shop.shop_domain)),
        limits=PlanLimitsOut(**billing.get_limits(shop.shop_domain).to_dict()),
    )


@router.post("/subscribe", response_model=SubscribeResponse)
async def subscribe(
    payload: SubscribeRequest,
    shop: ShopContext = Depends(get_current_shop),
    client: ShopifyGraphQLClient = Depends(get_admin_client),
    db: Session = Depends(get_db),
):
    """Switch plan. FREE applies immediately; paid plans return a Shopify approval URL."""
    try:
        plan = parse_plan(payload.plan)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    if plan == PlanEnum.FREE:
        BillingService(db).set_subscription(shop.shop_domain, plan, SubscriptionStatusEnum.ACTIVE)
        return SubscribeResponse(plan=plan, status="active", redirect_to="/app")

    return_url = f"{settings.SHOPIFY_APP_URL}/api/v1/billing/callback?" + urlencode(
        {"shop": shop.shop_domain, "plan": plan.value}
    )
    try:
        result = await client.create_app_subscription(
            name=PLAN_NAMES[plan],
            price=PLAN_PRICES[plan],
            return_url=return_url,
            test=settings.SHOPIFY_BILLING_TEST,
        )
    except ShopifyAPIError as e:
        logger.error("Billing error for %s: %s", shop.shop_domain, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process billing")

    confirmation_url = result.get("confirmationUrl")
    if confirmation_url:
        return SubscribeResponse(plan=plan, status="pending", confirmation_url=confirmation_url)

    errors = result.get("userErrors") or []
    message = errors[0].get("message") if errors else None
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message or "Failed to create billing")


@router.get("/callback")
async def billing_callback(
    shop: str,
    plan: Optional[str] = None,
    charge_id: Optional[str] = None,
    db: Session = Depends(get_db),
    client_factory: Callable[[str], ShopifyGraphQLClient] = Depends(get_shopify_client_factory),
):
    """Return URL after the merchant approves a charge.

    The plan is only recorded once Shopify lists a matching ACTIVE subscription.
    """
    shop_domain = shop.strip().lower()
    try:
        plan_enum = parse_plan(plan)
    except ValidationError:
        return RedirectResponse("/app/billing", status_code=status.HTTP_303_SEE_OTHER)
    if plan_enum == PlanEnum.FREE:
        return RedirectResponse("/app/billing", status_code=status.HTTP_303_SEE_OTHER)

    client = None
    try:
        client = client_factory(shop_domain)
        active = await client.get_active_subscriptions()
    except ShopifyAPIError as e:
        logger.error("Error verifying charge %s for %s: %s", charge_id, shop_domain, e)
        return RedirectResponse(settings.BILLING_FAILURE_PATH, status_code=status.HTTP_303_SEE_OTHER)
    finally:
        if client is not None:
            await client.close()

    confirmed = any(
        sub.get("name") == PLAN_NAMES[plan_enum] and sub.get("status") == "ACTIVE"
        for sub in active
    )
    if not confirmed:
        logger.warning("No active %s subscription for %s (charge_id=%s)", plan_enum.value, shop_domain, charge_id)
        return RedirectResponse(settings.BILLING_FAILURE_PATH, status_code=status.HTTP_303_SEE_OTHER)

    BillingService(db).set_subscription(shop_domain, plan_enum, SubscriptionStatusEnum.ACTIVE)
    return RedirectResponse(settings.BILLING_SUCCESS_PATH, status_code=status.HTTP_303_SEE_OTHER)
