from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session
from typing import Dict, Optional
import asyncio
import logging

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import ShopContext, get_admin_client, get_current_shop, require_plan
from app.core.exceptions import ExternalServiceError
from app.models.subscription import PlanEnum
from app.schemas.billing import SubscriptionOut
from app.schemas.preorder import PreOrderSetting as PreOrderSettingSchema
from app.schemas.waitlist import WaitlistEntry as WaitlistEntrySchema
from app.services.billing_service import BillingService
from app.services.preorder_service import PreOrderService
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.stock_notification_service import StockNotificationService
from app.services.waitlist_service import WaitlistService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _plan_summary(db: Session, shop_domain: str) -> dict:
    billing = BillingService(db)
    return {
        "subscription": SubscriptionOut.from_orm(billing.get_subscription(shop_domain)),
        "limits": billing.get_limits(shop_domain).to_dict(),
    }


@router.get("/products")
async def products_overview(
    shop: ShopContext = Depends(get_current_shop),
    client: ShopifyGraphQLClient = Depends(get_admin_client),
    db: Session = Depends(get_db),
):
    """Catalog products alongside their pre-order settings and the plan quota"""
    try:
        products = await client.list_products(first=50)
    except ExternalServiceError as e:
        logger.error("Could not load products for %s: %s", shop.shop_domain, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to load products from Shopify")

    service = PreOrderService(db)
    pre_orders = service.get_pre_orders(shop.shop_domain)
    return {
        "products": products,
        "pre_orders": [PreOrderSettingSchema.from_orm(p) for p in pre_orders],
        "enabled_count": service.count_enabled(shop.shop_domain),
        **_plan_summary(db, shop.shop_domain),
    }


@router.get("/backinstock")
async def backinstock_overview(
    shop: ShopContext = Depends(get_current_shop),
    client: ShopifyGraphQLClient = Depends(get_admin_client),
    db: Session = Depends(get_db),
):
    """Waitlist entries with product/variant titles; titles fall back to 'Unknown'"""
    entries = WaitlistService(db).get_waitlist_entries(shop.shop_domain)

    product_titles: Dict[str, Optional[str]] = {}
    variant_titles: Dict[str, Optional[str]] = {}
    rows = []
    for entry in entries:
        if entry.product_id not in product_titles:
            try:
                product_titles[entry.product_id] = await client.get_product_title(entry.product_id)
            except ExternalServiceError:
                product_titles[entry.product_id] = None
        if entry.variant_id not in variant_titles:
            try:
                variant_titles[entry.variant_id] = await client.get_variant_title(entry.variant_id)
            except ExternalServiceError:
                variant_titles[entry.variant_id] = None

        row = WaitlistEntrySchema.from_orm(entry).dict()
        row["product_title"] = product_titles[entry.product_id] or "Unknown"
        row["variant_title"] = variant_titles[entry.variant_id] or "Default"
        rows.append(row)

    return {
        "entries": rows,
        **_plan_summary(db, shop.shop_domain),
    }


@router.post("/backinstock/notify")
async def backinstock_notify(
    variant_id: str = Form(...),
    shop: ShopContext = Depends(require_plan(PlanEnum.BASIC, PlanEnum.PRO, redirect_to=settings.BILLING_UPGRADE_PATH)),
    db: Session = Depends(get_db),
):
    """Form action behind the 'Notify now' button; free plans are sent to the billing page"""
    try:
        notified = await asyncio.to_thread(StockNotificationService(db).notify_variant, shop.shop_domain, variant_id)
    except ExternalServiceError as e:
        logger.error("Notify from dashboard failed for %s: %s", shop.shop_domain, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
    return RedirectResponse(f"/app/backinstock?notified={notified}", status_code=status.HTTP_303_SEE_OTHER)
