from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Callable
import logging

from app.core.database import get_db
from app.core.deps import WebhookContext, get_shopify_client_factory, get_webhook_context
from app.core.exceptions import ExternalServiceError
from app.schemas.webhook import WebhookResult
from app.services.shopify_client import ShopifyGraphQLClient
from app.services.stock_notification_service import StockNotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])  # /api/v1/webhooks


@router.post("/inventory_levels/update", response_model=WebhookResult)
async def inventory_levels_update(
    webhook: WebhookContext = Depends(get_webhook_context),
    db: Session = Depends(get_db),
    client_factory: Callable[[str], ShopifyGraphQLClient] = Depends(get_shopify_client_factory),
):
    """Notify the waitlist of a variant when its inventory comes back above zero."""
    logger.info("Received %s webhook for %s", webhook.topic or "inventory_levels/update", webhook.shop_domain)

    payload = webhook.payload
    if not payload.get("inventory_item_id") or "available" not in payload:
        raise HTTPException(status_code=400, detail="Missing required fields")

    available = payload.get("available")
    try:
        available = int(available) if available is not None else None
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid available quantity")

    if available is None or available <= 0:
        return WebhookResult(status="ignored", reason="not a restock")

    catalog = None
    try:
        catalog = client_factory(webhook.shop_domain)
        service = StockNotificationService(db, catalog)
        notified = await service.handle_inventory_update(
            webhook.shop_domain, payload["inventory_item_id"], available
        )
    except ExternalServiceError as e:
        logger.error("Webhook error for %s: %s", webhook.shop_domain, e)
        raise HTTPException(status_code=500, detail="Internal server error")
    finally:
        if catalog is not None:
            await catalog.close()

    return WebhookResult(status="ok", notified=notified)
