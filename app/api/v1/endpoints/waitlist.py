from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
import asyncio
import logging
import uuid

from app.api.v1.responses import limit_exceeded_response
from app.core.database import get_db
from app.core.deps import ShopContext, get_current_shop, require_plan
from app.core.exceptions import ExternalServiceError, LimitExceededError, NotFoundError
from app.models.subscription import PlanEnum
from app.schemas.waitlist import (
    WaitlistEntryList,
    WaitlistJoin,
    WaitlistJoinResponse,
    WaitlistNotifyRequest,
    WaitlistNotifyResponse,
)
from app.services.billing_service import BillingService
from app.services.plan_limits import limits_for
from app.services.stock_notification_service import StockNotificationService
from app.services.waitlist_service import WaitlistService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=WaitlistJoinResponse)
async def join_waitlist(payload: WaitlistJoin, db: Session = Depends(get_db)):
    """Storefront signup for a back-in-stock alert. Joining twice returns the same entry."""
    service = WaitlistService(db)
    plan = BillingService(db).get_effective_plan(payload.shop_domain)
    try:
        service.assert_within_limit(plan, limits_for(plan), payload)
    except LimitExceededError as e:
        raise limit_exceeded_response(e)

    entry, _created = service.add_to_waitlist(payload)
    return WaitlistJoinResponse(entry=entry)


@router.post("/notify", response_model=WaitlistNotifyResponse)
async def notify_waitlist(
    payload: WaitlistNotifyRequest,
    shop: ShopContext = Depends(require_plan(PlanEnum.BASIC, PlanEnum.PRO)),
    db: Session = Depends(get_db),
):
    """Manually notify everyone waiting on a variant (paid plans only)"""
    if payload.shop_domain and payload.shop_domain.strip().lower() != shop.shop_domain:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Shop mismatch")

    try:
        notified = await asyncio.to_thread(
            StockNotificationService(db).notify_variant, shop.shop_domain, payload.variant_id
        )
    except ExternalServiceError as e:
        logger.error("Manual notify failed for %s: %s", shop.shop_domain, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
    return WaitlistNotifyResponse(notified=notified)


@router.get("/{shop_domain}", response_model=WaitlistEntryList)
async def list_waitlist_entries(
    shop_domain: str,
    shop: ShopContext = Depends(get_current_shop),
    db: Session = Depends(get_db),
):
    if shop_domain.strip().lower() != shop.shop_domain:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Shop mismatch")
    return WaitlistEntryList(entries=WaitlistService(db).get_waitlist_entries(shop.shop_domain))


@router.delete("/{entry_id}")
async def delete_waitlist_entry(
    entry_id: uuid.UUID,
    shop: ShopContext = Depends(get_current_shop),
    db: Session = Depends(get_db),
):
    try:
        WaitlistService(db).delete_entry(shop.shop_domain, entry_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}
