from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import uuid

from app.core.database import get_db
from app.api.v1.responses import limit_exceeded_response
from app.core.deps import ShopContext, get_current_shop
from app.core.exceptions import LimitExceededError, NotFoundError
from app.schemas.preorder import (
    PreOrderList,
    PreOrderSave,
    PreOrderSaveResponse,
    PreOrderSetting as PreOrderSettingSchema,
    PreOrderSettingIn,
)
from app.services.billing_service import BillingService
from app.services.plan_limits import limits_for
from app.services.preorder_service import PreOrderService

router = APIRouter()


@router.post("", response_model=PreOrderSaveResponse)
async def save_pre_order(
    payload: PreOrderSave,
    shop: ShopContext = Depends(get_current_shop),
    db: Session = Depends(get_db),
):
    """Create or update the pre-order setting of a variant (enforces the plan's pre-order quota)"""
    settings_in = PreOrderSettingIn(shop_domain=shop.shop_domain, **payload.dict())
    service = PreOrderService(db)

    plan = BillingService(db).get_effective_plan(shop.shop_domain)
    try:
        service.assert_within_limit(plan, limits_for(plan), settings_in)
    except LimitExceededError as e:
        raise limit_exceeded_response(e)

    pre_order = service.save_pre_order(settings_in)
    return PreOrderSaveResponse(pre_order=pre_order)


@router.delete("/{pre_order_id}")
async def delete_pre_order(
    pre_order_id: uuid.UUID,
    shop: ShopContext = Depends(get_current_shop),
    db: Session = Depends(get_db),
):
    try:
        PreOrderService(db).delete_pre_order(shop.shop_domain, pre_order_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"success": True}


@router.get("/{shop_domain}", response_model=PreOrderList)
async def get_pre_orders(shop_domain: str, db: Session = Depends(get_db)):
    """Public storefront endpoint: pre-order settings of a shop, newest first"""
    shop_domain = shop_domain.strip().lower()
    if not shop_domain:
        raise HTTPException(status_code=400, detail="Shop domain is required")
    return PreOrderList(pre_orders=PreOrderService(db).get_pre_orders(shop_domain))


@router.get("/{shop_domain}/variants/{variant_id:path}", response_model=PreOrderSettingSchema)
async def get_pre_order_for_variant(shop_domain: str, variant_id: str, db: Session = Depends(get_db)):
    """Public storefront lookup for a single variant"""
    pre_order = PreOrderService(db).get_by_variant(shop_domain.strip().lower(), variant_id)
    if not pre_order:
        raise HTTPException(status_code=404, detail="Pre-order setting not found")
    return pre_order
