from sqlalchemy.orm import Session
from typing import List, Optional
import logging
import uuid

from app.core.exceptions import NotFoundError
from app.models.preorder_setting import PreOrderSetting
from app.models.subscription import PlanEnum
from app.schemas.preorder import PreOrderSettingIn
from app.services.plan_limits import PlanLimits, assert_within_limit

logger = logging.getLogger(__name__)

MUTABLE_FIELDS = ("enabled", "expected_date", "limit_quantity", "custom_text")


class PreOrderService:
    def __init__(self, db: Session):
        self.db = db

    def get_pre_orders(self, shop_domain: str) -> List[PreOrderSetting]:
        """All pre-order settings for a shop, newest first"""
        return self.db.query(PreOrderSetting).filter(
            PreOrderSetting.shop_domain == shop_domain
        ).order_by(PreOrderSetting.created_at.desc(), PreOrderSetting.id).all()

    def get_by_variant(self, shop_domain: str, variant_id: str) -> Optional[PreOrderSetting]:
        return self.db.query(PreOrderSetting).filter(
            PreOrderSetting.shop_domain == shop_domain,
            PreOrderSetting.variant_id == variant_id,
        ).first()

    def _find(self, settings: PreOrderSettingIn) -> Optional[PreOrderSetting]:
        return self.db.query(PreOrderSetting).filter(
            PreOrderSetting.shop_domain == settings.shop_domain,
            PreOrderSetting.product_id == settings.product_id,
            PreOrderSetting.variant_id == settings.variant_id,
        ).first()

    def count_enabled(self, shop_domain: str, excluding: Optional[PreOrderSettingIn] = None) -> int:
        query = self.db.query(PreOrderSetting).filter(
            PreOrderSetting.shop_domain == shop_domain,
            PreOrderSetting.enabled == True,
        )
        if excluding is not None:
            query = query.filter(~(
                (PreOrderSetting.product_id == excluding.product_id)
                & (PreOrderSetting.variant_id == excluding.variant_id)
            ))
        return query.count()

    def assert_within_limit(self, plan: PlanEnum, limits: PlanLimits, settings: PreOrderSettingIn) -> None:
        """Reject enabling one more pre-order than the plan allows.

        Re-saving a row that is already enabled does not count twice. This is a
        check-then-act sequence and is not atomic with the following save.
        """
        if not settings.enabled or limits.max_pre_orders is None:
            return
        existing = self._find(settings)
        if existing is not None and existing.enabled:
            # Editing a live pre-order never changes the enabled count, even over quota
            return
        current = self.count_enabled(settings.shop_domain, excluding=settings)
        assert_within_limit(plan, "pre_orders", limits.max_pre_orders, current)

    def save_pre_order(self, settings: PreOrderSettingIn) -> PreOrderSetting:
        """Upsert by (shop_domain, product_id, variant_id)"""
        pre_order = self._find(settings)
        data = settings.dict()

        if pre_order:
            for field in MUTABLE_FIELDS:
                setattr(pre_order, field, data[field])
        else:
            pre_order = PreOrderSetting(**data)
            self.db.add(pre_order)

        self.db.commit()
        self.db.refresh(pre_order)

        logger.info(
            "Saved pre-order %s for %s variant=%s enabled=%s",
            pre_order.id, settings.shop_domain, settings.variant_id, settings.enabled,
        )
        return pre_order

    def delete_pre_order(self, shop_domain: str, pre_order_id: uuid.UUID) -> None:
        pre_order = self.db.query(PreOrderSetting).filter(
            PreOrderSetting.id == pre_order_id,
            PreOrderSetting.shop_domain == shop_domain,
        ).first()
        if not pre_order:
            raise NotFoundError("Pre-order setting not found")
        self.db.delete(pre_order)
        self.db.commit()
