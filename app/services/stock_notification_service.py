from sqlalchemy.orm import Session
from typing import List, Optional
import asyncio
import logging

from app.core.exceptions import ExternalServiceError
from app.services.waitlist_service import WaitlistService
from app.tasks.notification_tasks import send_back_in_stock_notification
from app.utils.audit import audit

logger = logging.getLogger(__name__)


class StockNotificationService:
    """Restock workflow: inventory event -> variant -> pending waitlist -> notify.

    `catalog` is anything with an async `get_variant_by_inventory_item`
    (normally a ShopifyGraphQLClient for the shop).
    """

    def __init__(self, db: Session, catalog=None):
        self.db = db
        self.catalog = catalog
        self.waitlist = WaitlistService(db)

    async def handle_inventory_update(self, shop_domain: str, inventory_item_id, available: int) -> int:
        """Returns how many waitlist entries were notified.

        Catalog failures propagate as ExternalServiceError before anything is marked.
        """
        if available is None or available <= 0:
            logger.debug("Inventory for %s at %s is %s; nothing to do", inventory_item_id, shop_domain, available)
            return 0

        variant = await self.catalog.get_variant_by_inventory_item(inventory_item_id)
        if not variant or not variant.get("variant_id"):
            # Untracked items are routine, not an error
            logger.info("No variant for inventory item %s at %s", inventory_item_id, shop_domain)
            return 0

        # Publishing talks to the broker synchronously
        return await asyncio.to_thread(
            self.notify_variant, shop_domain, variant["variant_id"], variant.get("product_title")
        )

    def notify_variant(self, shop_domain: str, variant_id: str, product_title: Optional[str] = None) -> int:
        """Queue the notification and mark the pending entries. Blocking; run off the event loop."""
        entries = self.waitlist.get_waitlist_by_variant(shop_domain, variant_id)
        if not entries:
            return 0

        ids = [e.id for e in entries]
        emails = [e.email for e in entries]

        # Dispatch and mark are separate steps; a crash in between re-notifies on the next restock
        self._dispatch(shop_domain, variant_id, emails, product_title)
        notified = self.waitlist.mark_notified(ids)

        logger.info("Notified %d waitlist entries for %s at %s", notified, variant_id, shop_domain)
        audit("waitlist.notified", shop=shop_domain, variant_id=variant_id, count=notified)
        return notified

    def _dispatch(self, shop_domain: str, variant_id: str, emails: List[str], product_title: Optional[str]) -> None:
        try:
            send_back_in_stock_notification.apply_async(
                (shop_domain, variant_id, emails, product_title),
                retry=False,
            )
        except Exception as e:
            logger.error("Could not queue back-in-stock notification for %s at %s: %s", variant_id, shop_domain, e)
            raise ExternalServiceError("Notification dispatch failed", details=str(e)) from e
