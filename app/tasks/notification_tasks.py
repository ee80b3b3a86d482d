import logging
from typing import List, Optional

from app.core.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(ignore_result=True)
def send_back_in_stock_notification(shop_domain: str, variant_id: str, emails: List[str],
                                    product_title: Optional[str] = None):
    """Tell waitlisted customers a variant is purchasable again.

    No email provider is wired in yet; the intent is logged.
    """
    title = product_title or "Product"
    logger.info(
        "📧 Notifying %d customers that %s (%s) is back in stock at %s",
        len(emails), title, variant_id, shop_domain,
    )
    return {
        "status": "logged",
        "shop_domain": shop_domain,
        "variant_id": variant_id,
        "recipients": len(emails),
    }
