import pytest

from app.core.exceptions import ExternalServiceError
from app.models.waitlist_entry import WaitlistEntry
from app.schemas.waitlist import WaitlistJoin
from app.services.stock_notification_service import StockNotificationService
from app.services.waitlist_service import WaitlistService

from conftest import SHOP

VARIANT = "gid://shopify/ProductVariant/11"


def _join(db_session, email):
    WaitlistService(db_session).add_to_waitlist(WaitlistJoin(
        shop_domain=SHOP, product_id="gid://shopify/Product/1", variant_id=VARIANT, email=email,
    ))


def test_notify_variant_queues_without_retrying(db_session, notification_task):
    _join(db_session, "a@example.com")
    assert StockNotificationService(db_session).notify_variant(SHOP, VARIANT, "Linen Shirt") == 1
    assert notification_task.calls == [(SHOP, VARIANT, ["a@example.com"], "Linen Shirt")]


def test_notify_variant_without_waitlist_does_not_dispatch(db_session, notification_task):
    assert StockNotificationService(db_session).notify_variant(SHOP, VARIANT) == 0
    assert notification_task.calls == []


def test_dispatch_failure_raises_external_service_error(db_session, notification_task):
    _join(db_session, "a@example.com")
    notification_task.error = RuntimeError("Retry limit exceeded while trying to reconnect")

    with pytest.raises(ExternalServiceError):
        StockNotificationService(db_session).notify_variant(SHOP, VARIANT)

    db_session.expire_all()
    assert db_session.query(WaitlistEntry).filter(WaitlistEntry.notified == False).count() == 1
