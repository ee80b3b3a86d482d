from app.tasks.notification_tasks import send_back_in_stock_notification

from conftest import SHOP


def test_notification_task_logs_recipients():
    result = send_back_in_stock_notification(
        SHOP, "gid://shopify/ProductVariant/11", ["a@example.com", "b@example.com"], "Linen Shirt"
    )
    assert result == {
        "status": "logged",
        "shop_domain": SHOP,
        "variant_id": "gid://shopify/ProductVariant/11",
        "recipients": 2,
    }


def test_notification_task_runs_eagerly():
    result = send_back_in_stock_notification.delay(SHOP, "gid://shopify/ProductVariant/11", [])
    assert result.get()["recipients"] == 0
