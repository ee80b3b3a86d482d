import uuid

import pytest
from httpx import AsyncClient, ASGITransport

from app.models.preorder_setting import PreOrderSetting
from app.models.subscription import PlanEnum, SubscriptionStatusEnum
from app.services.billing_service import BillingService

from conftest import SHOP, OTHER_SHOP, auth_headers

PRODUCT = "gid://shopify/Product/1"
VARIANT_A = "gid://shopify/ProductVariant/11"
VARIANT_B = "gid://shopify/ProductVariant/12"


def _body(variant_id, enabled=True, **extra):
    return {"product_id": PRODUCT, "variant_id": variant_id, "enabled": enabled, **extra}


@pytest.mark.asyncio
async def test_save_requires_session(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_A))
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_save_twice_updates_single_row(app, db_session):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        first = await ac.post("/api/v1/preorders", json=_body(VARIANT_A, custom_text="Ships soon"), headers=auth_headers())
        second = await ac.post(
            "/api/v1/preorders",
            json=_body(VARIANT_A, expected_date="2026-12-01", limit_quantity=25, custom_text="Ships in December"),
            headers=auth_headers(),
        )
    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json()["pre_order"]["id"] == second.json()["pre_order"]["id"]

    rows = db_session.query(PreOrderSetting).all()
    assert len(rows) == 1
    assert rows[0].custom_text == "Ships in December"
    assert rows[0].limit_quantity == 25
    assert rows[0].expected_date.isoformat() == "2026-12-01"


@pytest.mark.asyncio
async def test_zero_limit_and_blank_text_are_stored_as_none(app, db_session):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post(
            "/api/v1/preorders", json=_body(VARIANT_A, limit_quantity=0, custom_text="   "), headers=auth_headers()
        )
    assert r.status_code == 200
    pre_order = r.json()["pre_order"]
    assert pre_order["limit_quantity"] is None
    assert pre_order["custom_text"] is None


@pytest.mark.asyncio
async def test_negative_limit_is_rejected(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_A, limit_quantity=-3), headers=auth_headers())
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_free_plan_allows_one_enabled_pre_order(app, db_session):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_A), headers=auth_headers())
        assert r.status_code == 200

        # Re-saving the enabled row does not count against itself
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_A, custom_text="Updated"), headers=auth_headers())
        assert r.status_code == 200

        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_B), headers=auth_headers())
        assert r.status_code == 403
        detail = r.json()["detail"]
        assert detail["resource"] == "pre_orders"
        assert detail["limit"] == 1
        assert detail["plan"] == "FREE"
        assert "Maximum 1" in detail["error"]

        # Saving disabled is always allowed
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_B, enabled=False), headers=auth_headers())
        assert r.status_code == 200

        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_A, enabled=False), headers=auth_headers())
        assert r.status_code == 200
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_B), headers=auth_headers())
        assert r.status_code == 200

    enabled = db_session.query(PreOrderSetting).filter(PreOrderSetting.enabled == True).all()
    assert [p.variant_id for p in enabled] == [VARIANT_B]


@pytest.mark.asyncio
async def test_basic_plan_has_no_pre_order_limit(app, db_session):
    BillingService(db_session).set_subscription(SHOP, PlanEnum.BASIC)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        for i in range(5):
            r = await ac.post("/api/v1/preorders", json=_body(f"gid://shopify/ProductVariant/{100 + i}"), headers=auth_headers())
            assert r.status_code == 200
    assert db_session.query(PreOrderSetting).count() == 5


@pytest.mark.asyncio
async def test_public_listing_and_variant_lookup(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        await ac.post("/api/v1/preorders", json=_body(VARIANT_A, custom_text="Pre-order now"), headers=auth_headers())
        await ac.post("/api/v1/preorders", json=_body(VARIANT_A), headers=auth_headers(OTHER_SHOP))

        r = await ac.get(f"/api/v1/preorders/{SHOP}")
        assert r.status_code == 200
        pre_orders = r.json()["pre_orders"]
        assert len(pre_orders) == 1
        assert pre_orders[0]["shop_domain"] == SHOP

        r = await ac.get(f"/api/v1/preorders/{SHOP}/variants/{VARIANT_A}")
        assert r.status_code == 200
        assert r.json()["custom_text"] == "Pre-order now"

        r = await ac.get(f"/api/v1/preorders/{SHOP}/variants/{VARIANT_B}")
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_listing_unknown_shop_is_empty(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/api/v1/preorders/nobody.myshopify.com")
    assert r.status_code == 200
    assert r.json() == {"pre_orders": []}


@pytest.mark.asyncio
async def test_delete_pre_order(app, db_session):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        saved = await ac.post("/api/v1/preorders", json=_body(VARIANT_A), headers=auth_headers())
        pre_order_id = saved.json()["pre_order"]["id"]

        # Another shop cannot delete it
        r = await ac.delete(f"/api/v1/preorders/{pre_order_id}", headers=auth_headers(OTHER_SHOP))
        assert r.status_code == 404

        r = await ac.delete(f"/api/v1/preorders/{pre_order_id}", headers=auth_headers())
        assert r.status_code == 200
        assert r.json() == {"success": True}

        r = await ac.delete(f"/api/v1/preorders/{uuid.uuid4()}", headers=auth_headers())
        assert r.status_code == 404

    assert db_session.query(PreOrderSetting).count() == 0


@pytest.mark.asyncio
async def test_live_pre_orders_stay_editable_after_downgrade(app, db_session):
    billing = BillingService(db_session)
    billing.set_subscription(SHOP, PlanEnum.BASIC)
    variants = [f"gid://shopify/ProductVariant/{200 + i}" for i in range(3)]
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        for variant_id in variants:
            r = await ac.post("/api/v1/preorders", json=_body(variant_id), headers=auth_headers())
            assert r.status_code == 200

        billing.set_subscription(SHOP, PlanEnum.FREE)

        r = await ac.post(
            "/api/v1/preorders",
            json=_body(variants[0], custom_text="Ships in January", expected_date="2027-01-15"),
            headers=auth_headers(),
        )
        assert r.status_code == 200
        assert r.json()["pre_order"]["custom_text"] == "Ships in January"

        # Enabling a new variant is still refused while over quota
        r = await ac.post("/api/v1/preorders", json=_body(VARIANT_B), headers=auth_headers())
        assert r.status_code == 403
        assert r.json()["detail"]["current"] == 3

    assert db_session.query(PreOrderSetting).filter(PreOrderSetting.enabled == True).count() == 3


@pytest.mark.asyncio
async def test_cancelled_paid_plan_gets_free_pre_order_quota(app, db_session):
    BillingService(db_session).set_subscription(SHOP, PlanEnum.PRO, SubscriptionStatusEnum.CANCELLED)
    codes = []
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        for i in range(3):
            r = await ac.post("/api/v1/preorders", json=_body(f"gid://shopify/ProductVariant/{300 + i}"), headers=auth_headers())
            codes.append(r.status_code)
        assert r.json()["detail"]["plan"] == "FREE"
    assert codes == [200, 403, 403]
