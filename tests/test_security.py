import time

import pytest
from httpx import AsyncClient, ASGITransport
from jose import jwt

from app.core.config import settings
from app.core.security import (
    compute_webhook_hmac,
    create_session_token,
    shop_from_url,
    verify_session_token,
    verify_webhook_hmac,
)

from conftest import SHOP, OTHER_SHOP


def _claims(**overrides):
    now = int(time.time())
    claims = {
        "iss": f"https://{SHOP}/admin",
        "dest": f"https://{SHOP}",
        "aud": settings.SHOPIFY_API_KEY,
        "sub": "1",
        "exp": now + 60,
        "nbf": now,
        "iat": now,
    }
    claims.update(overrides)
    return claims


def test_shop_from_url():
    assert shop_from_url("https://Demo-Store.myshopify.com/admin") == "demo-store.myshopify.com"
    assert shop_from_url(None) is None


def test_valid_session_token_resolves_shop():
    assert verify_session_token(create_session_token(SHOP)) == SHOP


def test_wrong_secret_is_rejected():
    token = jwt.encode(_claims(), "not-the-secret", algorithm="HS256")
    assert verify_session_token(token) is None


def test_wrong_audience_is_rejected():
    token = jwt.encode(_claims(aud="another-app"), settings.SHOPIFY_API_SECRET, algorithm="HS256")
    assert verify_session_token(token) is None


def test_expired_token_is_rejected():
    token = jwt.encode(_claims(exp=int(time.time()) - 120), settings.SHOPIFY_API_SECRET, algorithm="HS256")
    assert verify_session_token(token) is None


def test_issuer_and_destination_must_match():
    token = jwt.encode(_claims(iss=f"https://{OTHER_SHOP}/admin"), settings.SHOPIFY_API_SECRET, algorithm="HS256")
    assert verify_session_token(token) is None


def test_webhook_hmac():
    body = b'{"inventory_item_id": 1}'
    signature = compute_webhook_hmac(body)
    assert verify_webhook_hmac(body, signature) is True
    assert verify_webhook_hmac(body + b" ", signature) is False
    assert verify_webhook_hmac(body, None) is False


@pytest.mark.asyncio
async def test_garbage_bearer_token_is_401(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/api/v1/billing", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid session token"
