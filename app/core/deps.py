from dataclasses import dataclass
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import AsyncIterator, Callable, Optional
import json
import logging

from app.core.database import get_db
from app.core.exceptions import AuthorizationError
from app.core.security import verify_session_token, verify_webhook_hmac
from app.models.subscription import PlanEnum
from app.services.billing_service import BillingService
from app.services.shop_session_service import ShopSessionService
from app.services.shopify_client import ShopifyAPIError, ShopifyGraphQLClient

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class ShopContext:
    """Authenticated shop for the current request, passed explicitly to services."""
    shop_domain: str
    session_token: Optional[str] = None


@dataclass(frozen=True)
class WebhookContext:
    shop_domain: str
    topic: str
    payload: dict


async def get_current_shop(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> ShopContext:
    """Resolve the shop from an App Bridge session token"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing session token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    shop_domain = verify_session_token(credentials.credentials)
    if shop_domain is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return ShopContext(shop_domain=shop_domain, session_token=credentials.credentials)


def require_plan(*allowed_plans: PlanEnum, redirect_to: Optional[str] = None) -> Callable:
    """Dependency factory gating an endpoint on the shop's active plan.

    Denied JSON calls get a 403 ``upgrade_required`` payload; when ``redirect_to``
    is given (form posts from the dashboard) the caller is sent there with a 303.
    """
    allowed = frozenset(allowed_plans)

    def plan_checker(
        shop: ShopContext = Depends(get_current_shop),
        db: Session = Depends(get_db),
    ) -> ShopContext:
        try:
            BillingService(db).assert_plan_active(shop.shop_domain, allowed)
        except AuthorizationError as e:
            if redirect_to:
                raise HTTPException(
                    status_code=status.HTTP_303_SEE_OTHER,
                    detail=e.message,
                    headers={"Location": redirect_to},
                )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "upgrade_required",
                    "message": e.message,
                    "allowed_plans": sorted(p.value for p in allowed),
                    "current_plan": e.current_plan,
                    "current_status": e.current_status,
                },
            )
        return shop

    return plan_checker


def get_shopify_client_factory(db: Session = Depends(get_db)) -> Callable[[str], ShopifyGraphQLClient]:
    """Build Admin API clients from stored offline tokens (webhooks carry no session)."""
    sessions = ShopSessionService(db)

    def factory(shop_domain: str) -> ShopifyGraphQLClient:
        token = sessions.get_access_token(shop_domain)
        if not token:
            raise ShopifyAPIError(f"No offline access token stored for {shop_domain}")
        return ShopifyGraphQLClient(shop_domain, token)

    return factory


async def get_admin_client(
    shop: ShopContext = Depends(get_current_shop),
    db: Session = Depends(get_db),
) -> AsyncIterator[ShopifyGraphQLClient]:
    try:
        token = await ShopSessionService(db).ensure_offline_token(shop.shop_domain, shop.session_token)
    except ShopifyAPIError as e:
        logger.error("Could not obtain Admin API token for %s: %s", shop.shop_domain, e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Shopify authentication failed")

    client = ShopifyGraphQLClient(shop.shop_domain, token)
    try:
        yield client
    finally:
        await client.close()


async def get_webhook_context(request: Request) -> WebhookContext:
    """Verify X-Shopify-Hmac-Sha256 against the raw body and parse the payload"""
    body = await request.body()
    if not verify_webhook_hmac(body, request.headers.get("X-Shopify-Hmac-Sha256")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid webhook signature")

    shop_domain = (request.headers.get("X-Shopify-Shop-Domain") or "").strip().lower()
    if not shop_domain:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing shop domain header")

    try:
        payload = json.loads(body or b"{}")
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

    topic = request.headers.get("X-Shopify-Topic", "")
    return WebhookContext(shop_domain=shop_domain, topic=topic, payload=payload)
