import base64
import hashlib
import hmac
import logging
import time
import uuid
from typing import Optional

from jose import JWTError, jwt

from app.core.config import settings

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_TOKEN_LEEWAY_SECONDS = 10


def shop_from_url(url: Optional[str]) -> Optional[str]:
    """Turn 'https://demo.myshopify.com/admin' into 'demo.myshopify.com'."""
    if not url:
        return None
    host = url.split("://", 1)[-1].split("/", 1)[0].strip().lower()
    return host or None


def create_session_token(shop_domain: str, expires_in: int = 60, user_id: str = "1") -> str:
    """Mint a token shaped like the ones App Bridge issues (used by tests and local tooling)."""
    now = int(time.time())
    claims = {
        "iss": f"https://{shop_domain}/admin",
        "dest": f"https://{shop_domain}",
        "aud": settings.SHOPIFY_API_KEY,
        "sub": user_id,
        "exp": now + expires_in,
        "nbf": now,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, settings.SHOPIFY_API_SECRET, algorithm=ALGORITHM)


def verify_session_token(token: str) -> Optional[str]:
    """Return the shop domain carried by a valid session token, else None."""
    try:
        claims = jwt.decode(
            token,
            settings.SHOPIFY_API_SECRET,
            algorithms=[ALGORITHM],
            audience=settings.SHOPIFY_API_KEY,
            options={"leeway": SESSION_TOKEN_LEEWAY_SECONDS},
        )
    except JWTError as e:
        logger.info("Rejected session token: %s", e)
        return None

    shop = shop_from_url(claims.get("dest"))
    # iss and dest must name the same shop
    if not shop or shop_from_url(claims.get("iss")) != shop:
        return None
    return shop


def compute_webhook_hmac(body: bytes) -> str:
    digest = hmac.new(settings.SHOPIFY_API_SECRET.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_webhook_hmac(body: bytes, received: Optional[str]) -> bool:
    if not received:
        return False
    return hmac.compare_digest(compute_webhook_hmac(body), received)
