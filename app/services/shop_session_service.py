from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.models.shop_session import ShopSession
from app.services.shopify_client import ShopifyAPIError, exchange_session_token

logger = logging.getLogger(__name__)


class ShopSessionService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, shop_domain: str) -> Optional[ShopSession]:
        return self.db.query(ShopSession).filter(ShopSession.shop_domain == shop_domain).first()

    def get_access_token(self, shop_domain: str) -> Optional[str]:
        session = self.get(shop_domain)
        return session.access_token if session else None

    def store(self, shop_domain: str, access_token: str, scope: Optional[str] = None) -> ShopSession:
        session = self.get(shop_domain)
        if session:
            session.access_token = access_token
            session.scope = scope
        else:
            session = ShopSession(shop_domain=shop_domain, access_token=access_token, scope=scope)
            self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    async def ensure_offline_token(self, shop_domain: str, session_token: str) -> str:
        """Return the stored offline token, exchanging the session token on first use."""
        token = self.get_access_token(shop_domain)
        if token:
            return token
        result = await exchange_session_token(shop_domain, session_token)
        if not result.get("access_token"):
            raise ShopifyAPIError("Shopify token exchange returned no access token")
        logger.info("Stored offline access token for %s", shop_domain)
        return self.store(shop_domain, result["access_token"], result.get("scope")).access_token
