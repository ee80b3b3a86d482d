from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
import uuid

from app.core.database import Base
from app.core.types import GUID


class ShopSession(Base):
    """Offline Admin API token for an installed shop."""
    __tablename__ = "shop_sessions"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    shop_domain = Column(String, unique=True, index=True, nullable=False)
    access_token = Column(String, nullable=False)
    scope = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
