import uuid
from sqlalchemy import Column, String, DateTime, Boolean, Index
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.types import GUID
from app.core.time import utc_now

class WaitlistEntry(Base):
    __tablename__ = "waitlist_entries"
    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    shop_domain = Column(String, nullable=False, index=True)
    product_id = Column(String, nullable=False)
    variant_id = Column(String, nullable=False)
    email = Column(String, nullable=False)
    notified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())

    # Not unique: a customer may re-join once notified
    __table_args__ = (
        Index('ix_waitlist_shop_variant_notified', 'shop_domain', 'variant_id', 'notified'),
    )
