from sqlalchemy import Column, String, DateTime, Date, Boolean, Integer, Text, UniqueConstraint
from sqlalchemy.sql import func
import uuid

from app.core.database import Base
from app.core.types import GUID
from app.core.time import utc_now


class PreOrderSetting(Base):
    __tablename__ = "pre_order_settings"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    shop_domain = Column(String, nullable=False, index=True)
    product_id = Column(String, nullable=False)
    variant_id = Column(String, nullable=False)

    enabled = Column(Boolean, default=False, nullable=False)
    expected_date = Column(Date, nullable=True)
    limit_quantity = Column(Integer, nullable=True)
    custom_text = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint('shop_domain', 'product_id', 'variant_id', name='uq_preorder_shop_product_variant'),
    )
