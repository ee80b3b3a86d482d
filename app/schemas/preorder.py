from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import date, datetime
import uuid


class PreOrderSettingBase(BaseModel):
    product_id: str = Field(..., min_length=1, description="Shopify product GID")
    variant_id: str = Field(..., min_length=1, description="Shopify variant GID")
    enabled: bool = False
    expected_date: Optional[date] = None
    limit_quantity: Optional[int] = Field(None, description="Maximum units sold on pre-order")
    custom_text: Optional[str] = Field(None, max_length=500)

    @validator('limit_quantity')
    def limit_quantity_positive(cls, v):
        if v is None or v == 0:
            return None
        if v < 0:
            raise ValueError('limit_quantity must be a positive integer')
        return v

    @validator('custom_text')
    def blank_text_is_none(cls, v):
        if v is None:
            return None
        v = v.strip()
        return v or None


class PreOrderSave(PreOrderSettingBase):
    """Body of POST /preorders; the shop comes from the session."""
    pass


class PreOrderSettingIn(PreOrderSettingBase):
    shop_domain: str


class PreOrderSetting(PreOrderSettingBase):
    id: uuid.UUID
    shop_domain: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PreOrderList(BaseModel):
    pre_orders: List[PreOrderSetting]


class PreOrderSaveResponse(BaseModel):
    success: bool = True
    pre_order: PreOrderSetting
