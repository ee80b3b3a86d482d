from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List
from datetime import datetime
import uuid


class WaitlistJoin(BaseModel):
    """Storefront signup; unauthenticated so the shop travels in the body."""
    shop_domain: str = Field(..., min_length=1)
    product_id: str = Field(..., min_length=1)
    variant_id: str = Field(..., min_length=1)
    email: EmailStr

    @validator('shop_domain')
    def normalize_shop(cls, v):
        return v.strip().lower()

    @validator('email')
    def normalize_email(cls, v):
        return str(v).strip().lower()


class WaitlistEntry(BaseModel):
    id: uuid.UUID
    shop_domain: str
    product_id: str
    variant_id: str
    email: str
    notified: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WaitlistJoinResponse(BaseModel):
    success: bool = True
    entry: WaitlistEntry


class WaitlistEntryList(BaseModel):
    entries: List[WaitlistEntry]


class WaitlistNotifyRequest(BaseModel):
    variant_id: str = Field(..., min_length=1)
    shop_domain: Optional[str] = Field(None, description="Must match the session shop when given")


class WaitlistNotifyResponse(BaseModel):
    success: bool = True
    notified: int
