"""
Recycle and redeem history schemas
"""

from pydantic import Field
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.api.v1.coupons.schemas import CouponOrganization
from rewardbin.models import CouponType, DealType
from rewardbin.schemas.base import BaseSchema


class RedeemHistoryCreate(BaseSchema):
    coupon_id: uuid.UUID
    description: Optional[str] = Field(None, min_length=1, max_length=500)


class RedeemedCoupon(BaseSchema):
    id: uuid.UUID
    name: str
    image_url: Optional[str] = None
    coupon_type: CouponType
    deal_type: DealType
    discount_amount: int
    organization: Optional[CouponOrganization] = None


class RedeemHistoryResponse(BaseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    coupon_id: uuid.UUID
    points: int
    coupon_code: str
    description: Optional[str] = None
    coupon: RedeemedCoupon
    created_at: datetime


class RecycleHistoryCreate(BaseSchema):
    bin_id: uuid.UUID
    total_count: int = Field(1, ge=1, le=10_000, description="Units recycled")
    media_url: Optional[str] = Field(None, max_length=2048)


class RecycledMaterial(BaseSchema):
    id: uuid.UUID
    name: str


class RecycledStore(BaseSchema):
    id: uuid.UUID
    name: str
    address1: str
    city: str
    state: str
    country: str


class RecycledBin(BaseSchema):
    id: uuid.UUID
    number: str
    store_id: uuid.UUID
    material: RecycledMaterial


class RecycleHistoryResponse(BaseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    bin_id: uuid.UUID
    points: int
    total_count: int
    media_url: Optional[str] = None
    bin: RecycledBin
    created_at: datetime


class RecyclingUser(BaseSchema):
    id: uuid.UUID
    name: str
    email: str


class StaffRecycledBin(RecycledBin):
    store: RecycledStore


class UserRecycleHistoryResponse(RecycleHistoryResponse):
    """Recycle history as seen by staff, with the user and store"""
    user: RecyclingUser
    bin: StaffRecycledBin
