"""
Coupon schemas for request/response validation
"""

from pydantic import Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.models import CouponType, DealType, RecordStatus
from rewardbin.schemas.base import BaseSchema, reject_null
from rewardbin.utils.helpers import as_utc

# ~10MB image once base64 encoded
MAX_IMAGE_DATA_LENGTH = 15_000_000


def _check_image(v: Optional[str]) -> Optional[str]:
    if v and not (v.startswith("data:image/") or v.startswith("http://") or v.startswith("https://")):
        raise ValueError("Image must be a data URL starting with data:image/ or an http(s) URL")
    return v


class CouponCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=MAX_IMAGE_DATA_LENGTH)
    coupon_type: CouponType
    deal_type: DealType
    is_featured: bool = False
    discount_amount: int = Field(..., ge=0)
    points_to_redeem: int = Field(..., ge=0)
    start_date: datetime
    end_date: datetime
    organization_id: Optional[uuid.UUID] = None
    status: RecordStatus = RecordStatus.ACTIVE

    @field_validator('image_url')
    @classmethod
    def validate_image(cls, v):
        return _check_image(v)

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v):
        return as_utc(v)

    @model_validator(mode='after')
    def validate_discount_and_window(self):
        if self.coupon_type == CouponType.PERCENTAGE and self.discount_amount > 100:
            raise ValueError("Discount amount must be less than 100")
        if self.end_date < self.start_date:
            raise ValueError("End date must be after start date")
        return self


class CouponUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=MAX_IMAGE_DATA_LENGTH)
    coupon_type: Optional[CouponType] = None
    deal_type: Optional[DealType] = None
    is_featured: Optional[bool] = None
    discount_amount: Optional[int] = Field(None, ge=0)
    points_to_redeem: Optional[int] = Field(None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    organization_id: Optional[uuid.UUID] = None
    status: Optional[RecordStatus] = None

    @field_validator(
        'name', 'coupon_type', 'deal_type', 'is_featured', 'discount_amount',
        'points_to_redeem', 'start_date', 'end_date', 'status',
    )
    @classmethod
    def reject_null_columns(cls, v):
        return reject_null(v)

    @field_validator('image_url')
    @classmethod
    def validate_image(cls, v):
        return _check_image(v)

    @field_validator('start_date', 'end_date')
    @classmethod
    def normalize_dates(cls, v):
        return as_utc(v)


class CouponOrganization(BaseSchema):
    id: uuid.UUID
    name: str
    slug: Optional[str] = None
    logo: Optional[str] = None


class CouponResponse(BaseSchema):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    coupon_type: CouponType
    deal_type: DealType
    is_featured: bool
    discount_amount: int
    points_to_redeem: int
    start_date: datetime
    end_date: datetime
    status: RecordStatus
    organization_id: Optional[uuid.UUID] = None
    organization: Optional[CouponOrganization] = None
    is_favourite_coupon: bool = False
    created_at: datetime
    updated_at: datetime


class ClaimRequest(BaseSchema):
    coupon_id: uuid.UUID


class ClaimData(BaseSchema):
    id: uuid.UUID
    coupon_code: str
    coupon_id: uuid.UUID
    coupon_name: str
    coupon_image: Optional[str] = None
    points_redeemed: int
    organization_id: Optional[uuid.UUID] = None
    organization_name: Optional[str] = None
    organization_logo: Optional[str] = None
    organization_slug: Optional[str] = None
    claimed_at: datetime
    discount_amount: int
    deal_type: DealType
    coupon_type: CouponType


class ClaimResponse(BaseSchema):
    message: str = "Coupon claimed successfully"
    data: ClaimData
