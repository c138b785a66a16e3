"""
Store schemas for request/response validation
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
import re
import uuid

from rewardbin.models import RecordStatus
from rewardbin.schemas.base import BaseSchema, reject_null

ZIP_PATTERN = re.compile(r'^[0-9-]+$')


def _check_zip(v: Optional[str]) -> Optional[str]:
    if v is not None and not ZIP_PATTERN.match(v):
        raise ValueError('ZIP code must contain only numbers and hyphens')
    return v


class StoreBase(BaseSchema):
    """Base schema for stores"""
    name: str = Field(..., min_length=2, max_length=100, description="Store name")
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=2048)
    address1: str = Field(..., min_length=5, max_length=200)
    address2: Optional[str] = Field(None, max_length=200)
    city: str = Field(..., min_length=2, max_length=100)
    state: str = Field(..., min_length=2, max_length=100)
    zip: str = Field(..., min_length=5, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)
    lat: float = Field(..., ge=-90, le=90, description="Latitude")
    lng: float = Field(..., ge=-180, le=180, description="Longitude")

    @field_validator('zip')
    @classmethod
    def validate_zip(cls, v):
        return _check_zip(v)


class StoreCreate(StoreBase):
    organization_id: Optional[uuid.UUID] = None
    status: RecordStatus = RecordStatus.ACTIVE


class StoreUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=2048)
    address1: Optional[str] = Field(None, min_length=5, max_length=200)
    address2: Optional[str] = Field(None, max_length=200)
    city: Optional[str] = Field(None, min_length=2, max_length=100)
    state: Optional[str] = Field(None, min_length=2, max_length=100)
    zip: Optional[str] = Field(None, min_length=5, max_length=20)
    country: Optional[str] = Field(None, min_length=2, max_length=100)
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    organization_id: Optional[uuid.UUID] = None
    status: Optional[RecordStatus] = None

    @field_validator('name', 'address1', 'city', 'state', 'zip', 'country', 'lat', 'lng', 'status')
    @classmethod
    def reject_null_columns(cls, v):
        return reject_null(v)

    @field_validator('zip')
    @classmethod
    def validate_zip(cls, v):
        return _check_zip(v)


class StoreResponse(StoreBase):
    id: uuid.UUID
    organization_id: Optional[uuid.UUID] = None
    organization_name: Optional[str] = None
    status: RecordStatus
    distance: Optional[float] = Field(None, description="Kilometers from the requested point")
    created_at: datetime
    updated_at: datetime
