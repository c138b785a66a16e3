"""
Organization and member schemas
"""

from pydantic import AliasChoices, Field, field_validator
from typing import Optional
from datetime import datetime
import re
import uuid

from rewardbin.models import MemberRole
from rewardbin.schemas.base import BaseSchema, reject_null

SLUG_PATTERN = re.compile(r'^[a-z0-9-]+$')


def _check_slug(v: Optional[str]) -> Optional[str]:
    if v is not None and not SLUG_PATTERN.match(v):
        raise ValueError('Slug must contain only lowercase letters, numbers, and hyphens')
    return v


class OrganizationCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255, description="Organization name")
    slug: Optional[str] = Field(None, min_length=2, max_length=255, description="URL-friendly slug")
    logo: Optional[str] = Field(None, max_length=2048, description="Logo URL")
    organization_metadata: Optional[str] = Field(None, alias="metadata", description="Free-form metadata")

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        return _check_slug(v)


class OrganizationUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    slug: Optional[str] = Field(None, min_length=2, max_length=255)
    logo: Optional[str] = Field(None, max_length=2048)
    organization_metadata: Optional[str] = Field(None, alias="metadata")

    @field_validator('name')
    @classmethod
    def reject_null_name(cls, v):
        return reject_null(v)

    @field_validator('slug')
    @classmethod
    def validate_slug(cls, v):
        return _check_slug(v)


class OrganizationResponse(BaseSchema):
    id: uuid.UUID
    name: str
    slug: Optional[str] = None
    logo: Optional[str] = None
    organization_metadata: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("organization_metadata", "metadata"),
        serialization_alias="metadata",
    )
    created_at: datetime
    updated_at: datetime


class MemberCreate(BaseSchema):
    user_id: uuid.UUID
    role: MemberRole = MemberRole.MEMBER


class MemberUpdate(BaseSchema):
    role: MemberRole


class MemberUser(BaseSchema):
    id: uuid.UUID
    name: str
    email: str


class MemberResponse(BaseSchema):
    id: uuid.UUID
    organization_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    user: MemberUser
    created_at: datetime
