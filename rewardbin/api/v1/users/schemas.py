"""
User management schemas
"""

from pydantic import Field
from typing import Optional

from rewardbin.api.v1.auth.schemas import UserResponse
from rewardbin.models import UserRole, UserStatus
from rewardbin.schemas.base import BaseSchema


class UserDetailResponse(UserResponse):
    """User with ledger balance"""
    ban_reason: Optional[str] = None
    total_points: int = 0


class UserStatusUpdate(BaseSchema):
    status: UserStatus
    reason: Optional[str] = Field(None, max_length=500)


class UserRoleUpdate(BaseSchema):
    role: UserRole
