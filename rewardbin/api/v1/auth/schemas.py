"""
Authentication schemas for request/response validation
"""

from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.models import UserRole, UserStatus
from rewardbin.schemas.base import BaseSchema


class SignUpRequest(BaseSchema):
    """Create an account with email and password"""
    name: str = Field(..., min_length=1, max_length=100, examples=["Jane Doe"])
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    image: Optional[str] = Field(None, max_length=2048)


class SignInRequest(BaseSchema):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordRequest(BaseSchema):
    email: EmailStr


class ResetPasswordRequest(BaseSchema):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1, max_length=128)


class UserResponse(BaseSchema):
    """Public view of a user"""
    id: uuid.UUID
    name: str
    email: str
    email_verified: bool
    image: Optional[str] = None
    role: UserRole
    status: UserStatus
    created_at: datetime


class SessionResponse(BaseSchema):
    """Issued session and its owner"""
    token: str
    expires_at: datetime
    user: UserResponse
