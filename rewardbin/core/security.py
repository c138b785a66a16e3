"""
Security utilities for authentication
Handles password hashing, session tokens and signed reset tokens
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext
import secrets
import re

from .config import Settings
from .exceptions import BadRequestException

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

RESET_TOKEN_TYPE = "reset_password"


class SecurityUtils:
    """Security utility functions"""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify password against hash"""
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def hash_password(password: str) -> str:
        """Hash password using bcrypt"""
        return pwd_context.hash(password)

    @staticmethod
    def validate_password(password: str, min_length: int) -> tuple[bool, str]:
        """
        Validate password strength
        Returns (is_valid, error_message)
        """
        if len(password) < min_length:
            return False, f"Password must be at least {min_length} characters long"

        if not re.search(r"[A-Za-z]", password):
            return False, "Password must contain at least one letter"

        if not re.search(r"\d", password):
            return False, "Password must contain at least one digit"

        return True, ""

    @staticmethod
    def generate_session_token() -> str:
        """Generate opaque session token"""
        return secrets.token_urlsafe(32)

    @staticmethod
    def create_reset_token(user_id: str, settings: Settings) -> str:
        """Create JWT password reset token"""
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.RESET_PASSWORD_TOKEN_EXPIRE_MINUTES)
        to_encode = {"sub": str(user_id), "exp": expire, "type": RESET_TOKEN_TYPE}
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_reset_token(token: str, settings: Settings) -> Dict[str, Any]:
        """Decode and validate a password reset token"""
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise BadRequestException("Invalid or expired reset token", error_code="INVALID_TOKEN")

        if payload.get("type") != RESET_TOKEN_TYPE or not payload.get("sub"):
            raise BadRequestException("Invalid or expired reset token", error_code="INVALID_TOKEN")

        return payload
