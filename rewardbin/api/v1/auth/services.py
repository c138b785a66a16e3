"""
Authentication service layer
Handles business logic for authentication
"""

from typing import Optional, Tuple
from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import logging
import uuid

from rewardbin.models import User, UserRole, UserStatus, UserSession
from rewardbin.core.security import SecurityUtils
from rewardbin.core.config import Settings
from rewardbin.core.exceptions import (
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    DuplicateResourceException,
)
from rewardbin.services.email import EmailService
from rewardbin.utils.helpers import utcnow
from .schemas import SignUpRequest

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service"""

    def __init__(self, db: AsyncSession, settings: Settings, email_service: Optional[EmailService] = None):
        self.db = db
        self.settings = settings
        self.email_service = email_service

    def _check_password(self, password: str) -> None:
        is_valid, message = SecurityUtils.validate_password(password, self.settings.PASSWORD_MIN_LENGTH)
        if not is_valid:
            raise BadRequestException(message, error_code="WEAK_PASSWORD")

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def create_session(
        self,
        user: User,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> UserSession:
        """Issue a new opaque session token for a user"""
        user_session = UserSession(
            token=SecurityUtils.generate_session_token(),
            user_id=user.id,
            expires_at=utcnow() + timedelta(days=self.settings.SESSION_EXPIRE_DAYS),
            ip_address=ip_address,
            user_agent=user_agent[:512] if user_agent else None,
        )
        self.db.add(user_session)
        await self.db.flush()
        return user_session

    async def sign_up(
        self,
        request: SignUpRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[UserSession, User]:
        """
        Register a new user and sign them in

        Raises:
            DuplicateResourceException: Email already registered
            BadRequestException: Password too weak
        """
        self._check_password(request.password)

        email = request.email.lower()
        if await self.get_user_by_email(email):
            raise DuplicateResourceException("User", "email", email)

        user = User(
            name=request.name,
            email=email,
            image=request.image,
            password_hash=SecurityUtils.hash_password(request.password),
            role=UserRole.USER,
            status=UserStatus.ACTIVE,
        )
        self.db.add(user)
        await self.db.flush()

        user_session = await self.create_session(user, ip_address, user_agent)
        await self.db.commit()

        logger.info(f"New user registered: {user.id}")

        if self.email_service:
            await self.email_service.send_welcome_email(user.email, user.name)

        return user_session, user

    async def sign_in(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[UserSession, User]:
        """
        Verify credentials and issue a session

        Raises:
            UnauthorizedException: Unknown email or wrong password
            ForbiddenException: Account banned or suspended
        """
        user = await self.get_user_by_email(email)
        if not user or not user.password_hash or not SecurityUtils.verify_password(password, user.password_hash):
            raise UnauthorizedException("Invalid email or password", error_code="INVALID_CREDENTIALS")

        if user.status != UserStatus.ACTIVE:
            raise ForbiddenException(f"Your account is {user.status.value}", error_code="ACCOUNT_DISABLED")

        user_session = await self.create_session(user, ip_address, user_agent)
        await self.db.commit()

        logger.info(f"User signed in: {user.id}")
        return user_session, user

    async def sign_out(self, token: str) -> None:
        await self.db.execute(delete(UserSession).where(UserSession.token == token))
        await self.db.commit()

    async def forgot_password(self, email: str) -> None:
        """
        Email a reset link when the account exists

        The caller always gets the same answer so emails cannot be probed.
        """
        user = await self.get_user_by_email(email)
        if not user or user.status == UserStatus.BANNED:
            logger.info("Password reset requested for unknown or banned account")
            return

        token = SecurityUtils.create_reset_token(str(user.id), self.settings)
        if self.email_service:
            await self.email_service.send_reset_password_email(user.email, user.name, token)

    async def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password and revoke every session of the user"""
        payload = SecurityUtils.decode_reset_token(token, self.settings)

        try:
            user_id = uuid.UUID(payload["sub"])
        except ValueError:
            raise BadRequestException("Invalid or expired reset token", error_code="INVALID_TOKEN")

        user = await self.db.get(User, user_id)
        if not user:
            raise BadRequestException("Invalid or expired reset token", error_code="INVALID_TOKEN")

        self._check_password(new_password)

        user.password_hash = SecurityUtils.hash_password(new_password)
        await self.db.execute(delete(UserSession).where(UserSession.user_id == user.id))
        await self.db.commit()

        logger.info(f"Password reset for user {user.id}")
        return user
