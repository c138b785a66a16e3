"""
User management service
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete
from typing import Optional
import logging
import uuid

from rewardbin.core.exceptions import NotFoundException
from rewardbin.models import (
    FavouriteCoupon,
    Member,
    RecycleHistory,
    RedeemHistory,
    User,
    UserRole,
    UserSession,
    UserStatus,
    UserTotalPoint,
)

logger = logging.getLogger(__name__)

# Child tables removed before the user row, in order
_OWNED_ROWS = (
    FavouriteCoupon,
    RecycleHistory,
    RedeemHistory,
    UserTotalPoint,
    Member,
    UserSession,
)


class UserService:
    """Account lifecycle operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    async def delete_account(self, user_id: uuid.UUID) -> None:
        """Remove a user and everything they own in one transaction"""
        await self.get_user(user_id)

        try:
            for model in _OWNED_ROWS:
                await self.db.execute(delete(model).where(model.user_id == user_id))
            await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Deleted account {user_id}")

    async def set_status(self, user_id: uuid.UUID, status: UserStatus, reason: Optional[str] = None) -> User:
        """Activate, suspend or ban a user; non-active users lose their sessions"""
        user = await self.get_user(user_id)
        user.status = status
        user.ban_reason = reason if status != UserStatus.ACTIVE else None

        if status != UserStatus.ACTIVE:
            await self.db.execute(delete(UserSession).where(UserSession.user_id == user_id))

        await self.db.commit()
        logger.info(f"User {user_id} status set to {status.value}")
        return user

    async def set_role(self, user_id: uuid.UUID, role: UserRole) -> User:
        user = await self.get_user(user_id)
        user.role = role
        await self.db.commit()
        logger.info(f"User {user_id} role set to {role.value}")
        return user
