"""Points ledger service"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy import select, update
import logging
import uuid

from rewardbin.models import UserTotalPoint
from rewardbin.core.exceptions import BadRequestException, InsufficientPointsException
from rewardbin.utils.helpers import utcnow

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PointsLedger:
    """
    Per-user running point balance

    Every mutation is a single statement so concurrent requests cannot
    interleave a read and a write. Nothing here commits; the caller owns
    the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_account(self, user_id: uuid.UUID) -> Optional[UserTotalPoint]:
        """Ledger row for a user, or None before the first credit"""
        result = await self.db.execute(
            select(UserTotalPoint)
            .where(UserTotalPoint.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_balance(self, user_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(UserTotalPoint.total_points).where(UserTotalPoint.user_id == user_id)
        )
        return result.scalar_one_or_none() or 0

    async def credit(self, user_id: uuid.UUID, amount: int) -> int:
        """
        Add points, creating the ledger row when missing

        Args:
            user_id: Account owner
            amount: Positive number of points

        Returns:
            New balance
        """
        if amount <= 0:
            raise BadRequestException("Credit amount must be positive")

        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise NotImplementedError(f"Points ledger does not support the {dialect} dialect")

        now = utcnow()
        stmt = insert(UserTotalPoint).values(
            id=uuid.uuid4(),
            user_id=user_id,
            total_points=amount,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserTotalPoint.user_id],
            set_={
                "total_points": UserTotalPoint.total_points + amount,
                "updated_at": now,
            },
        ).returning(UserTotalPoint.total_points)

        result = await self.db.execute(stmt)
        balance = result.scalar_one()

        logger.info(f"Credited {amount} points to user {user_id}, balance {balance}")
        return balance

    async def debit(self, user_id: uuid.UUID, amount: int) -> int:
        """
        Remove points only when the balance covers the amount

        Raises:
            InsufficientPointsException: No row, or balance below amount.
                Nothing is changed in that case.
        """
        if amount <= 0:
            raise BadRequestException("Debit amount must be positive")

        stmt = (
            update(UserTotalPoint)
            .where(
                UserTotalPoint.user_id == user_id,
                UserTotalPoint.total_points >= amount,
            )
            .values(
                total_points=UserTotalPoint.total_points - amount,
                updated_at=utcnow(),
            )
            .returning(UserTotalPoint.total_points)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        balance = result.scalar_one_or_none()

        if balance is None:
            available = await self.get_balance(user_id)
            logger.info(f"Rejected debit of {amount} points for user {user_id}, balance {available}")
            raise InsufficientPointsException(required=amount, available=available)

        logger.info(f"Debited {amount} points from user {user_id}, balance {balance}")
        return balance
