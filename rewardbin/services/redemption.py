"""Coupon redemption service"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
import enum
import logging
import uuid

from rewardbin.models import Coupon, DealType, RecordStatus, RedeemHistory
from rewardbin.core.exceptions import (
    InsufficientPointsException,
    InvalidStateException,
    NotFoundException,
)
from rewardbin.utils.helpers import as_utc, utcnow, generate_claim_code, generate_redemption_code
from .points_ledger import PointsLedger

logger = logging.getLogger(__name__)


class CodeStyle(str, enum.Enum):
    """Format of the code handed to the user"""
    SECURE = "secure"
    CLAIM = "claim"


class RedemptionService:
    """Exchange points for a coupon code"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = PointsLedger(db)

    @staticmethod
    def generate_code(coupon: Coupon, code_style: CodeStyle) -> str:
        if code_style == CodeStyle.CLAIM:
            return generate_claim_code(coupon.name)
        return generate_redemption_code()

    async def redeem(
        self,
        user_id: uuid.UUID,
        coupon_id: uuid.UUID,
        description: Optional[str] = None,
        code_style: CodeStyle = CodeStyle.SECURE,
    ) -> RedeemHistory:
        """
        Redeem a coupon for a user

        All checks run before anything is written. The history row and the
        ledger debit are committed together or not at all.

        Raises:
            NotFoundException: Unknown coupon
            InvalidStateException: Coupon cannot be redeemed for points right now
            InsufficientPointsException: Balance missing or below the coupon cost
        """
        coupon = await self.db.get(Coupon, coupon_id)
        if not coupon:
            raise NotFoundException("Coupon not found")

        if coupon.deal_type == DealType.NOPOINTS:
            raise InvalidStateException("Coupon is not redeemable")

        if coupon.status != RecordStatus.ACTIVE:
            raise InvalidStateException("Coupon is not active")

        now = utcnow()
        if now < as_utc(coupon.start_date) or now > as_utc(coupon.end_date):
            raise InvalidStateException("Coupon is not valid at this time")

        cost = coupon.points_to_redeem
        if not cost:
            raise InvalidStateException("Coupon does not have points to redeem")

        balance = await self.ledger.get_balance(user_id)
        if balance < cost:
            raise InsufficientPointsException(required=cost, available=balance)

        history = RedeemHistory(
            user_id=user_id,
            coupon_id=coupon.id,
            points=cost,
            coupon_code=self.generate_code(coupon, code_style),
            description=description or f"Redeemed coupon: {coupon.name}",
        )

        try:
            self.db.add(history)
            await self.db.flush()
            await self.ledger.debit(user_id, cost)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"User {user_id} redeemed coupon {coupon.id} for {cost} points")
        return await self.get_history(history.id)

    async def get_history(self, history_id: uuid.UUID) -> Optional[RedeemHistory]:
        """Redeem history with its coupon and organization loaded"""
        result = await self.db.execute(
            select(RedeemHistory)
            .options(selectinload(RedeemHistory.coupon).selectinload(Coupon.organization))
            .where(RedeemHistory.id == history_id)
        )
        return result.scalar_one_or_none()
