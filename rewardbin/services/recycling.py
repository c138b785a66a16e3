"""Recycling credit service"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
import logging
import math
import uuid

from rewardbin.models import Bin, RecycleHistory, RewardRule
from .bin_scan import BinScanService
from .points_ledger import PointsLedger

logger = logging.getLogger(__name__)


def calculate_points(total_count: int, reward_rule: Optional[RewardRule]) -> int:
    """Points earned for recycling total_count units under a rule"""
    if reward_rule is None:
        return 0
    return math.floor(total_count / reward_rule.unit * reward_rule.point)


class RecyclingService:
    """Record a recycling event and credit the points it earns"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.ledger = PointsLedger(db)
        self.bins = BinScanService(db)

    async def record(
        self,
        user_id: uuid.UUID,
        bin_id: uuid.UUID,
        total_count: int = 1,
        media_url: Optional[str] = None,
    ) -> RecycleHistory:
        """
        Append a recycle history and credit the ledger in one transaction

        Raises:
            NotFoundException: Unknown bin
            InvalidStateException: Bin or its store is inactive
        """
        recycle_bin = await self.bins.load_active_bin(bin_id)
        points = calculate_points(total_count, recycle_bin.material.reward_rule)

        history = RecycleHistory(
            user_id=user_id,
            bin_id=recycle_bin.id,
            points=points,
            total_count=total_count,
            media_url=media_url,
        )

        try:
            self.db.add(history)
            await self.db.flush()
            if points > 0:
                await self.ledger.credit(user_id, points)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"User {user_id} recycled {total_count} at bin {recycle_bin.id} for {points} points")
        return await self.get_history(history.id)

    async def get_history(self, history_id: uuid.UUID) -> Optional[RecycleHistory]:
        result = await self.db.execute(
            select(RecycleHistory)
            .options(selectinload(RecycleHistory.bin).selectinload(Bin.material))
            .where(RecycleHistory.id == history_id)
        )
        return result.scalar_one_or_none()
