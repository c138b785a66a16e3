"""
Point balance routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from datetime import datetime
from typing import Optional
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, get_current_session
from rewardbin.core.database import get_db
from rewardbin.models import RecycleHistory, RedeemHistory
from rewardbin.schemas.base import BaseSchema
from rewardbin.services.points_ledger import PointsLedger

router = APIRouter()


class PointsSummary(BaseSchema):
    user_id: uuid.UUID
    total_points: int
    earned_points: int
    spent_points: int
    updated_at: Optional[datetime] = None


class PointsTotal(BaseSchema):
    user_id: uuid.UUID
    name: str
    email: str
    total_points: int


@router.get("", response_model=PointsSummary)
async def get_points(
    auth: AuthSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Caller's balance with lifetime earned and spent totals"""
    account = await PointsLedger(db).get_account(auth.user_id)
    earned = await db.scalar(
        select(func.coalesce(func.sum(RecycleHistory.points), 0)).where(RecycleHistory.user_id == auth.user_id)
    )
    spent = await db.scalar(
        select(func.coalesce(func.sum(RedeemHistory.points), 0)).where(RedeemHistory.user_id == auth.user_id)
    )

    return PointsSummary(
        user_id=auth.user_id,
        total_points=account.total_points if account else 0,
        earned_points=earned or 0,
        spent_points=spent or 0,
        updated_at=account.updated_at if account else None,
    )


@router.get("/total", response_model=PointsTotal)
async def get_total_points(
    auth: AuthSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    return PointsTotal(
        user_id=auth.user_id,
        name=auth.user.name,
        email=auth.user.email,
        total_points=await PointsLedger(db).get_balance(auth.user_id),
    )
