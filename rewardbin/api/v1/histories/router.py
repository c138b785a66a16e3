"""
Recycle and redeem history routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.core.database import get_db
from rewardbin.core.exceptions import NotFoundException
from rewardbin.models import Bin, Coupon, Material, RecycleHistory, RedeemHistory
from rewardbin.schemas.base import Page
from rewardbin.services.recycling import RecyclingService
from rewardbin.services.redemption import RedemptionService
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.helpers import as_utc
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import (
    RecycleHistoryCreate,
    RecycleHistoryResponse,
    RedeemHistoryCreate,
    RedeemHistoryResponse,
    UserRecycleHistoryResponse,
)

redeem_router = APIRouter()
recycle_router = APIRouter()
user_recycle_router = APIRouter()

_REDEEM_LOAD = [selectinload(RedeemHistory.coupon).selectinload(Coupon.organization)]
_RECYCLE_LOAD = [selectinload(RecycleHistory.bin).selectinload(Bin.material)]


# Redeem histories

@redeem_router.get("", response_model=Page[RedeemHistoryResponse])
async def list_redeem_histories(
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"redeemHistory": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    """Caller's redemptions, newest first"""
    query = (
        select(RedeemHistory)
        .options(*_REDEEM_LOAD)
        .where(RedeemHistory.user_id == auth.user_id)
        .order_by(RedeemHistory.created_at.desc())
    )
    return await paginate(db, query, pagination)


@redeem_router.post("", response_model=RedeemHistoryResponse, status_code=status.HTTP_201_CREATED)
async def create_redeem_history(
    body: RedeemHistoryCreate,
    auth: AuthSession = Depends(require_permission({"redeemHistory": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    """Redeem a coupon for points"""
    return await RedemptionService(db).redeem(auth.user_id, body.coupon_id, description=body.description)


@redeem_router.get("/{history_id}", response_model=RedeemHistoryResponse)
async def get_redeem_history(
    history_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"redeemHistory": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(RedeemHistory)
        .options(*_REDEEM_LOAD)
        .where(RedeemHistory.id == history_id, RedeemHistory.user_id == auth.user_id)
    )
    history = result.scalar_one_or_none()
    if history is None:
        raise NotFoundException("Redeem history not found")
    return history


# Recycle histories

@recycle_router.get("", response_model=Page[RecycleHistoryResponse])
async def list_recycle_histories(
    material_id: Optional[uuid.UUID] = Query(None, alias="materialId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"recycleHistory": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    """Caller's recycling events, newest first"""
    query = (
        select(RecycleHistory)
        .options(*_RECYCLE_LOAD)
        .where(RecycleHistory.user_id == auth.user_id)
        .order_by(RecycleHistory.created_at.desc())
    )
    if material_id:
        query = query.join(Bin, RecycleHistory.bin_id == Bin.id).where(Bin.material_id == material_id)
    if start_date:
        query = query.where(RecycleHistory.created_at >= as_utc(start_date))
    if end_date:
        query = query.where(RecycleHistory.created_at <= as_utc(end_date))
    return await paginate(db, query, pagination)


@recycle_router.post("", response_model=RecycleHistoryResponse, status_code=status.HTTP_201_CREATED)
async def create_recycle_history(
    body: RecycleHistoryCreate,
    auth: AuthSession = Depends(require_permission({"recycleHistory": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    """Record a recycling event and credit the points it earns"""
    return await RecyclingService(db).record(
        auth.user_id,
        body.bin_id,
        total_count=body.total_count,
        media_url=body.media_url,
    )


@recycle_router.get("/{history_id}", response_model=RecycleHistoryResponse)
async def get_recycle_history(
    history_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"recycleHistory": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(RecycleHistory)
        .options(*_RECYCLE_LOAD)
        .where(RecycleHistory.id == history_id, RecycleHistory.user_id == auth.user_id)
    )
    history = result.scalar_one_or_none()
    if history is None:
        raise NotFoundException("Recycle history not found")
    return history


# Recycle histories across all users

@user_recycle_router.get("", response_model=Page[UserRecycleHistoryResponse])
async def list_user_recycle_histories(
    user_id: Optional[uuid.UUID] = Query(None, alias="userId"),
    material_id: Optional[uuid.UUID] = Query(None, alias="materialId"),
    store_id: Optional[uuid.UUID] = Query(None, alias="storeId"),
    bin_id: Optional[uuid.UUID] = Query(None, alias="binId"),
    search_material: Optional[str] = Query(None, alias="searchMaterial"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"userRecycleHistory": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(RecycleHistory)
        .join(Bin, RecycleHistory.bin_id == Bin.id)
        .options(
            selectinload(RecycleHistory.user),
            selectinload(RecycleHistory.bin).selectinload(Bin.material),
            selectinload(RecycleHistory.bin).selectinload(Bin.store),
        )
        .order_by(RecycleHistory.created_at.desc())
    )
    if user_id:
        query = query.where(RecycleHistory.user_id == user_id)
    if material_id:
        query = query.where(Bin.material_id == material_id)
    if store_id:
        query = query.where(Bin.store_id == store_id)
    if bin_id:
        query = query.where(RecycleHistory.bin_id == bin_id)
    if search_material:
        query = query.join(Material, Bin.material_id == Material.id).where(
            Material.name.ilike(f"%{search_material}%")
        )
    return await paginate(db, query, pagination)
