"""
Favourite coupon routes
A user's bookmarks on coupons
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
from datetime import datetime
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.api.v1.coupons.schemas import CouponResponse
from rewardbin.core.database import get_db
from rewardbin.core.exceptions import DuplicateResourceException, NotFoundException
from rewardbin.models import Coupon, FavouriteCoupon
from rewardbin.schemas.base import BaseSchema, MessageResponse, Page
from rewardbin.utils.crud import ensure_exists
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.pagination import PaginationParams, paginate

router = APIRouter()

_LOAD = [selectinload(FavouriteCoupon.coupon).selectinload(Coupon.organization)]


class FavouriteCouponCreate(BaseSchema):
    coupon_id: uuid.UUID


class FavouriteCouponResponse(BaseSchema):
    id: uuid.UUID
    user_id: uuid.UUID
    coupon_id: uuid.UUID
    coupon: CouponResponse
    created_at: datetime


def _to_response(favourite: FavouriteCoupon) -> FavouriteCouponResponse:
    coupon = CouponResponse.model_validate(favourite.coupon).model_copy(update={"is_favourite_coupon": True})
    return FavouriteCouponResponse.model_validate(favourite).model_copy(update={"coupon": coupon})


async def _get_own(db: AsyncSession, favourite_id: uuid.UUID, user_id: uuid.UUID) -> FavouriteCoupon:
    result = await db.execute(
        select(FavouriteCoupon)
        .options(*_LOAD)
        .where(FavouriteCoupon.id == favourite_id, FavouriteCoupon.user_id == user_id)
    )
    favourite = result.scalar_one_or_none()
    if favourite is None:
        raise NotFoundException("Favourite coupon not found")
    return favourite


@router.get("", response_model=Page[FavouriteCouponResponse])
async def list_favourite_coupons(
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"favouriteCoupon": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(FavouriteCoupon)
        .options(*_LOAD)
        .where(FavouriteCoupon.user_id == auth.user_id)
        .order_by(FavouriteCoupon.created_at.desc())
    )
    page = await paginate(db, query, pagination)
    return {"data": [_to_response(favourite) for favourite in page["data"]], "meta": page["meta"]}


@router.post("", response_model=FavouriteCouponResponse, status_code=status.HTTP_201_CREATED)
async def add_favourite_coupon(
    body: FavouriteCouponCreate,
    auth: AuthSession = Depends(require_permission({"favouriteCoupon": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(db, Coupon, body.coupon_id)

    existing = await db.scalar(
        select(FavouriteCoupon.id).where(
            FavouriteCoupon.user_id == auth.user_id,
            FavouriteCoupon.coupon_id == body.coupon_id,
        )
    )
    if existing:
        raise DuplicateResourceException("Favourite coupon", "couponId", str(body.coupon_id))

    favourite = FavouriteCoupon(user_id=auth.user_id, coupon_id=body.coupon_id)
    db.add(favourite)
    await db.commit()

    return _to_response(await _get_own(db, favourite.id, auth.user_id))


@router.get("/{favourite_id}", response_model=FavouriteCouponResponse)
async def get_favourite_coupon(
    favourite_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"favouriteCoupon": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    return _to_response(await _get_own(db, favourite_id, auth.user_id))


@router.delete("/{favourite_id}", response_model=MessageResponse)
async def remove_favourite_coupon(
    favourite_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"favouriteCoupon": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    favourite = await _get_own(db, favourite_id, auth.user_id)
    await db.delete(favourite)
    await db.commit()
    return MessageResponse(message="Favourite coupon removed successfully")
