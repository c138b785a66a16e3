"""
Coupon API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, delete
from typing import Optional, Set
import logging
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, get_current_session, require_permission
from rewardbin.core.database import get_db
from rewardbin.core.exceptions import ValidationException
from rewardbin.models import Coupon, CouponType, DealType, FavouriteCoupon, Organization, RecordStatus, RedeemHistory
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.services.redemption import CodeStyle, RedemptionService
from rewardbin.services.storage import StorageService, is_data_url
from rewardbin.utils.crud import apply_updates, ensure_exists, ensure_no_dependents, get_or_404
from rewardbin.utils.dependencies import get_pagination_params, get_storage_service
from rewardbin.utils.helpers import utcnow, as_utc
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import ClaimData, ClaimRequest, ClaimResponse, CouponCreate, CouponResponse, CouponUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

_LOAD = [selectinload(Coupon.organization)]


def image_public_id(coupon_id: uuid.UUID) -> str:
    return f"coupon-{coupon_id}"


async def _favourite_ids(db: AsyncSession, user_id: uuid.UUID, coupon_ids) -> Set[uuid.UUID]:
    if not coupon_ids:
        return set()
    result = await db.execute(
        select(FavouriteCoupon.coupon_id).where(
            FavouriteCoupon.user_id == user_id,
            FavouriteCoupon.coupon_id.in_(coupon_ids),
        )
    )
    return set(result.scalars().all())


def _to_response(coupon: Coupon, favourites: Set[uuid.UUID]) -> CouponResponse:
    return CouponResponse.model_validate(coupon).model_copy(
        update={"is_favourite_coupon": coupon.id in favourites}
    )


async def _store_image(storage: StorageService, coupon: Coupon, image: Optional[str]) -> None:
    """Upload inline images and keep plain URLs as they are"""
    if is_data_url(image):
        uploaded = await storage.upload_image(image, public_id=image_public_id(coupon.id))
        coupon.image_url = uploaded["url"]
    else:
        coupon.image_url = image


@router.post("/claim", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
async def claim_coupon(
    body: ClaimRequest,
    auth: AuthSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Redeem a coupon from the mobile app and return a short claim code"""
    history = await RedemptionService(db).redeem(auth.user_id, body.coupon_id, code_style=CodeStyle.CLAIM)
    coupon = history.coupon
    organization = coupon.organization

    return ClaimResponse(
        data=ClaimData(
            id=history.id,
            coupon_code=history.coupon_code,
            coupon_id=coupon.id,
            coupon_name=coupon.name,
            coupon_image=coupon.image_url,
            points_redeemed=history.points,
            organization_id=organization.id if organization else None,
            organization_name=organization.name if organization else None,
            organization_logo=organization.logo if organization else None,
            organization_slug=organization.slug if organization else None,
            claimed_at=history.created_at,
            discount_amount=coupon.discount_amount,
            deal_type=coupon.deal_type,
            coupon_type=coupon.coupon_type,
        )
    )


@router.get("", response_model=Page[CouponResponse])
async def list_coupons(
    include_expired: bool = Query(False, alias="includeExpired"),
    is_featured: Optional[bool] = Query(None, alias="isFeatured"),
    deal_type: Optional[DealType] = Query(None, alias="dealType"),
    organization_id: Optional[uuid.UUID] = Query(None, alias="organizationId"),
    search: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"coupon": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    """Active coupons inside their validity window unless includeExpired is set"""
    query = select(Coupon).options(*_LOAD).order_by(Coupon.created_at.desc())
    if not include_expired:
        now = utcnow()
        query = query.where(
            Coupon.status == RecordStatus.ACTIVE,
            Coupon.start_date <= now,
            Coupon.end_date >= now,
        )
    if is_featured is not None:
        query = query.where(Coupon.is_featured == is_featured)
    if deal_type:
        query = query.where(Coupon.deal_type == deal_type)
    if organization_id:
        query = query.where(Coupon.organization_id == organization_id)
    if search:
        query = query.where(Coupon.name.ilike(f"%{search}%"))

    page = await paginate(db, query, pagination)
    favourites = await _favourite_ids(db, auth.user_id, [coupon.id for coupon in page["data"]])
    return {
        "data": [_to_response(coupon, favourites) for coupon in page["data"]],
        "meta": page["meta"],
    }


@router.post("", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    body: CouponCreate,
    auth: AuthSession = Depends(require_permission({"coupon": ["create"]})),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    if body.organization_id:
        await ensure_exists(db, Organization, body.organization_id)

    coupon = Coupon(**body.model_dump(exclude={"image_url"}))
    db.add(coupon)
    await db.flush()

    await _store_image(storage, coupon, body.image_url)
    await db.commit()

    logger.info(f"Coupon {coupon.id} created by {auth.user_id}")
    coupon = await get_or_404(db, Coupon, coupon.id, options=_LOAD)
    return _to_response(coupon, set())


@router.get("/{coupon_id}", response_model=CouponResponse)
async def get_coupon(
    coupon_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"coupon": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    coupon = await get_or_404(db, Coupon, coupon_id, options=_LOAD)
    return _to_response(coupon, await _favourite_ids(db, auth.user_id, [coupon.id]))


@router.patch("/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: uuid.UUID,
    body: CouponUpdate,
    auth: AuthSession = Depends(require_permission({"coupon": ["update"]})),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    coupon = await get_or_404(db, Coupon, coupon_id)
    data = body.model_dump(exclude_unset=True)

    # Validate against the merged state since updates are partial
    coupon_type = data.get("coupon_type", coupon.coupon_type)
    discount_amount = data.get("discount_amount", coupon.discount_amount)
    if coupon_type == CouponType.PERCENTAGE and discount_amount > 100:
        raise ValidationException(details={"discountAmount": ["Discount amount must be less than 100"]})

    start_date = as_utc(data.get("start_date", coupon.start_date))
    end_date = as_utc(data.get("end_date", coupon.end_date))
    if end_date < start_date:
        raise ValidationException(details={"endDate": ["End date must be after start date"]})

    if data.get("organization_id"):
        await ensure_exists(db, Organization, data["organization_id"])

    image = data.pop("image_url", coupon.image_url)
    apply_updates(coupon, data)
    if "image_url" in body.model_fields_set:
        await _store_image(storage, coupon, image)
    await db.commit()

    coupon = await get_or_404(db, Coupon, coupon.id, options=_LOAD)
    return _to_response(coupon, await _favourite_ids(db, auth.user_id, [coupon.id]))


@router.delete("/{coupon_id}", response_model=MessageResponse)
async def delete_coupon(
    coupon_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"coupon": ["delete"]})),
    db: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    coupon = await get_or_404(db, Coupon, coupon_id)
    await ensure_no_dependents(db, [(RedeemHistory.coupon_id, coupon.id, "redeem histories")], "coupon")

    had_image = bool(coupon.image_url)
    await db.execute(delete(FavouriteCoupon).where(FavouriteCoupon.coupon_id == coupon.id))
    await db.delete(coupon)
    await db.commit()

    if had_image:
        await storage.delete_image(image_public_id(coupon_id))

    logger.info(f"Coupon {coupon_id} deleted by {auth.user_id}")
    return MessageResponse(message="Coupon deleted successfully")
