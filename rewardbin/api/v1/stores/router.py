"""
Store API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, or_
from typing import Optional
import logging
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.core.database import get_db
from rewardbin.models import Bin, Organization, RecordStatus, Store
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.services.stores import filter_by_distance
from rewardbin.utils.crud import apply_updates, ensure_exists, ensure_no_dependents, get_or_404
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import StoreCreate, StoreResponse, StoreUpdate

logger = logging.getLogger(__name__)

router = APIRouter()

_LOAD = (selectinload(Store.organization),)


def _to_response(store: Store, distance: Optional[float] = None) -> StoreResponse:
    organization = store.organization
    return StoreResponse.model_validate(store).model_copy(
        update={
            "organization_name": organization.name if organization else None,
            "distance": distance,
        }
    )


@router.get("", response_model=Page[StoreResponse])
async def list_stores(
    organization_id: Optional[uuid.UUID] = Query(None, alias="organizationId"),
    store_status: Optional[RecordStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Search name or city"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, gt=0, description="Radius in kilometers"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"store": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    """
    List stores, optionally within radius km of (lat, lng)

    The distance filter runs on the fetched page, so a page can hold fewer
    than perPage stores while meta still describes the unfiltered page.
    """
    query = select(Store).options(*_LOAD).order_by(Store.created_at.desc())
    if organization_id:
        query = query.where(Store.organization_id == organization_id)
    if store_status:
        query = query.where(Store.status == store_status)
    if search:
        query = query.where(or_(Store.name.ilike(f"%{search}%"), Store.city.ilike(f"%{search}%")))

    page = await paginate(db, query, pagination)
    data = [
        _to_response(store, distance)
        for store, distance in filter_by_distance(page["data"], lat, lng, radius)
    ]
    return {"data": data, "meta": page["meta"]}


@router.post("", response_model=StoreResponse, status_code=status.HTTP_201_CREATED)
async def create_store(
    body: StoreCreate,
    auth: AuthSession = Depends(require_permission({"store": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    if body.organization_id:
        await ensure_exists(db, Organization, body.organization_id)

    store = Store(**body.model_dump())
    db.add(store)
    await db.commit()

    logger.info(f"Store {store.id} created by {auth.user_id}")
    return _to_response(await get_or_404(db, Store, store.id, options=_LOAD, populate_existing=True))


@router.get("/{store_id}", response_model=StoreResponse)
async def get_store(
    store_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"store": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    return _to_response(await get_or_404(db, Store, store_id, options=_LOAD, populate_existing=True))


@router.patch("/{store_id}", response_model=StoreResponse)
async def update_store(
    store_id: uuid.UUID,
    body: StoreUpdate,
    auth: AuthSession = Depends(require_permission({"store": ["update"]})),
    db: AsyncSession = Depends(get_db),
):
    store = await get_or_404(db, Store, store_id)
    data = body.model_dump(exclude_unset=True)
    if data.get("organization_id"):
        await ensure_exists(db, Organization, data["organization_id"])

    apply_updates(store, data)
    await db.commit()

    store = await get_or_404(db, Store, store.id, options=_LOAD, populate_existing=True)
    return _to_response(store)


@router.delete("/{store_id}", response_model=MessageResponse)
async def delete_store(
    store_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"store": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    store = await get_or_404(db, Store, store_id)
    await ensure_no_dependents(db, [(Bin.store_id, store.id, "bins")], "store")

    await db.delete(store)
    await db.commit()

    logger.info(f"Store {store_id} deleted by {auth.user_id}")
    return MessageResponse(message="Store deleted successfully")
