"""
Bin API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import logging
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, get_current_session, require_permission
from rewardbin.core.database import get_db
from rewardbin.models import Bin, Material, RecordStatus, RecycleHistory, Store
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.services.bin_scan import BinScanService
from rewardbin.utils.crud import apply_updates, ensure_exists, ensure_no_dependents, get_or_404
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import (
    BinCreate,
    BinResponse,
    BinUpdate,
    ScanData,
    ScannedBin,
    ScannedMaterial,
    ScannedRewardRule,
    ScannedStore,
    ScanRequest,
    ScanResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_references(db: AsyncSession, data: dict) -> None:
    if data.get("store_id"):
        await ensure_exists(db, Store, data["store_id"])
    if data.get("material_id"):
        await ensure_exists(db, Material, data["material_id"])


@router.post("/scan", response_model=ScanResponse)
async def scan_bin(
    body: ScanRequest,
    auth: AuthSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Describe a bin before recycling into it; never writes"""
    result = await BinScanService(db).scan(body.bin_id)

    store = ScannedStore.model_validate(result.store).model_copy(
        update={"organization_name": result.store.organization.name if result.store.organization else None}
    )
    return ScanResponse(
        data=ScanData(
            bin=ScannedBin.model_validate(result.bin),
            material=ScannedMaterial.model_validate(result.material),
            store=store,
            reward_rule=ScannedRewardRule.model_validate(result.reward_rule) if result.reward_rule else None,
            instructions=result.instruction,
        )
    )


@router.get("", response_model=Page[BinResponse])
async def list_bins(
    store_id: Optional[uuid.UUID] = Query(None, alias="storeId"),
    material_id: Optional[uuid.UUID] = Query(None, alias="materialId"),
    organization_id: Optional[uuid.UUID] = Query(None, alias="organizationId"),
    bin_status: Optional[RecordStatus] = Query(None, alias="status"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"bin": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = select(Bin).order_by(Bin.created_at.desc())
    if store_id:
        query = query.where(Bin.store_id == store_id)
    if material_id:
        query = query.where(Bin.material_id == material_id)
    if organization_id:
        query = query.join(Store, Bin.store_id == Store.id).where(Store.organization_id == organization_id)
    if bin_status:
        query = query.where(Bin.status == bin_status)
    return await paginate(db, query, pagination)


@router.post("", response_model=BinResponse, status_code=status.HTTP_201_CREATED)
async def create_bin(
    body: BinCreate,
    auth: AuthSession = Depends(require_permission({"bin": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump()
    await _check_references(db, data)

    new_bin = Bin(**data)
    db.add(new_bin)
    await db.commit()

    logger.info(f"Bin {new_bin.id} created in store {new_bin.store_id}")
    return new_bin


@router.get("/{bin_id}", response_model=BinResponse)
async def get_bin(
    bin_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"bin": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(db, Bin, bin_id)


@router.patch("/{bin_id}", response_model=BinResponse)
async def update_bin(
    bin_id: uuid.UUID,
    body: BinUpdate,
    auth: AuthSession = Depends(require_permission({"bin": ["update"]})),
    db: AsyncSession = Depends(get_db),
):
    existing = await get_or_404(db, Bin, bin_id)
    data = body.model_dump(exclude_unset=True)
    await _check_references(db, data)

    apply_updates(existing, data)
    await db.commit()
    return existing


@router.delete("/{bin_id}", response_model=MessageResponse)
async def delete_bin(
    bin_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"bin": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    existing = await get_or_404(db, Bin, bin_id)
    await ensure_no_dependents(db, [(RecycleHistory.bin_id, existing.id, "recycle histories")], "bin")

    await db.delete(existing)
    await db.commit()
    return MessageResponse(message="Bin deleted successfully")
