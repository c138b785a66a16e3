"""
Material API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
from typing import Optional
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.core.database import get_db
from rewardbin.models import Bin, Material, Organization, RewardRule
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.utils.crud import apply_updates, ensure_exists, ensure_no_dependents, get_or_404
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import MaterialCreate, MaterialResponse, MaterialUpdate

router = APIRouter()

_LOAD = [selectinload(Material.reward_rule)]


async def _check_references(db: AsyncSession, data: dict) -> None:
    if data.get("reward_rule_id"):
        await ensure_exists(db, RewardRule, data["reward_rule_id"], name="Reward rule")
    if data.get("organization_id"):
        await ensure_exists(db, Organization, data["organization_id"])


@router.get("", response_model=Page[MaterialResponse])
async def list_materials(
    organization_id: Optional[uuid.UUID] = Query(None, alias="organizationId"),
    search: Optional[str] = Query(None),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"material": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = select(Material).options(*_LOAD).order_by(Material.created_at.desc())
    if organization_id:
        query = query.where(Material.organization_id == organization_id)
    if search:
        query = query.where(Material.name.ilike(f"%{search}%"))
    return await paginate(db, query, pagination)


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create_material(
    body: MaterialCreate,
    auth: AuthSession = Depends(require_permission({"material": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    data = body.model_dump()
    await _check_references(db, data)

    material = Material(**data)
    db.add(material)
    await db.commit()
    return await get_or_404(db, Material, material.id, options=_LOAD)


@router.get("/{material_id}", response_model=MaterialResponse)
async def get_material(
    material_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"material": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(db, Material, material_id, options=_LOAD)


@router.patch("/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: uuid.UUID,
    body: MaterialUpdate,
    auth: AuthSession = Depends(require_permission({"material": ["update"]})),
    db: AsyncSession = Depends(get_db),
):
    material = await get_or_404(db, Material, material_id)
    data = body.model_dump(exclude_unset=True)
    await _check_references(db, data)

    apply_updates(material, data)
    await db.commit()
    return await get_or_404(db, Material, material.id, options=_LOAD)


@router.delete("/{material_id}", response_model=MessageResponse)
async def delete_material(
    material_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"material": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    material = await get_or_404(db, Material, material_id)
    await ensure_no_dependents(db, [(Bin.material_id, material.id, "bins")], "material")

    await db.delete(material)
    await db.commit()
    return MessageResponse(message="Material deleted successfully")
