"""
Organization and membership routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
from typing import Optional
import logging
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.core.database import get_db
from rewardbin.core.exceptions import DuplicateResourceException, NotFoundException
from rewardbin.models import Coupon, Material, Member, Organization, RewardRule, Store, User
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.utils.crud import apply_updates, ensure_exists, ensure_no_dependents, get_or_404
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import (
    MemberCreate,
    MemberResponse,
    MemberUpdate,
    OrganizationCreate,
    OrganizationResponse,
    OrganizationUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _ensure_slug_free(db: AsyncSession, slug: Optional[str], exclude_id: Optional[uuid.UUID] = None) -> None:
    if not slug:
        return
    query = select(Organization.id).where(Organization.slug == slug)
    if exclude_id:
        query = query.where(Organization.id != exclude_id)
    if await db.scalar(query):
        raise DuplicateResourceException("Organization", "slug", slug)


@router.get("", response_model=Page[OrganizationResponse])
async def list_organizations(
    search: Optional[str] = Query(None, description="Search by name"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"organization": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = select(Organization).order_by(Organization.created_at.desc())
    if search:
        query = query.where(Organization.name.ilike(f"%{search}%"))
    return await paginate(db, query, pagination)


@router.post("", response_model=OrganizationResponse, status_code=status.HTTP_201_CREATED)
async def create_organization(
    body: OrganizationCreate,
    auth: AuthSession = Depends(require_permission({"organization": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    await _ensure_slug_free(db, body.slug)

    organization = Organization(**body.model_dump())
    db.add(organization)
    await db.commit()

    logger.info(f"Organization {organization.id} created by {auth.user_id}")
    return organization


@router.get("/{organization_id}", response_model=OrganizationResponse)
async def get_organization(
    organization_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"organization": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(db, Organization, organization_id)


@router.patch("/{organization_id}", response_model=OrganizationResponse)
async def update_organization(
    organization_id: uuid.UUID,
    body: OrganizationUpdate,
    auth: AuthSession = Depends(require_permission({"organization": ["update"]})),
    db: AsyncSession = Depends(get_db),
):
    organization = await get_or_404(db, Organization, organization_id)
    data = body.model_dump(exclude_unset=True)
    await _ensure_slug_free(db, data.get("slug"), exclude_id=organization.id)

    apply_updates(organization, data)
    await db.commit()
    return organization


@router.delete("/{organization_id}", response_model=MessageResponse)
async def delete_organization(
    organization_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"organization": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    organization = await get_or_404(db, Organization, organization_id)
    await ensure_no_dependents(
        db,
        [
            (Store.organization_id, organization.id, "stores"),
            (Material.organization_id, organization.id, "materials"),
            (RewardRule.organization_id, organization.id, "reward rules"),
            (Coupon.organization_id, organization.id, "coupons"),
        ],
        "organization",
    )

    await db.delete(organization)
    await db.commit()

    logger.info(f"Organization {organization_id} deleted by {auth.user_id}")
    return MessageResponse(message="Organization deleted successfully")


# Members

@router.get("/{organization_id}/members", response_model=Page[MemberResponse])
async def list_members(
    organization_id: uuid.UUID,
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"member": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(db, Organization, organization_id)
    query = (
        select(Member)
        .options(selectinload(Member.user))
        .where(Member.organization_id == organization_id)
        .order_by(Member.created_at)
    )
    return await paginate(db, query, pagination)


@router.post("/{organization_id}/members", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def add_member(
    organization_id: uuid.UUID,
    body: MemberCreate,
    auth: AuthSession = Depends(require_permission({"member": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    await ensure_exists(db, Organization, organization_id)
    await ensure_exists(db, User, body.user_id)

    existing = await db.scalar(
        select(Member.id).where(Member.organization_id == organization_id, Member.user_id == body.user_id)
    )
    if existing:
        raise DuplicateResourceException("Member", "userId", str(body.user_id))

    member = Member(organization_id=organization_id, user_id=body.user_id, role=body.role)
    db.add(member)
    await db.commit()

    return await get_or_404(db, Member, member.id, options=[selectinload(Member.user)])


@router.patch("/{organization_id}/members/{member_id}", response_model=MemberResponse)
async def update_member(
    organization_id: uuid.UUID,
    member_id: uuid.UUID,
    body: MemberUpdate,
    auth: AuthSession = Depends(require_permission({"member": ["update"]})),
    db: AsyncSession = Depends(get_db),
):
    member = await get_or_404(db, Member, member_id, options=[selectinload(Member.user)])
    if member.organization_id != organization_id:
        raise NotFoundException("Member not found")

    member.role = body.role
    await db.commit()
    return member


@router.delete("/{organization_id}/members/{member_id}", response_model=MessageResponse)
async def remove_member(
    organization_id: uuid.UUID,
    member_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"member": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    member = await get_or_404(db, Member, member_id)
    if member.organization_id != organization_id:
        raise NotFoundException("Member not found")

    await db.delete(member)
    await db.commit()
    return MessageResponse(message="Member removed successfully")
