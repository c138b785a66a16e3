"""
User API routes
Self-service account deletion and admin user management
"""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import Optional
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, get_current_session, require_permission
from rewardbin.api.v1.auth.schemas import UserResponse
from rewardbin.core.config import Settings
from rewardbin.core.database import get_db
from rewardbin.models import User, UserRole, UserStatus
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.services.points_ledger import PointsLedger
from rewardbin.utils.dependencies import get_pagination_params, get_settings_dep
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import UserDetailResponse, UserRoleUpdate, UserStatusUpdate
from .services import UserService

account_router = APIRouter()
router = APIRouter()


async def _detail(db: AsyncSession, user: User) -> UserDetailResponse:
    balance = await PointsLedger(db).get_balance(user.id)
    return UserDetailResponse.model_validate(user).model_copy(update={"total_points": balance})


@account_router.delete("", response_model=MessageResponse)
async def delete_own_account(
    response: Response,
    auth: AuthSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    """Delete the caller's account with all of its history"""
    await UserService(db).delete_account(auth.user_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Account deleted successfully")


@router.get("", response_model=Page[UserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    user_status: Optional[UserStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, description="Search by name or email"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"user": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = select(User).order_by(User.created_at.desc())
    if role:
        query = query.where(User.role == role)
    if user_status:
        query = query.where(User.status == user_status)
    if search:
        query = query.where(or_(User.name.ilike(f"%{search}%"), User.email.ilike(f"%{search}%")))
    return await paginate(db, query, pagination)


@router.get("/{user_id}", response_model=UserDetailResponse)
async def get_user(
    user_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"user": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).get_user(user_id)
    return await _detail(db, user)


@router.patch("/{user_id}/status", response_model=UserDetailResponse)
async def update_user_status(
    user_id: uuid.UUID,
    body: UserStatusUpdate,
    auth: AuthSession = Depends(require_permission({"user": ["ban"]})),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).set_status(user_id, body.status, body.reason)
    return await _detail(db, user)


@router.patch("/{user_id}/role", response_model=UserDetailResponse)
async def update_user_role(
    user_id: uuid.UUID,
    body: UserRoleUpdate,
    auth: AuthSession = Depends(require_permission({"user": ["set-role"]})),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).set_role(user_id, body.role)
    return await _detail(db, user)
