"""
Reward rule API routes
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.core.database import get_db
from rewardbin.models import Material, Organization, RewardRule
from rewardbin.schemas.base import MessageResponse, Page
from rewardbin.utils.crud import apply_updates, ensure_exists, ensure_no_dependents, get_or_404
from rewardbin.utils.dependencies import get_pagination_params
from rewardbin.utils.pagination import PaginationParams, paginate
from .schemas import RewardRuleCreate, RewardRuleResponse, RewardRuleUpdate

router = APIRouter()


@router.get("", response_model=Page[RewardRuleResponse])
async def list_reward_rules(
    organization_id: Optional[uuid.UUID] = Query(None, alias="organizationId"),
    pagination: PaginationParams = Depends(get_pagination_params),
    auth: AuthSession = Depends(require_permission({"rewardRule": ["list"]})),
    db: AsyncSession = Depends(get_db),
):
    query = select(RewardRule).order_by(RewardRule.created_at.desc())
    if organization_id:
        query = query.where(RewardRule.organization_id == organization_id)
    return await paginate(db, query, pagination)


@router.post("", response_model=RewardRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_reward_rule(
    body: RewardRuleCreate,
    auth: AuthSession = Depends(require_permission({"rewardRule": ["create"]})),
    db: AsyncSession = Depends(get_db),
):
    if body.organization_id:
        await ensure_exists(db, Organization, body.organization_id)

    reward_rule = RewardRule(**body.model_dump())
    db.add(reward_rule)
    await db.commit()
    return reward_rule


@router.get("/{reward_rule_id}", response_model=RewardRuleResponse)
async def get_reward_rule(
    reward_rule_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"rewardRule": ["detail"]})),
    db: AsyncSession = Depends(get_db),
):
    return await get_or_404(db, RewardRule, reward_rule_id, name="Reward rule")


@router.patch("/{reward_rule_id}", response_model=RewardRuleResponse)
async def update_reward_rule(
    reward_rule_id: uuid.UUID,
    body: RewardRuleUpdate,
    auth: AuthSession = Depends(require_permission({"rewardRule": ["update"]})),
    db: AsyncSession = Depends(get_db),
):
    reward_rule = await get_or_404(db, RewardRule, reward_rule_id, name="Reward rule")
    data = body.model_dump(exclude_unset=True)
    if data.get("organization_id"):
        await ensure_exists(db, Organization, data["organization_id"])

    apply_updates(reward_rule, data)
    await db.commit()
    return reward_rule


@router.delete("/{reward_rule_id}", response_model=MessageResponse)
async def delete_reward_rule(
    reward_rule_id: uuid.UUID,
    auth: AuthSession = Depends(require_permission({"rewardRule": ["delete"]})),
    db: AsyncSession = Depends(get_db),
):
    reward_rule = await get_or_404(db, RewardRule, reward_rule_id, name="Reward rule")
    await ensure_no_dependents(db, [(Material.reward_rule_id, reward_rule.id, "materials")], "reward rule")

    await db.delete(reward_rule)
    await db.commit()
    return MessageResponse(message="Reward rule deleted successfully")
