"""
Material schemas
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.schemas.base import BaseSchema, reject_null
from rewardbin.api.v1.reward_rules.schemas import RewardRuleResponse


class MaterialCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    reward_rule_id: uuid.UUID
    organization_id: Optional[uuid.UUID] = None


class MaterialUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    reward_rule_id: Optional[uuid.UUID] = None
    organization_id: Optional[uuid.UUID] = None

    @field_validator('name', 'reward_rule_id')
    @classmethod
    def reject_null_columns(cls, v):
        return reject_null(v)


class MaterialResponse(BaseSchema):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    reward_rule_id: uuid.UUID
    organization_id: Optional[uuid.UUID] = None
    reward_rule: Optional[RewardRuleResponse] = None
    created_at: datetime
    updated_at: datetime
