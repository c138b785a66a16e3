"""
Reward rule schemas
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.schemas.base import BaseSchema, reject_null


class RewardRuleCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    point: int = Field(..., ge=1, le=1_000_000, description="Points awarded per unit")
    unit: float = Field(..., ge=0.01, le=1_000_000, description="Quantity that earns the points")
    unit_type: str = Field(..., min_length=1, max_length=50, examples=["bottle", "kg"])
    organization_id: Optional[uuid.UUID] = None


class RewardRuleUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=500)
    point: Optional[int] = Field(None, ge=1, le=1_000_000)
    unit: Optional[float] = Field(None, ge=0.01, le=1_000_000)
    unit_type: Optional[str] = Field(None, min_length=1, max_length=50)
    organization_id: Optional[uuid.UUID] = None

    @field_validator('name', 'point', 'unit', 'unit_type')
    @classmethod
    def reject_null_columns(cls, v):
        return reject_null(v)


class RewardRuleResponse(BaseSchema):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    point: int
    unit: float
    unit_type: str
    organization_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime
