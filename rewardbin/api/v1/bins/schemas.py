"""
Bin schemas, including the scan payloads
"""

from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.models import RecordStatus
from rewardbin.schemas.base import BaseSchema, reject_null


class BinCreate(BaseSchema):
    number: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)
    image_url: Optional[str] = Field(None, max_length=2048)
    store_id: uuid.UUID
    material_id: uuid.UUID
    status: RecordStatus = RecordStatus.ACTIVE


class BinUpdate(BaseSchema):
    number: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    image_url: Optional[str] = Field(None, max_length=2048)
    store_id: Optional[uuid.UUID] = None
    material_id: Optional[uuid.UUID] = None
    status: Optional[RecordStatus] = None

    @field_validator('number', 'store_id', 'material_id', 'status')
    @classmethod
    def reject_null_columns(cls, v):
        return reject_null(v)


class BinResponse(BaseSchema):
    id: uuid.UUID
    number: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: RecordStatus
    store_id: uuid.UUID
    material_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


class ScanRequest(BaseSchema):
    bin_id: uuid.UUID


class ScannedBin(BaseSchema):
    id: uuid.UUID
    number: str
    description: Optional[str] = None
    status: RecordStatus


class ScannedMaterial(BaseSchema):
    id: uuid.UUID
    name: str
    description: Optional[str] = None


class ScannedStore(BaseSchema):
    id: uuid.UUID
    name: str
    address1: str
    city: str
    state: str
    organization_name: Optional[str] = None


class ScannedRewardRule(BaseSchema):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    unit_type: str
    unit: float
    point: int


class ScanData(BaseSchema):
    bin: ScannedBin
    material: ScannedMaterial
    store: ScannedStore
    reward_rule: Optional[ScannedRewardRule] = None
    instructions: str


class ScanResponse(BaseSchema):
    message: str = "Bin scanned successfully"
    data: ScanData
