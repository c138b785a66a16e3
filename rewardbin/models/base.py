"""Base models and mixins for database models"""

from sqlalchemy import Column, DateTime, Enum, Uuid
from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy.sql import func
import enum
import uuid

from rewardbin.utils.helpers import utcnow


# Create declarative base
class Base(DeclarativeBase):
    pass


class RecordStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class TimestampedModel:
    """Mixin for adding created_at and updated_at timestamps"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            index=True
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            onupdate=utcnow
        )


class UUIDModel:
    """Mixin for adding UUID primary key"""

    @declared_attr
    def id(cls):
        return Column(
            Uuid(as_uuid=True),
            primary_key=True,
            default=uuid.uuid4,
            nullable=False
        )


class StatusModel:
    """Mixin for ACTIVE/INACTIVE status tracking"""

    @declared_attr
    def status(cls):
        return Column(
            Enum(RecordStatus, name="record_status"),
            nullable=False,
            default=RecordStatus.ACTIVE,
            index=True
        )

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE


__all__ = [
    'Base',
    'RecordStatus',
    'TimestampedModel',
    'UUIDModel',
    'StatusModel',
]
