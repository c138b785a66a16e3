"""
Organization (tenant) and membership models
"""

from sqlalchemy import Column, String, ForeignKey, Text, UniqueConstraint, Enum, Uuid
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel


class MemberRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class Organization(Base, TimestampedModel, UUIDModel):
    """Tenant boundary owning stores, materials and coupons"""

    __tablename__ = "organizations"

    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=True, index=True)
    logo = Column(String(2048), nullable=True)
    # "metadata" is reserved on declarative classes
    organization_metadata = Column("metadata", Text, nullable=True)

    # Relationships
    members = relationship("Member", back_populates="organization", cascade="all, delete-orphan")
    stores = relationship("Store", back_populates="organization")
    materials = relationship("Material", back_populates="organization")
    reward_rules = relationship("RewardRule", back_populates="organization")
    coupons = relationship("Coupon", back_populates="organization")

    def __repr__(self):
        return f"<Organization {self.name}>"


class Member(Base, TimestampedModel, UUIDModel):
    """User membership in an organization"""

    __tablename__ = "members"

    organization_id = Column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(Enum(MemberRole, name="member_role"), default=MemberRole.MEMBER, nullable=False)

    organization = relationship("Organization", back_populates="members")
    user = relationship("User", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_members_organization_user"),
    )
