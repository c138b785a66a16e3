"""
User and session models
Handles user identity, role, status and login sessions
"""

from sqlalchemy import Column, String, Boolean, ForeignKey, Index, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    USER = "user"
    BUSINESS_USER = "business_user"
    STORE_MANAGER = "store_manager"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class User(Base, TimestampedModel, UUIDModel):
    """Platform user"""

    __tablename__ = "users"

    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    image = Column(String(2048), nullable=True)
    password_hash = Column(String(255), nullable=True)

    role = Column(Enum(UserRole, name="user_role"), default=UserRole.USER, nullable=False)
    status = Column(Enum(UserStatus, name="user_status"), default=UserStatus.ACTIVE, nullable=False)
    ban_reason = Column(String(500), nullable=True)

    # Relationships
    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    memberships = relationship("Member", back_populates="user", cascade="all, delete-orphan")
    total_point = relationship("UserTotalPoint", back_populates="user", uselist=False)
    recycle_histories = relationship("RecycleHistory", back_populates="user")
    redeem_histories = relationship("RedeemHistory", back_populates="user")
    favourite_coupons = relationship("FavouriteCoupon", back_populates="user")

    __table_args__ = (
        Index("idx_users_role_status", "role", "status"),
    )

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def __repr__(self):
        return f"<User {self.email}>"


class UserSession(Base, TimestampedModel, UUIDModel):
    """Login session identified by an opaque token"""

    __tablename__ = "sessions"

    token = Column(String(255), unique=True, nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)

    user = relationship("User", back_populates="sessions")
