"""
Points ledger and history models
"""

from sqlalchemy import Column, String, Integer, ForeignKey, Index, CheckConstraint, Text, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel


class UserTotalPoint(Base, TimestampedModel, UUIDModel):
    """Running point balance, one row per user"""

    __tablename__ = "user_total_points"

    user_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    total_points = Column(Integer, nullable=False, default=0)

    user = relationship("User", back_populates="total_point")

    __table_args__ = (
        CheckConstraint("total_points >= 0", name="check_non_negative_total_points"),
    )


class RecycleHistory(Base, TimestampedModel, UUIDModel):
    """One recycling event; append only"""

    __tablename__ = "recycle_histories"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    bin_id = Column(Uuid(as_uuid=True), ForeignKey("bins.id"), nullable=False)
    points = Column(Integer, nullable=False, default=0)
    total_count = Column(Integer, nullable=False, default=1)
    media_url = Column(String(2048), nullable=True)

    user = relationship("User", back_populates="recycle_histories")
    bin = relationship("Bin", back_populates="recycle_histories")

    __table_args__ = (
        CheckConstraint("points >= 0", name="check_non_negative_recycle_points"),
        Index("idx_recycle_histories_user_created", "user_id", "created_at"),
    )


class RedeemHistory(Base, TimestampedModel, UUIDModel):
    """One coupon redemption; append only"""

    __tablename__ = "redeem_histories"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    coupon_id = Column(Uuid(as_uuid=True), ForeignKey("coupons.id"), nullable=False)
    points = Column(Integer, nullable=False)
    coupon_code = Column(String(64), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    user = relationship("User", back_populates="redeem_histories")
    coupon = relationship("Coupon", back_populates="redeem_histories")

    __table_args__ = (
        CheckConstraint("points >= 0", name="check_non_negative_redeem_points"),
        Index("idx_redeem_histories_user_created", "user_id", "created_at"),
    )
