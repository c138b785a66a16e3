"""
Coupon and favourite coupon models
"""

from sqlalchemy import (
    Column, String, Integer, Boolean, ForeignKey, Index, CheckConstraint, Text, DateTime, Enum,
    UniqueConstraint, Uuid,
)
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel, StatusModel


class CouponType(str, enum.Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"


class DealType(str, enum.Enum):
    POINTS = "POINTS"
    NOPOINTS = "NOPOINTS"


class Coupon(Base, TimestampedModel, UUIDModel, StatusModel):
    """Discount offered by an organization, optionally bought with points"""

    __tablename__ = "coupons"

    organization_id = Column(
        Uuid(as_uuid=True), ForeignKey("organizations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(2048), nullable=True)

    # Discount details
    coupon_type = Column(Enum(CouponType, name="coupon_type"), nullable=False)
    deal_type = Column(Enum(DealType, name="deal_type"), nullable=False, default=DealType.POINTS)
    discount_amount = Column(Integer, nullable=False, default=0)
    points_to_redeem = Column(Integer, nullable=False, default=0)
    is_featured = Column(Boolean, nullable=False, default=False)

    # Validity
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="coupons")
    redeem_histories = relationship("RedeemHistory", back_populates="coupon")
    favourites = relationship("FavouriteCoupon", back_populates="coupon")

    # Constraints
    __table_args__ = (
        CheckConstraint("discount_amount >= 0", name="check_non_negative_discount"),
        CheckConstraint("points_to_redeem >= 0", name="check_non_negative_points_to_redeem"),
        Index("idx_coupons_status_window", "status", "start_date", "end_date"),
    )


class FavouriteCoupon(Base, TimestampedModel, UUIDModel):
    """User bookmark on a coupon"""

    __tablename__ = "favourite_coupons"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    coupon_id = Column(Uuid(as_uuid=True), ForeignKey("coupons.id", ondelete="CASCADE"), nullable=False)

    user = relationship("User", back_populates="favourite_coupons")
    coupon = relationship("Coupon", back_populates="favourites")

    __table_args__ = (
        UniqueConstraint("user_id", "coupon_id", name="uq_favourite_coupons_user_coupon"),
    )
