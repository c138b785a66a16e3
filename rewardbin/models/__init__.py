"""Models package initialization"""

from .base import Base, RecordStatus
from .user import User, UserRole, UserStatus, UserSession
from .organization import Organization, Member, MemberRole
from .store import Store, RewardRule, Material, Bin
from .coupon import Coupon, CouponType, DealType, FavouriteCoupon
from .points import UserTotalPoint, RecycleHistory, RedeemHistory

# Export all models
__all__ = [
    "Base",
    "RecordStatus",
    "User",
    "UserRole",
    "UserStatus",
    "UserSession",
    "Organization",
    "Member",
    "MemberRole",
    "Store",
    "RewardRule",
    "Material",
    "Bin",
    "Coupon",
    "CouponType",
    "DealType",
    "FavouriteCoupon",
    "UserTotalPoint",
    "RecycleHistory",
    "RedeemHistory",
]
