"""API v1 routes aggregation"""

from fastapi import APIRouter

from .auth.router import router as auth_router
from .organizations.router import router as organizations_router
from .stores.router import router as stores_router
from .reward_rules.router import router as reward_rules_router
from .materials.router import router as materials_router
from .bins.router import router as bins_router
from .coupons.router import router as coupons_router
from .favourite_coupons.router import router as favourite_coupons_router
from .histories.router import redeem_router, recycle_router, user_recycle_router
from .points.router import router as points_router
from .users.router import account_router, router as users_router
from .analytics.router import router as analytics_router

# Create v1 router
api_router = APIRouter()

# Include all routers
api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
api_router.include_router(organizations_router, prefix="/organizations", tags=["Organizations"])
api_router.include_router(stores_router, prefix="/stores", tags=["Stores"])
api_router.include_router(reward_rules_router, prefix="/reward-rules", tags=["Reward Rules"])
api_router.include_router(materials_router, prefix="/materials", tags=["Materials"])
api_router.include_router(bins_router, prefix="/bins", tags=["Bins"])
api_router.include_router(coupons_router, prefix="/coupons", tags=["Coupons"])
api_router.include_router(favourite_coupons_router, prefix="/favourite-coupons", tags=["Favourite Coupons"])
api_router.include_router(redeem_router, prefix="/redeem-histories", tags=["Redeem Histories"])
api_router.include_router(recycle_router, prefix="/recycle-histories", tags=["Recycle Histories"])
api_router.include_router(user_recycle_router, prefix="/user-recycle-histories", tags=["Recycle Histories"])
api_router.include_router(points_router, prefix="/points", tags=["Points"])
api_router.include_router(account_router, prefix="/user", tags=["Users"])
api_router.include_router(users_router, prefix="/users", tags=["Users"])
api_router.include_router(analytics_router, prefix="/analytics", tags=["Analytics"])

# Export router
router = api_router
