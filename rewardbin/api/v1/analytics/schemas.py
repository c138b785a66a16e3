"""Analytics schemas"""

from typing import List, Optional
from datetime import datetime
import uuid

from rewardbin.schemas.base import BaseSchema


class RecentActivity(BaseSchema):
    id: uuid.UUID
    type: str
    description: str
    timestamp: datetime
    user_id: Optional[uuid.UUID] = None
    user_name: Optional[str] = None


class MonthlyPoints(BaseSchema):
    month: int
    earned: int
    redeemed: int


class DashboardSummary(BaseSchema):
    total_users: int
    total_organizations: int
    total_stores: int
    total_bins: int
    total_coupons: int
    total_points: int
    total_points_redeemed: int
    total_recycling_activities: int
    total_redemptions: int
    recent_activities: List[RecentActivity]
    monthly_points: List[MonthlyPoints]


class DashboardSummaryResponse(BaseSchema):
    data: DashboardSummary


class OrganizationUserCount(BaseSchema):
    organization_id: uuid.UUID
    organization_name: str
    user_count: int


class OrganizationStoreCount(BaseSchema):
    organization_id: Optional[uuid.UUID] = None
    organization_name: str
    store_count: int


class StoreBinCount(BaseSchema):
    store_id: uuid.UUID
    store_name: str
    material_id: uuid.UUID
    material_name: str
    organization_id: Optional[uuid.UUID] = None
    organization_name: str
    bin_count: int


class MaterialActivity(BaseSchema):
    material_id: uuid.UUID
    material_name: str
    recycle_count: int
    total_points: int


class UserEngagement(BaseSchema):
    user_id: uuid.UUID
    user_name: str
    recycle_count: int
    total_points: int
    active_days: int
    last_activity: datetime


class PointsAndRewards(BaseSchema):
    total_points_earned: int
    total_recycling_count: int
    total_points_redeemed: int
    redeemed_points_percent: int
    available_coupons: int


class AnalyticsReport(BaseSchema):
    """Breakdowns behind the analytics page"""
    users_by_organization: List[OrganizationUserCount]
    stores_by_organization: List[OrganizationStoreCount]
    bins_by_store: List[StoreBinCount]
    recycling_activity_by_material: List[MaterialActivity]
    user_engagement: List[UserEngagement]
    points_and_rewards: PointsAndRewards


class AnalyticsReportResponse(BaseSchema):
    data: AnalyticsReport
