"""Analytics service layer"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timedelta
import math
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, func, extract

from rewardbin.models import (
    Bin,
    Coupon,
    Material,
    Member,
    Organization,
    RecordStatus,
    RecycleHistory,
    RedeemHistory,
    Store,
    User,
)
from rewardbin.utils.helpers import as_utc, utcnow
from .schemas import (
    AnalyticsReport,
    DashboardSummary,
    MaterialActivity,
    MonthlyPoints,
    OrganizationStoreCount,
    OrganizationUserCount,
    PointsAndRewards,
    RecentActivity,
    StoreBinCount,
    UserEngagement,
)

UNKNOWN = "Unknown"
REPORT_WINDOW_DAYS = 30


class AnalyticsService:
    """Platform wide counters for the admin dashboard"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _count(self, model, *conditions) -> int:
        query = select(func.count()).select_from(model)
        if conditions:
            query = query.where(*conditions)
        return await self.db.scalar(query) or 0

    async def _sum(self, column) -> int:
        return await self.db.scalar(select(func.coalesce(func.sum(column), 0))) or 0

    async def _monthly_totals(self, model, year: int) -> Dict[int, int]:
        month = extract("month", model.created_at)
        result = await self.db.execute(
            select(month, func.sum(model.points))
            .where(extract("year", model.created_at) == year)
            .group_by(month)
        )
        return {int(row[0]): int(row[1] or 0) for row in result.all()}

    async def get_recent_activities(self, limit: int = 10) -> List[RecentActivity]:
        """Newest sign-ups, recycling events, redemptions and organizations merged by time"""
        activities: List[Dict[str, Any]] = []

        users = await self.db.execute(select(User).order_by(User.created_at.desc()).limit(3))
        for user in users.scalars():
            activities.append({
                "id": user.id,
                "type": "user_registration",
                "description": f"{user.name} joined",
                "timestamp": user.created_at,
                "user_id": user.id,
                "user_name": user.name,
            })

        recycles = await self.db.execute(
            select(RecycleHistory)
            .options(selectinload(RecycleHistory.user), selectinload(RecycleHistory.bin).selectinload(Bin.material))
            .order_by(RecycleHistory.created_at.desc())
            .limit(3)
        )
        for history in recycles.scalars():
            activities.append({
                "id": history.id,
                "type": "recycling",
                "description": f"{history.user.name} recycled {history.bin.material.name} for {history.points} points",
                "timestamp": history.created_at,
                "user_id": history.user_id,
                "user_name": history.user.name,
            })

        redemptions = await self.db.execute(
            select(RedeemHistory)
            .options(selectinload(RedeemHistory.user), selectinload(RedeemHistory.coupon))
            .order_by(RedeemHistory.created_at.desc())
            .limit(2)
        )
        for history in redemptions.scalars():
            activities.append({
                "id": history.id,
                "type": "coupon_redemption",
                "description": f"{history.user.name} redeemed {history.coupon.name}",
                "timestamp": history.created_at,
                "user_id": history.user_id,
                "user_name": history.user.name,
            })

        organizations = await self.db.execute(
            select(Organization).order_by(Organization.created_at.desc()).limit(2)
        )
        for organization in organizations.scalars():
            activities.append({
                "id": organization.id,
                "type": "organization_created",
                "description": f"Organization {organization.name} created",
                "timestamp": organization.created_at,
            })

        activities.sort(key=lambda item: as_utc(item["timestamp"]), reverse=True)
        return [RecentActivity(**activity) for activity in activities[:limit]]

    async def get_dashboard_summary(self) -> DashboardSummary:
        now = utcnow()
        earned = await self._monthly_totals(RecycleHistory, now.year)
        redeemed = await self._monthly_totals(RedeemHistory, now.year)

        return DashboardSummary(
            total_users=await self._count(User),
            total_organizations=await self._count(Organization),
            total_stores=await self._count(Store),
            total_bins=await self._count(Bin),
            total_coupons=await self._count(Coupon, Coupon.status == RecordStatus.ACTIVE, Coupon.end_date >= now),
            total_points=await self._sum(RecycleHistory.points),
            total_points_redeemed=await self._sum(RedeemHistory.points),
            total_recycling_activities=await self._count(RecycleHistory),
            total_redemptions=await self._count(RedeemHistory),
            recent_activities=await self.get_recent_activities(),
            monthly_points=[
                MonthlyPoints(month=month, earned=earned.get(month, 0), redeemed=redeemed.get(month, 0))
                for month in range(1, 13)
            ],
        )

    # Analytics report

    async def get_users_by_organization(
        self, organization_id: Optional[uuid.UUID] = None
    ) -> List[OrganizationUserCount]:
        query = (
            select(Member.organization_id, Organization.name, func.count(Member.user_id))
            .join(Organization, Member.organization_id == Organization.id)
            .group_by(Member.organization_id, Organization.name)
            .order_by(Organization.name)
        )
        if organization_id:
            query = query.where(Member.organization_id == organization_id)

        result = await self.db.execute(query)
        return [
            OrganizationUserCount(organization_id=org_id, organization_name=name, user_count=count)
            for org_id, name, count in result.all()
        ]

    async def get_stores_by_organization(
        self, organization_id: Optional[uuid.UUID] = None
    ) -> List[OrganizationStoreCount]:
        query = (
            select(Store.organization_id, Organization.name, func.count(Store.id))
            .outerjoin(Organization, Store.organization_id == Organization.id)
            .group_by(Store.organization_id, Organization.name)
            .order_by(Organization.name)
        )
        if organization_id:
            query = query.where(Store.organization_id == organization_id)

        result = await self.db.execute(query)
        return [
            OrganizationStoreCount(organization_id=org_id, organization_name=name or UNKNOWN, store_count=count)
            for org_id, name, count in result.all()
        ]

    async def get_bins_by_store(self, organization_id: Optional[uuid.UUID] = None) -> List[StoreBinCount]:
        query = (
            select(
                Bin.store_id,
                Store.name,
                Bin.material_id,
                Material.name,
                Store.organization_id,
                Organization.name,
                func.count(Bin.id),
            )
            .join(Store, Bin.store_id == Store.id)
            .join(Material, Bin.material_id == Material.id)
            .outerjoin(Organization, Store.organization_id == Organization.id)
            .group_by(
                Bin.store_id, Store.name, Bin.material_id, Material.name, Store.organization_id, Organization.name
            )
            .order_by(Store.name, Material.name)
        )
        if organization_id:
            query = query.where(Store.organization_id == organization_id)

        result = await self.db.execute(query)
        return [
            StoreBinCount(
                store_id=store_id,
                store_name=store_name,
                material_id=material_id,
                material_name=material_name,
                organization_id=org_id,
                organization_name=org_name or UNKNOWN,
                bin_count=count,
            )
            for store_id, store_name, material_id, material_name, org_id, org_name, count in result.all()
        ]

    async def get_recycling_activity_by_material(
        self, organization_id: Optional[uuid.UUID], start: datetime, end: datetime
    ) -> List[MaterialActivity]:
        points = func.coalesce(func.sum(RecycleHistory.points), 0)
        query = (
            select(Material.id, Material.name, func.coalesce(func.sum(RecycleHistory.total_count), 0), points)
            .select_from(RecycleHistory)
            .join(Bin, RecycleHistory.bin_id == Bin.id)
            .join(Material, Bin.material_id == Material.id)
            .where(RecycleHistory.created_at >= start, RecycleHistory.created_at <= end)
            .group_by(Material.id, Material.name)
            .order_by(points.desc(), Material.name)
        )
        if organization_id:
            query = query.join(Store, Bin.store_id == Store.id).where(Store.organization_id == organization_id)

        result = await self.db.execute(query)
        return [
            MaterialActivity(material_id=material_id, material_name=name, recycle_count=count, total_points=total)
            for material_id, name, count, total in result.all()
        ]

    async def get_user_engagement(
        self, organization_id: Optional[uuid.UUID], start: datetime, end: datetime
    ) -> List[UserEngagement]:
        """Per user recycling totals, most points first"""
        points = func.coalesce(func.sum(RecycleHistory.points), 0)
        query = (
            select(
                RecycleHistory.user_id,
                User.name,
                func.coalesce(func.sum(RecycleHistory.total_count), 0),
                points,
                func.count(func.date(RecycleHistory.created_at).distinct()),
                func.max(RecycleHistory.created_at),
            )
            .join(User, RecycleHistory.user_id == User.id)
            .where(RecycleHistory.created_at >= start, RecycleHistory.created_at <= end)
            .group_by(RecycleHistory.user_id, User.name)
            .order_by(points.desc(), User.name)
        )
        if organization_id:
            members = select(Member.user_id).where(Member.organization_id == organization_id)
            query = query.where(RecycleHistory.user_id.in_(members))

        result = await self.db.execute(query)
        return [
            UserEngagement(
                user_id=user_id,
                user_name=name,
                recycle_count=count,
                total_points=total,
                active_days=active_days,
                last_activity=as_utc(last_activity),
            )
            for user_id, name, count, total, active_days, last_activity in result.all()
        ]

    async def get_points_and_rewards(
        self, organization_id: Optional[uuid.UUID], start: datetime, end: datetime
    ) -> PointsAndRewards:
        earned_query = (
            select(
                func.coalesce(func.sum(RecycleHistory.points), 0),
                func.coalesce(func.sum(RecycleHistory.total_count), 0),
            )
            .select_from(RecycleHistory)
            .where(RecycleHistory.created_at >= start, RecycleHistory.created_at <= end)
        )
        redeemed_query = (
            select(func.coalesce(func.sum(RedeemHistory.points), 0))
            .select_from(RedeemHistory)
            .where(RedeemHistory.created_at >= start, RedeemHistory.created_at <= end)
        )
        coupon_conditions = [Coupon.status == RecordStatus.ACTIVE, Coupon.end_date >= utcnow()]

        if organization_id:
            earned_query = (
                earned_query.join(Bin, RecycleHistory.bin_id == Bin.id)
                .join(Store, Bin.store_id == Store.id)
                .where(Store.organization_id == organization_id)
            )
            redeemed_query = redeemed_query.join(Coupon, RedeemHistory.coupon_id == Coupon.id).where(
                Coupon.organization_id == organization_id
            )
            coupon_conditions.append(Coupon.organization_id == organization_id)

        earned, recycled = (await self.db.execute(earned_query)).one()
        redeemed = await self.db.scalar(redeemed_query) or 0

        return PointsAndRewards(
            total_points_earned=earned,
            total_recycling_count=recycled,
            total_points_redeemed=redeemed,
            # Half rounds up
            redeemed_points_percent=math.floor(redeemed * 100 / earned + 0.5) if earned else 0,
            available_coupons=await self._count(Coupon, *coupon_conditions),
        )

    async def get_report(
        self,
        organization_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> AnalyticsReport:
        """
        Breakdowns for the analytics page

        Activity figures cover start_date..end_date, which defaults to the
        last REPORT_WINDOW_DAYS days. Catalog counts ignore the window.
        """
        end = as_utc(end_date) or utcnow()
        start = as_utc(start_date) or end - timedelta(days=REPORT_WINDOW_DAYS)

        return AnalyticsReport(
            users_by_organization=await self.get_users_by_organization(organization_id),
            stores_by_organization=await self.get_stores_by_organization(organization_id),
            bins_by_store=await self.get_bins_by_store(organization_id),
            recycling_activity_by_material=await self.get_recycling_activity_by_material(organization_id, start, end),
            user_engagement=await self.get_user_engagement(organization_id, start, end),
            points_and_rewards=await self.get_points_and_rewards(organization_id, start, end),
        )
