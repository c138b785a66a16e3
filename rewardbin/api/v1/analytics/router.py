"""Analytics API routes"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime
import uuid

from rewardbin.api.v1.auth.dependencies import AuthSession, require_permission
from rewardbin.core.database import get_db
from rewardbin.core.exceptions import ValidationException
from rewardbin.utils.helpers import as_utc
from .schemas import AnalyticsReportResponse, DashboardSummaryResponse
from .services import AnalyticsService

router = APIRouter()


@router.get(
    "",
    response_model=AnalyticsReportResponse,
    summary="Get analytics report"
)
async def get_analytics_report(
    organization_id: Optional[uuid.UUID] = Query(None, alias="organizationId"),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    auth: AuthSession = Depends(require_permission({"analytics": ["view"]})),
    db: AsyncSession = Depends(get_db)
):
    """Organization, store, material and user breakdowns for a date range"""
    if start_date and end_date and as_utc(end_date) < as_utc(start_date):
        raise ValidationException(details={"endDate": ["End date must be after start date"]})

    service = AnalyticsService(db)
    report = await service.get_report(organization_id, start_date, end_date)
    return AnalyticsReportResponse(data=report)


@router.get(
    "/dashboard-summary",
    response_model=DashboardSummaryResponse,
    summary="Get admin dashboard summary"
)
async def get_dashboard_summary(
    auth: AuthSession = Depends(require_permission({"analytics": ["view"]})),
    db: AsyncSession = Depends(get_db)
):
    """Entity counts, point totals and recent activity"""
    service = AnalyticsService(db)
    return DashboardSummaryResponse(data=await service.get_dashboard_summary())
