"""
Common dependencies for FastAPI
Application collaborators live on app.state and are handed out here
"""

from fastapi import Query, Request

from rewardbin.core.config import Settings
from rewardbin.core.permissions import AccessControl
from .pagination import PaginationParams


def get_pagination_params(
    page: int = Query(1, ge=1, description="Page number"),
    per_page: int = Query(20, ge=1, le=50, alias="perPage", description="Page size"),
) -> PaginationParams:
    """Get pagination parameters from query"""
    return PaginationParams(page=page, per_page=per_page)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_access_control(request: Request) -> AccessControl:
    return request.app.state.access_control


def get_email_service(request: Request):
    """Email service configured for this application"""
    return request.app.state.email_service


def get_storage_service(request: Request):
    """Image storage service configured for this application"""
    return request.app.state.storage_service
