"""
Authentication dependencies and utilities
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Optional
import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select

from rewardbin.core.database import get_db
from rewardbin.core.exceptions import ForbiddenException, UnauthorizedException
from rewardbin.core.permissions import AccessControl
from rewardbin.models import User, UserSession
from rewardbin.utils.dependencies import get_access_control
from rewardbin.utils.helpers import as_utc, utcnow

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthSession:
    """Resolved caller of a request"""
    session: UserSession
    user: User

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def role(self) -> Optional[str]:
        return self.user.role.value if self.user.role else None


def extract_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    """Bearer token first, then the session cookie"""
    if credentials and credentials.credentials:
        return credentials.credentials
    cookie_name = request.app.state.settings.SESSION_COOKIE_NAME
    return request.cookies.get(cookie_name)


async def get_current_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthSession:
    """
    Resolve the caller from the session token
    Raises 401 if the token is missing, unknown, expired or the user is not active
    """
    token = extract_session_token(request, credentials)
    if not token:
        raise UnauthorizedException("Unauthorized")

    result = await db.execute(
        select(UserSession)
        .options(selectinload(UserSession.user))
        .where(UserSession.token == token)
    )
    user_session = result.scalar_one_or_none()

    if user_session is None or as_utc(user_session.expires_at) <= utcnow():
        raise UnauthorizedException("Session expired or invalid")

    user = user_session.user
    if user is None or not user.is_active or not user.role:
        raise UnauthorizedException("User not found or inactive")

    # Used as the rate limit key for authenticated calls
    request.state.user_id = str(user.id)

    return AuthSession(session=user_session, user=user)


def require_permission(permission: Dict[str, Iterable[str]]):
    """
    Dependency factory gating a route on the caller's role

    Usage:
        auth: AuthSession = Depends(require_permission({"coupon": ["create"]}))
    """
    async def permission_dependency(
        auth: AuthSession = Depends(get_current_session),
        access_control: AccessControl = Depends(get_access_control),
    ) -> AuthSession:
        if not access_control.has_permission(auth.role, permission):
            raise ForbiddenException("Forbidden")
        return auth

    return permission_dependency
