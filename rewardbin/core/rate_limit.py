"""Rate limiting using slowapi"""

import hashlib

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from .config import Settings


def _session_token(request: Request) -> str:
    """Bearer token first, then the session cookie"""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(request.app.state.settings.SESSION_COOKIE_NAME, "")


# Custom key function that considers user authentication
def get_rate_limit_key(request: Request) -> str:
    """
    Get rate limit key based on user, session or IP

    Default limits are checked by the middleware before the authorization
    gate runs, so the raw session token stands in for the user there.
    """
    # Set by the authorization gate once a session resolves
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"

    token = _session_token(request)
    if token:
        return f"session:{hashlib.sha256(token.encode()).hexdigest()[:32]}"

    # Fall back to IP address
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"

    return f"ip:{ip}"


def create_limiter(settings: Settings) -> Limiter:
    """Build the limiter the application mounts on app.state"""
    return Limiter(
        key_func=get_rate_limit_key,
        default_limits=[settings.RATE_LIMIT_DEFAULT],
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        headers_enabled=True,
        enabled=settings.RATE_LIMIT_ENABLED,
    )


# Custom rate limit exceeded handler
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    response = JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "details": {"limit": str(exc.detail)},
        }
    )
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    if view_rate_limit is not None:
        response = request.app.state.limiter._inject_headers(response, view_rate_limit)
    return response
