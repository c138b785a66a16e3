"""
Authentication API routes
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rewardbin.core.config import Settings
from rewardbin.core.database import get_db
from rewardbin.models import User, UserSession
from rewardbin.schemas.base import MessageResponse
from rewardbin.utils.dependencies import get_email_service, get_settings_dep
from .dependencies import AuthSession, get_current_session
from .schemas import (
    SignUpRequest,
    SignInRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SessionResponse,
    UserResponse,
)
from .services import AuthService

router = APIRouter()

RESET_REQUESTED_MESSAGE = "If an account exists for that email, a reset link has been sent"


def _client_info(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


def _session_response(response: Response, settings: Settings, user_session: UserSession, user: User) -> SessionResponse:
    """Set the session cookie and build the response body"""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=user_session.token,
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
    )
    return SessionResponse(
        token=user_session.token,
        expires_at=user_session.expires_at,
        user=UserResponse.model_validate(user),
    )


@router.post(
    "/sign-up",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create an account with email and password and open a session"
)
async def sign_up(
    body: SignUpRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    email_service=Depends(get_email_service),
):
    service = AuthService(db, settings, email_service)
    user_session, user = await service.sign_up(body, **_client_info(request))
    return _session_response(response, settings, user_session, user)


@router.post(
    "/sign-in",
    response_model=SessionResponse,
    summary="Sign in",
    description="Sign in with email and password"
)
async def sign_in(
    body: SignInRequest,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    service = AuthService(db, settings)
    user_session, user = await service.sign_in(body.email, body.password, **_client_info(request))
    return _session_response(response, settings, user_session, user)


@router.post("/sign-out", response_model=MessageResponse, summary="Sign out")
async def sign_out(
    response: Response,
    auth: AuthSession = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    """End the current session"""
    await AuthService(db, settings).sign_out(auth.session.token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Signed out successfully")


@router.get("/session", response_model=SessionResponse, summary="Current session")
async def get_session(auth: AuthSession = Depends(get_current_session)):
    return SessionResponse(
        token=auth.session.token,
        expires_at=auth.session.expires_at,
        user=UserResponse.model_validate(auth.user),
    )


@router.post("/forgot-password", response_model=MessageResponse, summary="Request password reset")
async def forgot_password(
    body: ForgotPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    email_service=Depends(get_email_service),
):
    """Always answers the same whether or not the email is registered"""
    await AuthService(db, settings, email_service).forgot_password(body.email)
    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.post("/reset-password", response_model=MessageResponse, summary="Reset password")
async def reset_password(
    body: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
):
    await AuthService(db, settings).reset_password(body.token, body.new_password)
    return MessageResponse(message="Password has been reset")
