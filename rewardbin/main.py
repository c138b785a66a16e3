"""Main FastAPI application with all middleware"""

from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from rewardbin.api import health
from rewardbin.api.v1 import api_router
from rewardbin.core.config import Settings, get_settings
from rewardbin.core.database import Database
from rewardbin.core.exceptions import register_exception_handlers
from rewardbin.core.logging import setup_logging
from rewardbin.core.middleware import setup_middleware
from rewardbin.core.permissions import AccessControl
from rewardbin.core.rate_limit import create_limiter, rate_limit_exceeded_handler
from rewardbin.services.email import EmailService
from rewardbin.services.storage import StorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings: Settings = app.state.settings

    # Startup
    logger.info("Starting up %s...", settings.APP_NAME)
    if settings.AUTO_CREATE_TABLES:
        await app.state.database.create_all()

    yield

    # Shutdown
    logger.info("Shutting down %s...", settings.APP_NAME)
    await app.state.database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own database, services and limiter"""
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        description="Recycling rewards platform API",
        version=settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.access_control = AccessControl.default()
    app.state.email_service = EmailService(settings)
    app.state.storage_service = StorageService(settings)
    app.state.limiter = create_limiter(settings)

    register_exception_handlers(app)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    setup_middleware(app, settings)

    # Include routers
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(health.router, prefix="/api/v1", tags=["Health"])

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "docs": "/api/docs",
            "health": "/api/v1/health"
        }

    return app
