"""Health check and monitoring endpoints"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from typing import Dict, Any
import psutil
import time

from rewardbin.core.database import get_db
from rewardbin.utils.helpers import utcnow

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Basic health check"""
    return {
        "status": "healthy",
        "version": request.app.state.settings.APP_VERSION,
        "timestamp": utcnow().isoformat()
    }


@router.get("/health/detailed")
async def detailed_health_check(
    db: AsyncSession = Depends(get_db)
) -> Dict[str, Any]:
    """Detailed health check with component status"""
    health_status = {
        "status": "healthy",
        "timestamp": utcnow().isoformat(),
        "components": {}
    }

    # Check database
    started = time.perf_counter()
    try:
        await db.execute(text("SELECT 1"))
        health_status["components"]["database"] = {
            "status": "healthy",
            "response_time_ms": round((time.perf_counter() - started) * 1000, 2)
        }
    except Exception as e:
        health_status["components"]["database"] = {
            "status": "unhealthy",
            "error": str(e)
        }
        health_status["status"] = "unhealthy"

    # System metrics
    health_status["metrics"] = {
        "cpu_percent": psutil.cpu_percent(),
        "memory_percent": psutil.virtual_memory().percent,
        "disk_percent": psutil.disk_usage('/').percent
    }

    return health_status
