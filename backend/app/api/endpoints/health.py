"""
Health check endpoint.

/health answers 200 while the database accepts queries and 503 otherwise,
so load balancers can take an instance out of rotation.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime
import time

from app.core.config import settings
from app.core.database import get_db
from app.core.logging_config import logger

router = APIRouter(prefix="/health", tags=["Health"])

STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    return round(time.monotonic() - STARTED_AT, 2)


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Report service status and database connectivity"""
    body = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "uptime": uptime_seconds(),
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
    }

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "message": "Database unavailable",
                "error_code": "DATABASE_UNAVAILABLE",
                "status": "ERROR",
                "database": "Disconnected",
                **body,
            }
        )

    return {
        "success": True,
        "message": "Service is healthy",
        "status": "OK",
        "database": "Connected",
        **body,
    }

