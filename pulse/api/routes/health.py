from datetime import datetime, timezone
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from pulse.db.database import ping
from pulse.logs import api_logger

# Unauthenticated health checks for load balancers and orchestrators
router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health(request: Request):
    settings = request.app.state.settings
    return {
        "success": True,
        "message": f"{settings.PROJECT_NAME} is running",
        "timestamp": _now(),
    }


@router.get("/ready")
async def readiness(request: Request):
    """Ready when the database answers"""
    try:
        async with request.app.state.session_factory() as session:
            await ping(session)
    except (SQLAlchemyError, OSError) as e:
        api_logger.error(f"Readiness check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "success": False,
                "message": "Service is not ready",
                "database": "disconnected",
                "timestamp": _now(),
            },
        )

    return {
        "success": True,
        "message": "Service is ready",
        "database": "connected",
        "timestamp": _now(),
    }


@router.get("/live")
async def liveness():
    return {
        "success": True,
        "message": "Service is alive",
        "timestamp": _now(),
    }
