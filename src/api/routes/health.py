"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.dependencies import get_settings
from api.models.responses import HealthResponse
from core.config import API_VERSION, EMAIL_TEMPLATE_PATH, Settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint for monitoring.

    Returns 200 if healthy, 503 if unhealthy.
    """
    timestamp = datetime.now(timezone.utc).isoformat()

    missing = []
    if not settings.config_file.exists():
        missing.append("Invoice configuration file not found")
    if not EMAIL_TEMPLATE_PATH.exists():
        missing.append("Email template not found")

    if not missing:
        return HealthResponse(
            status="healthy",
            version=API_VERSION,
            config_available=True,
            timestamp=timestamp,
        )
    else:
        return JSONResponse(
            status_code=503,
            content=HealthResponse(
                status="unhealthy",
                version=API_VERSION,
                config_available=False,
                timestamp=timestamp,
                error="; ".join(missing),
            ).model_dump(),
        )
