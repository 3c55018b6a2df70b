"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter

from html2webp.config.settings import get_settings
from html2webp.models.schemas import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Liveness check; never launches a browser."""
    settings = get_settings()
    return HealthStatus(
        status="healthy",
        version=settings.app_version,
        executable_source=settings.executable_source,
    )
