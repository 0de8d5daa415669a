"""
Health Check Routes

System health and status endpoints.
"""

from fastapi import APIRouter
from models.schemas import HealthResponse
from config.settings import settings


router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint for monitoring and load balancers.

    Returns:
        HealthResponse with status and version information
    """
    return HealthResponse(
        status="healthy",
        version=settings.APP_VERSION
    )


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "Checks whether AI assistants recognize and cite a domain",
        "platforms": settings.PLATFORMS,
        "endpoints": {
            "health": "/health",
            "scan": "POST /scan",
            "compare": "POST /compare",
            "report": "GET /report/{report_id}",
            "latest_report": "GET /report/domain/{domain}"
        }
    }
