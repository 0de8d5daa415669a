"""
Main FastAPI Application

Unified API server with all routes organized cleanly.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from config.settings import settings

from src.routes import health_routes, scan_routes, report_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%H:%M:%S'
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API for checking whether AI assistants recognize and cite a domain"
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_routes.router)
    app.include_router(scan_routes.router)
    app.include_router(report_routes.router)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed request bodies are client errors like any other bad input."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "Invalid request body"}
        )

    @app.on_event("startup")
    async def startup_event():
        """Log backend configuration and Redis status on startup."""
        logger.info(f"Platforms: {', '.join(settings.PLATFORMS)}")
        logger.info(f"Rate limit backend: {settings.RATE_LIMIT_BACKEND}, report store: {settings.REPORT_STORE_BACKEND}")

        if "redis" not in (settings.RATE_LIMIT_BACKEND, settings.REPORT_STORE_BACKEND):
            return

        try:
            from config.database import test_connections

            status_info = test_connections()
            if status_info["redis"]["connected"]:
                logger.info("✅ Redis: Connected")
            else:
                logger.warning(f"⚠️  Redis: Not connected - {status_info['redis']['error']}")
                logger.warning("Application will continue but reports will not be saved")

        except Exception as e:
            logger.error(f"❌ Redis initialization error: {e}")

    @app.on_event("shutdown")
    async def shutdown_event():
        from config.database import close_connections
        close_connections()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
