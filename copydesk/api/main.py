"""
Main FastAPI application for the Copydesk API.

Copydesk: structured email content editing for campaigns.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from copydesk.api.middleware import LoggingMiddleware, RequestIDMiddleware
from copydesk.api.v1 import api_router
from copydesk.api.v1.error_handlers import register_error_handlers
from copydesk.core.config import Settings, get_settings
from copydesk.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application from settings (environment by default)."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, format_type=settings.log_format)

    app = FastAPI(
        title=settings.app_name,
        description="Structured email table editing: codecs, AI edits and version history",
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_error_handlers(app)
    app.include_router(api_router)

    @app.get("/health", tags=["health"])
    async def health():
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "tracker_enabled": settings.tracker_enabled,
        }

    logger.info(f"{settings.app_name} {settings.app_version} configured ({settings.environment})")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "copydesk.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
