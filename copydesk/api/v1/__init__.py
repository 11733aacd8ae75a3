"""API v1 module."""

from fastapi import APIRouter

from copydesk.api.v1.routers import (
    campaigns_router,
    email_edit_router,
    email_tables_router,
)


# Create main v1 router
api_router = APIRouter(prefix="/api/v1")

api_router.include_router(email_tables_router)
api_router.include_router(email_edit_router)
api_router.include_router(campaigns_router)


__all__ = ["api_router"]
