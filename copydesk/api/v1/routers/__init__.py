"""API routers."""

from copydesk.api.v1.routers.campaigns import router as campaigns_router
from copydesk.api.v1.routers.email_edit import router as email_edit_router
from copydesk.api.v1.routers.email_tables import router as email_tables_router

__all__ = [
    "campaigns_router",
    "email_edit_router",
    "email_tables_router",
]
