"""Email edit tool API router.

The boundary the LLM orchestration layer calls. Tool validation failures
are reported in the body with success=false, never as HTTP errors, so the
model can read the error and retry.

Endpoints:
- GET /api/v1/email-edit/tool - Tool definition for the LLM provider
- POST /api/v1/email-edit - Full-replacement edit
- POST /api/v1/email-edit/actions - Action-based edit (section ops, patches)
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter

from copydesk.domain.services.email_edit_tool import (
    EmailEditActionInput,
    EmailEditInput,
    email_edit_tool_definition,
    execute_email_edit,
    execute_email_edit_action,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email-edit", tags=["email-edit"])


@router.get("/tool")
async def get_tool_definition() -> Dict[str, Any]:
    """Name, description and input schema of the email_edit tool."""
    return email_edit_tool_definition()


@router.post("")
async def email_edit(request: EmailEditInput) -> Dict[str, Any]:
    """Validate a full HTML table replacement."""
    return execute_email_edit(request.updated_html, request.explanation).to_dict()


@router.post("/actions")
async def email_edit_action(request: EmailEditActionInput) -> Dict[str, Any]:
    """Validate an action-based edit and describe it as a committable result."""
    result = execute_email_edit_action(request)
    if not result.success:
        logger.info(f"Rejected {request.action} edit: {result.error}")
    return result.to_dict()
