"""Campaign editor session API router.

Each campaign gets one in-memory EmailTableEditor holding its current table
and version history. Edits are recorded locally; only /save touches the
content store.

Endpoints:
- PUT /api/v1/campaigns/{campaign_id}/content - Load or replace content
- POST /api/v1/campaigns/{campaign_id}/load - Load content from the store
- GET /api/v1/campaigns/{campaign_id} - Current content, rows and history
- POST /api/v1/campaigns/{campaign_id}/rows - Append a row
- PATCH /api/v1/campaigns/{campaign_id}/rows/{row_id} - Edit a row
- DELETE /api/v1/campaigns/{campaign_id}/rows/{row_id} - Remove a row
- PUT /api/v1/campaigns/{campaign_id}/rows/order - Reorder rows
- POST /api/v1/campaigns/{campaign_id}/ai-edit - Commit an email_edit result
- POST /api/v1/campaigns/{campaign_id}/undo
- POST /api/v1/campaigns/{campaign_id}/redo
- POST /api/v1/campaigns/{campaign_id}/versions/{index}/restore
- POST /api/v1/campaigns/{campaign_id}/save - Persist to the content store
- DELETE /api/v1/campaigns/{campaign_id} - Close the session
"""

import logging
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from copydesk.api.v1.dependencies import EditorRegistry, get_editor_registry
from copydesk.api.v1.exceptions import ConflictError, NotFoundError, ValidationError
from copydesk.core.logging import LogContext
from copydesk.domain.services.email_edit_tool import EmailEditResult
from copydesk.domain.services.email_table_editor import EmailTableEditor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


# --- Request/Response Models ---


class SetContentRequest(BaseModel):
    """Markdown or HTML content for a campaign."""
    content: str = ""
    source: Literal["user", "ai"] = "user"
    description: Optional[str] = None


class RowResponse(BaseModel):
    id: str
    section: str
    content: str


class VersionResponse(BaseModel):
    id: str
    content: str
    source: str
    timestamp: str
    description: Optional[str] = None


class CampaignStateResponse(BaseModel):
    """Snapshot of a campaign's editor session."""
    campaign_id: str
    content: str
    html: str
    rows: List[RowResponse]
    is_empty: bool
    has_unsaved_changes: bool
    can_undo: bool
    can_redo: bool
    current_index: int
    versions: List[VersionResponse]


class HistoryMoveResponse(BaseModel):
    moved: bool
    state: CampaignStateResponse


class AddRowRequest(BaseModel):
    section: Optional[str] = None
    content: Optional[str] = None


class UpdateRowRequest(BaseModel):
    section: Optional[str] = None
    content: Optional[str] = None


class ReorderRowsRequest(BaseModel):
    row_ids: List[str]


class AIEditRequest(BaseModel):
    """A result produced by the email_edit tool."""
    success: bool = True
    type: Optional[str] = None
    html: Optional[str] = None
    error: Optional[str] = None
    explanation: Optional[str] = None
    operation: Optional[Dict[str, Any]] = None
    patches: List[Dict[str, Any]] = Field(default_factory=list)
    target: Optional[str] = None


class SaveResponse(BaseModel):
    campaign_id: str
    content: str
    saved: bool = True


# --- Helpers ---


def _get_editor(registry: EditorRegistry, campaign_id: str) -> EmailTableEditor:
    editor = registry.get(campaign_id)
    if editor is None or not editor.is_loaded:
        raise NotFoundError("campaign", campaign_id)
    return editor


def _state(editor: EmailTableEditor) -> CampaignStateResponse:
    history = editor.history
    return CampaignStateResponse(
        campaign_id=editor.campaign_id,
        content=editor.get_content(),
        html=editor.get_html(),
        rows=[RowResponse(**row.to_dict()) for row in editor.table.rows],
        is_empty=editor.is_empty,
        has_unsaved_changes=editor.has_unsaved_changes,
        can_undo=history.can_undo,
        can_redo=history.can_redo,
        current_index=history.current_index,
        versions=[VersionResponse(**v.to_dict()) for v in history.versions],
    )


# --- Endpoints ---


@router.put("/{campaign_id}/content", response_model=CampaignStateResponse)
async def set_campaign_content(
    campaign_id: str,
    request: SetContentRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    """
    Load content into a new session, or replace the content of a loaded one.

    The first call binds the campaign's version history; later calls record
    a new version.
    """
    with LogContext(campaign_id=campaign_id):
        editor = registry.get_or_create(campaign_id)
        if editor.is_loaded:
            editor.set_content(request.content, request.source, request.description)
        else:
            editor.load(campaign_id, request.content)
        return _state(editor)


@router.post("/{campaign_id}/load", response_model=CampaignStateResponse)
async def load_campaign(
    campaign_id: str,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    """Fetch the campaign's content from the content store."""
    with LogContext(campaign_id=campaign_id):
        editor = registry.get_or_create(campaign_id)
        await editor.load_from_store(campaign_id)
        return _state(editor)


@router.get("/{campaign_id}", response_model=CampaignStateResponse)
async def get_campaign(
    campaign_id: str,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    return _state(_get_editor(registry, campaign_id))


@router.post("/{campaign_id}/rows", response_model=CampaignStateResponse)
async def add_campaign_row(
    campaign_id: str,
    request: AddRowRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    """Append a row; placeholders are used when section/content are omitted."""
    editor = _get_editor(registry, campaign_id)
    row = None
    if request.section is not None:
        row = editor.new_row(request.section, request.content or "")
    with LogContext(campaign_id=campaign_id):
        editor.add_row(row)
        return _state(editor)


@router.put("/{campaign_id}/rows/order", response_model=CampaignStateResponse)
async def reorder_campaign_rows(
    campaign_id: str,
    request: ReorderRowsRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    """Reorder rows. row_ids must be a permutation of the current ids."""
    editor = _get_editor(registry, campaign_id)
    with LogContext(campaign_id=campaign_id):
        editor.reorder_rows_by_id(request.row_ids)
        return _state(editor)


@router.patch("/{campaign_id}/rows/{row_id}", response_model=CampaignStateResponse)
async def update_campaign_row(
    campaign_id: str,
    row_id: str,
    request: UpdateRowRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    editor = _get_editor(registry, campaign_id)
    if editor.table.get(row_id) is None:
        raise NotFoundError("row", row_id)
    updates = request.model_dump(exclude_none=True)
    if not updates:
        raise ValidationError("Provide section and/or content to update")
    with LogContext(campaign_id=campaign_id):
        editor.update_row(row_id, **updates)
        return _state(editor)


@router.delete("/{campaign_id}/rows/{row_id}", response_model=CampaignStateResponse)
async def remove_campaign_row(
    campaign_id: str,
    row_id: str,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    editor = _get_editor(registry, campaign_id)
    if editor.table.get(row_id) is None:
        raise NotFoundError("row", row_id)
    with LogContext(campaign_id=campaign_id):
        editor.remove_row(row_id)
        return _state(editor)


@router.post("/{campaign_id}/ai-edit", response_model=CampaignStateResponse)
async def apply_ai_edit(
    campaign_id: str,
    request: AIEditRequest,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    """
    Commit an email_edit tool result as an AI version.

    Unsuccessful results are rejected with 400; unknown sections give 404
    and unappliable patches 409. Nothing is committed on any error.
    """
    editor = _get_editor(registry, campaign_id)
    result = EmailEditResult(**request.model_dump())
    with LogContext(campaign_id=campaign_id):
        editor.apply_ai_result(result)
        logger.info(f"Committed AI edit ({result.type}): {result.explanation}")
        return _state(editor)


@router.post("/{campaign_id}/undo", response_model=HistoryMoveResponse)
async def undo(
    campaign_id: str,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> HistoryMoveResponse:
    editor = _get_editor(registry, campaign_id)
    moved = editor.undo()
    return HistoryMoveResponse(moved=moved, state=_state(editor))


@router.post("/{campaign_id}/redo", response_model=HistoryMoveResponse)
async def redo(
    campaign_id: str,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> HistoryMoveResponse:
    editor = _get_editor(registry, campaign_id)
    moved = editor.redo()
    return HistoryMoveResponse(moved=moved, state=_state(editor))


@router.post("/{campaign_id}/versions/{index}/restore", response_model=CampaignStateResponse)
async def restore_version(
    campaign_id: str,
    index: int,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> CampaignStateResponse:
    """Restore version `index` (0-based) as a new version."""
    editor = _get_editor(registry, campaign_id)
    if editor.restore_version(index) is None:
        raise NotFoundError("version", str(index))
    return _state(editor)


@router.post("/{campaign_id}/save", response_model=SaveResponse)
async def save_campaign(
    campaign_id: str,
    registry: EditorRegistry = Depends(get_editor_registry),
) -> SaveResponse:
    """
    Persist current content through the content store.

    A store failure returns 503 and leaves content, history and the
    unsaved-changes flag as they were.
    """
    editor = _get_editor(registry, campaign_id)
    with LogContext(campaign_id=campaign_id):
        content = await editor.save()
        logger.info("Saved campaign content")
    return SaveResponse(campaign_id=campaign_id, content=content)


@router.delete(
    "/{campaign_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Close campaign session",
    responses={
        404: {"description": "Campaign not loaded"},
        409: {"description": "Campaign has unsaved changes"},
    },
)
async def close_campaign(
    campaign_id: str,
    force: bool = Query(False, description="Discard unsaved changes"),
    registry: EditorRegistry = Depends(get_editor_registry),
) -> None:
    """Discard the campaign's editor session and its version history."""
    editor = _get_editor(registry, campaign_id)
    if editor.has_unsaved_changes and not force:
        raise ConflictError(
            "Campaign has unsaved changes; save first or close with force=true",
            error_code="UNSAVED_CHANGES",
            details={"campaign_id": campaign_id},
        )
    registry.discard(campaign_id)
    with LogContext(campaign_id=campaign_id):
        logger.info("Closed campaign session")
