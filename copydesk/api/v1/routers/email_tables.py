"""Email table codec and command API router.

Stateless endpoints: every request carries the content it operates on and
gets the resulting canonical markdown back. Nothing is persisted here.

Endpoints:
- POST /api/v1/email-tables/parse - Markdown or HTML to rows
- POST /api/v1/email-tables/serialize - Rows to canonical markdown
- POST /api/v1/email-tables/to-html - Markdown to the editor's HTML table
- POST /api/v1/email-tables/from-html - HTML table to canonical markdown
- POST /api/v1/email-tables/section-operations - Apply named-section edits
- POST /api/v1/email-tables/patches - Apply a raw retain/delete/insert patch
"""

import logging
from typing import List, Literal, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from copydesk.domain.models.email_table import (
    EmailTable,
    TableRow,
    default_id_source,
)
from copydesk.domain.services.email_edit_tool import PatchOperationInput
from copydesk.domain.services.html_table_pure import (
    html_to_markdown,
    markdown_to_html,
    normalize_content,
    parse_content,
)
from copydesk.domain.services.markdown_table_pure import serialize_to_markdown
from copydesk.domain.services.section_operations import (
    SectionOperation,
    apply_section_operations_to_markdown,
)
from copydesk.domain.services.text_patches import (
    PatchOperation,
    TextPatch,
    apply_patch,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/email-tables", tags=["email-tables"])


# --- Request/Response Models ---


class RowModel(BaseModel):
    """One Section/Content row."""
    id: Optional[str] = Field(None, description="Row id; generated when omitted")
    section: str = Field(..., description="Section label, may carry ** / * markers")
    content: str = ""


class ContentRequest(BaseModel):
    content: str = Field("", description="Markdown table or HTML table")


class ContentResponse(BaseModel):
    content: str


class ParseResponse(BaseModel):
    rows: List[RowModel]
    is_empty: bool


class SerializeRequest(BaseModel):
    rows: List[RowModel]


class HtmlRequest(BaseModel):
    html: str


class HtmlResponse(BaseModel):
    html: str


class SectionOperationModel(BaseModel):
    """A named-section edit."""
    action: Literal[
        "add_section",
        "remove_section",
        "move_section",
        "update_section_name",
        "update_section_content",
    ]
    section_name: str = Field(..., min_length=1)
    section_content: Optional[str] = None
    new_section_name: Optional[str] = None
    position: Literal["start", "end", "before", "after"] = "end"
    target_section: Optional[str] = None


class SectionOperationsRequest(BaseModel):
    content: str = ""
    operations: List[SectionOperationModel] = Field(..., min_length=1)


class PatchRequest(BaseModel):
    content: str = ""
    target_text: Optional[str] = Field(None, description="Anchor; patch starts at its first occurrence")
    operations: List[PatchOperationInput] = Field(..., min_length=1)


# --- Endpoints ---


@router.post("/parse", response_model=ParseResponse)
async def parse_table(request: ContentRequest) -> ParseResponse:
    """Parse markdown (or HTML) into rows. Unrecognized content yields no rows."""
    table = parse_content(request.content)
    return ParseResponse(
        rows=[RowModel(**row.to_dict()) for row in table.rows],
        is_empty=table.is_empty,
    )


@router.post("/serialize", response_model=ContentResponse)
async def serialize_table(request: SerializeRequest) -> ContentResponse:
    """Serialize rows to canonical markdown. No rows gives ""."""
    ids = default_id_source()
    table = EmailTable(rows=tuple(
        TableRow(id=row.id or ids.next_id("row"), section=row.section, content=row.content)
        for row in request.rows
    ))
    return ContentResponse(content=serialize_to_markdown(table))


@router.post("/to-html", response_model=HtmlResponse)
async def convert_to_html(request: ContentRequest) -> HtmlResponse:
    """Render a markdown table as HTML; other text is returned unchanged."""
    return HtmlResponse(html=markdown_to_html(normalize_content(request.content)))


@router.post("/from-html", response_model=ContentResponse)
async def convert_from_html(request: HtmlRequest) -> ContentResponse:
    """Convert an HTML table to markdown; input without a table is returned unchanged."""
    return ContentResponse(content=html_to_markdown(request.html))


@router.post("/section-operations", response_model=ContentResponse)
async def run_section_operations(request: SectionOperationsRequest) -> ContentResponse:
    """Apply section operations in order, all or nothing."""
    operations = [SectionOperation(**op.model_dump()) for op in request.operations]
    content = apply_section_operations_to_markdown(request.content, operations)
    logger.info(f"Applied {len(operations)} section operation(s)")
    return ContentResponse(content=content)


@router.post("/patches", response_model=ContentResponse)
async def run_patch(request: PatchRequest) -> ContentResponse:
    """Apply a raw patch to the (normalized) content."""
    patch = TextPatch(
        operations=tuple(
            PatchOperation.from_dict(op.model_dump(exclude_none=True))
            for op in request.operations
        ),
        target_text=request.target_text,
    )
    return ContentResponse(content=apply_patch(normalize_content(request.content), patch))
