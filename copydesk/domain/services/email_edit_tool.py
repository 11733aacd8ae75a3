"""
Email edit tool boundary for the LLM orchestration layer.

The committed contract is full replacement: the model regenerates the whole
HTML table each turn and the tool only checks that both table tags are
present. The older action surface (section operations and text patches) is
kept for callers that still emit it; each action is validated and turned
into a result that apply_email_edit_result() can commit.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from copydesk.domain.models.email_table import IdSource
from copydesk.domain.models.errors import (
    EmailEditRejectedError,
    EmailTableError,
)
from copydesk.domain.services.html_table_pure import html_to_markdown, normalize_content
from copydesk.domain.services.section_operations import (
    SectionAction,
    SectionOperation,
    apply_section_operations_to_markdown,
)
from copydesk.domain.services.text_patches import (
    PatchOperation,
    TextPatch,
    apply_patch,
)

logger = logging.getLogger(__name__)

TOOL_NAME = "email_edit"

RESULT_FULL_REPLACEMENT = "full_replacement"
RESULT_SECTION_OPERATION = "section_operation"
RESULT_PATCH = "patch"
RESULT_OPERATION = "operation"

TEXT_ACTIONS = ("replace", "insert", "delete")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Tool inputs
# ---------------------------------------------------------------------------

class EmailEditInput(BaseModel):
    """Full-replacement tool input."""
    updated_html: str = Field(
        ...,
        alias="updatedHtml",
        description="The complete HTML table with every section, including unchanged ones",
    )
    explanation: str = Field(
        "",
        description="Brief past tense explanation of the change made: < 10 words",
    )

    model_config = {"populate_by_name": True}


class PatchOperationInput(BaseModel):
    type: Literal["retain", "delete", "insert"]
    value: Optional[str] = None
    length: Optional[int] = Field(None, ge=0)


class EmailEditActionInput(BaseModel):
    """Action-based tool input."""
    action: Literal[
        "replace",
        "insert",
        "delete",
        "patch",
        "add_section",
        "remove_section",
        "move_section",
        "update_section_name",
        "update_section_content",
    ]
    explanation: str = ""
    target: Optional[str] = Field(None, description="Exact text to find in the email")
    replacement: Optional[str] = None
    position: Optional[Literal["before", "after"]] = None
    patches: Optional[List[PatchOperationInput]] = None
    section_name: Optional[str] = Field(None, description="e.g. 'HEADER', 'BODY', 'CTA'")
    section_content: Optional[str] = None
    new_section_name: Optional[str] = None
    section_position: Literal["start", "end", "after", "before"] = "end"
    target_section: Optional[str] = None


def email_edit_tool_definition() -> Dict[str, Any]:
    """Tool definition handed to the LLM provider."""
    return {
        "name": TOOL_NAME,
        "description": (
            "Apply modifications to email content structured as an HTML table "
            "with Section and Content columns. Always return the COMPLETE table "
            "with all sections; each section is one <tr> in the <tbody>."
        ),
        "input_schema": EmailEditInput.model_json_schema(by_alias=True),
    }


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class EmailEditResult:
    """Structured tool result. Failures carry an error, never raise."""
    success: bool
    type: Optional[str] = None
    html: Optional[str] = None
    error: Optional[str] = None
    explanation: Optional[str] = None
    operation: Optional[Dict[str, Any]] = None
    patches: List[Dict[str, Any]] = field(default_factory=list)
    target: Optional[str] = None
    timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def failure(cls, error: str) -> "EmailEditResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, "timestamp": self.timestamp}
        for key in ("type", "html", "error", "explanation", "operation", "target"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.patches:
            result["patches"] = self.patches
        return result


# ---------------------------------------------------------------------------
# Full replacement
# ---------------------------------------------------------------------------

def is_complete_table(html: Optional[str]) -> bool:
    """True when html carries both an opening and a closing table tag."""
    return bool(html) and "<table" in html and "</table>" in html


def execute_email_edit(updated_html: str, explanation: str = "") -> EmailEditResult:
    """
    Validate a full-replacement submission.

    Both `<table` and `</table>` must be present. No deeper structural check
    is made; the HTML codec degrades gracefully on malformed rows.
    """
    if not is_complete_table(updated_html):
        logger.warning("Rejected email edit: updated HTML is not a complete table")
        return EmailEditResult.failure(
            "updatedHtml must contain a complete HTML table (<table> ... </table>)"
        )

    logger.info(f"Accepted full-table email edit: {explanation}")
    return EmailEditResult(
        success=True,
        type=RESULT_FULL_REPLACEMENT,
        html=updated_html,
        explanation=explanation,
    )


# ---------------------------------------------------------------------------
# Action surface
# ---------------------------------------------------------------------------

def _text_action_patches(action: str, target: str, replacement: str, position: str) -> List[PatchOperation]:
    if action == "replace":
        return [PatchOperation.delete(len(target)), PatchOperation.insert(replacement)]
    if action == "insert":
        if position == "before":
            return [PatchOperation.insert(replacement)]
        return [PatchOperation.retain(len(target)), PatchOperation.insert(replacement)]
    if action == "delete":
        return [PatchOperation.delete(len(target))]
    return []


def execute_email_edit_action(params: EmailEditActionInput) -> EmailEditResult:
    """Validate an action-based edit and describe it as a committable result."""
    action = params.action

    if action in {a.value for a in SectionAction}:
        needs_content = action in (SectionAction.ADD.value, SectionAction.UPDATE_CONTENT.value)
        if not params.section_name or (needs_content and not params.section_content):
            required = "section_name and section_content are" if needs_content else "section_name is"
            return EmailEditResult.failure(f"{required} required for {action}")
        if action == SectionAction.RENAME.value and not params.new_section_name:
            return EmailEditResult.failure(
                "section_name and new_section_name are required for update_section_name"
            )

        operation = SectionOperation(
            action=action,
            section_name=params.section_name,
            section_content=params.section_content,
            new_section_name=params.new_section_name,
            position=params.section_position,
            target_section=params.target_section,
        )
        return EmailEditResult(
            success=True,
            type=RESULT_SECTION_OPERATION,
            operation=operation.to_dict(),
            explanation=params.explanation,
        )

    if action == "patch":
        if not params.patches:
            return EmailEditResult.failure("patches are required for patch actions")
        return EmailEditResult(
            success=True,
            type=RESULT_PATCH,
            patches=[p.model_dump(exclude_none=True) for p in params.patches],
            target=params.target,
            explanation=params.explanation,
        )

    if action in ("replace", "insert") and not params.replacement:
        return EmailEditResult.failure("Replacement text is required for replace and insert actions")
    if action == "insert" and not params.position:
        return EmailEditResult.failure("Position (before/after) is required for insert actions")
    if not params.target:
        return EmailEditResult.failure("Target text is required for non-patch actions")

    position = params.position or "after"
    patches = _text_action_patches(action, params.target, params.replacement or "", position)
    return EmailEditResult(
        success=True,
        type=RESULT_OPERATION,
        operation={
            "action": action,
            "target": params.target,
            "replacement": params.replacement or "",
            "position": position,
        },
        patches=[p.to_dict() for p in patches],
        target=params.target,
        explanation=params.explanation,
    )


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------

def apply_email_edit_result(
    content: str,
    result: EmailEditResult,
    id_source: Optional[IdSource] = None,
) -> str:
    """
    Apply a successful tool result to canonical markdown content.

    Raises EmailEditRejectedError for failed or unknown results and lets
    SectionNotFoundError / PatchApplicationError propagate; in every error
    case the caller's content is unchanged.
    """
    if not result.success:
        raise EmailEditRejectedError(result.error or "Email edit was not successful")

    if result.type == RESULT_FULL_REPLACEMENT:
        if not is_complete_table(result.html):
            raise EmailEditRejectedError(
                "Full replacement must contain a complete HTML table (<table> ... </table>)"
            )
        return html_to_markdown(result.html)

    if result.type == RESULT_SECTION_OPERATION:
        try:
            operation = SectionOperation.from_dict(result.operation or {})
        except (ValueError, EmailTableError) as e:
            raise EmailEditRejectedError(f"Invalid section operation: {e}")
        return apply_section_operations_to_markdown(content, [operation], id_source=id_source)

    if result.type in (RESULT_PATCH, RESULT_OPERATION):
        patch = TextPatch(
            operations=tuple(PatchOperation.from_dict(p) for p in result.patches),
            target_text=result.target,
        )
        return apply_patch(normalize_content(content), patch)

    raise EmailEditRejectedError(f"Unknown email edit result type: {result.type}")
