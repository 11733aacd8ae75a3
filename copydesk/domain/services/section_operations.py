"""
Section operations: name-addressed edits applied by the AI edit layer.

Sections are looked up by name rather than by character offset, so an edit
still lands on the right row after the table has been reformatted or
reordered. Names match with emphasis markers stripped and case folded, so
"HEADER" finds "**HEADER**".

Operations are translated into table_mutations calls. A batch is applied
all-or-nothing: a failing operation raises and the caller keeps its table.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from copydesk.domain.models.email_table import EmailTable, IdSource
from copydesk.domain.models.errors import (
    InvalidSectionOperationError,
    SectionNotFoundError,
)
from copydesk.domain.services import table_mutations
from copydesk.domain.services.html_table_pure import parse_content
from copydesk.domain.services.inline_markup import normalize_section_name
from copydesk.domain.services.markdown_table_pure import serialize_to_markdown


class SectionAction(str, Enum):
    ADD = "add_section"
    REMOVE = "remove_section"
    MOVE = "move_section"
    RENAME = "update_section_name"
    UPDATE_CONTENT = "update_section_content"


class SectionPosition(str, Enum):
    START = "start"
    END = "end"
    BEFORE = "before"
    AFTER = "after"


@dataclass(frozen=True)
class SectionOperation:
    """One semantic edit against a named section."""
    action: SectionAction
    section_name: str
    section_content: Optional[str] = None
    new_section_name: Optional[str] = None
    position: SectionPosition = SectionPosition.END
    target_section: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "action", SectionAction(self.action))
        object.__setattr__(self, "position", SectionPosition(self.position or SectionPosition.END))
        self.validate()

    def validate(self) -> None:
        if not self.section_name:
            raise InvalidSectionOperationError(f"section_name is required for {self.action.value}")
        if self.action in (SectionAction.ADD, SectionAction.UPDATE_CONTENT) and self.section_content is None:
            raise InvalidSectionOperationError(
                f"section_content is required for {self.action.value}"
            )
        if self.action == SectionAction.RENAME and not self.new_section_name:
            raise InvalidSectionOperationError(
                "new_section_name is required for update_section_name"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SectionOperation":
        try:
            action = data["action"]
        except KeyError:
            raise InvalidSectionOperationError("Section operation is missing 'action'")
        return cls(
            action=action,
            section_name=data.get("section_name") or "",
            section_content=data.get("section_content"),
            new_section_name=data.get("new_section_name"),
            position=data.get("position") or data.get("section_position") or SectionPosition.END,
            target_section=data.get("target_section"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action.value,
            "section_name": self.section_name,
            "section_content": self.section_content,
            "new_section_name": self.new_section_name,
            "position": self.position.value,
            "target_section": self.target_section,
        }


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

def find_section_indices(table: EmailTable, section_name: str) -> List[int]:
    """Indices of every row whose section matches section_name."""
    key = normalize_section_name(section_name)
    return [
        i for i, row in enumerate(table.rows)
        if normalize_section_name(row.section) == key
    ]


def _first_index(table: EmailTable, section_name: str) -> int:
    indices = find_section_indices(table, section_name)
    if not indices:
        raise SectionNotFoundError(section_name)
    return indices[0]


def _insertion_index(
    table: EmailTable,
    position: SectionPosition,
    target_section: Optional[str],
) -> int:
    """
    Where a row lands for a position.

    before/after anchor on the first matching target; a missing or
    unmatched target falls back to the end.
    """
    if position == SectionPosition.START:
        return 0
    if position == SectionPosition.END or not target_section:
        return len(table.rows)

    indices = find_section_indices(table, target_section)
    if not indices:
        return len(table.rows)
    anchor = indices[0]
    return anchor if position == SectionPosition.BEFORE else anchor + 1


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------

def apply_section_operation(
    table: EmailTable,
    operation: SectionOperation,
    id_source: Optional[IdSource] = None,
) -> EmailTable:
    """Apply one section operation, returning the new table."""
    action = operation.action

    if action == SectionAction.ADD:
        row = table_mutations.create_new_row(
            section=operation.section_name,
            content=operation.section_content or "",
            id_source=id_source,
        )
        index = _insertion_index(table, operation.position, operation.target_section)
        return table_mutations.insert_row(table, index, row)

    if action == SectionAction.REMOVE:
        indices = find_section_indices(table, operation.section_name)
        if not indices:
            raise SectionNotFoundError(operation.section_name)
        result = table
        for i in indices:
            result = table_mutations.remove_row(result, table.rows[i].id)
        return result

    if action == SectionAction.MOVE:
        row = table.rows[_first_index(table, operation.section_name)]
        without = table_mutations.remove_row(table, row.id)
        index = _insertion_index(without, operation.position, operation.target_section)
        moved = table_mutations.insert_row(without, index, row)
        return table_mutations.reorder_rows(table, moved.rows)

    if action == SectionAction.RENAME:
        row = table.rows[_first_index(table, operation.section_name)]
        return table_mutations.update_row(table, row.id, section=operation.new_section_name)

    if action == SectionAction.UPDATE_CONTENT:
        row = table.rows[_first_index(table, operation.section_name)]
        return table_mutations.update_row(table, row.id, content=operation.section_content)

    raise InvalidSectionOperationError(f"Unsupported section action: {action}")


def apply_section_operations(
    table: EmailTable,
    operations: Iterable[SectionOperation],
    id_source: Optional[IdSource] = None,
) -> EmailTable:
    """Apply operations in order. Any failure aborts the whole batch."""
    result = table
    for operation in operations:
        result = apply_section_operation(result, operation, id_source=id_source)
    return result


def apply_section_operations_to_markdown(
    content: str,
    operations: Iterable[SectionOperation],
    id_source: Optional[IdSource] = None,
) -> str:
    """Parse content (markdown or HTML), apply operations, re-serialize."""
    table = parse_content(content, id_source=id_source)
    return serialize_to_markdown(apply_section_operations(table, operations, id_source=id_source))
