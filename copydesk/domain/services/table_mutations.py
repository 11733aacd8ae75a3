"""
Pure, order-preserving mutations over an EmailTable.

Every function returns a new EmailTable; the input is never modified.
"""

from collections import Counter
from typing import Iterable, Optional

from copydesk.domain.models.email_table import (
    EmailTable,
    IdSource,
    PLACEHOLDER_CONTENT,
    PLACEHOLDER_SECTION,
    TableRow,
    default_id_source,
)
from copydesk.domain.models.errors import RowOrderError


EDITABLE_FIELDS = ("section", "content")


def create_new_row(
    section: str = PLACEHOLDER_SECTION,
    content: str = PLACEHOLDER_CONTENT,
    id_source: Optional[IdSource] = None,
) -> TableRow:
    """Build a row with a fresh id. Defaults to the placeholder section."""
    ids = id_source or default_id_source()
    return TableRow(id=ids.next_id("row"), section=section, content=content)


def update_row(table: EmailTable, row_id: str, **updates: str) -> EmailTable:
    """
    Replace section and/or content of the row with row_id.

    Unknown row ids leave the table unchanged. Only section and content can
    be updated; the id is never rewritten.
    """
    unknown = set(updates) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Cannot update row fields: {sorted(unknown)}")

    return EmailTable(rows=tuple(
        row.with_fields(**updates) if row.id == row_id else row
        for row in table.rows
    ))


def reorder_rows(table: EmailTable, new_order: Iterable[TableRow]) -> EmailTable:
    """
    Store a caller-supplied row order.

    The new order must be a permutation of the current rows, matched by id.
    Dropped, duplicated or foreign rows raise RowOrderError and the table is
    left as it was.
    """
    new_rows = tuple(new_order)
    current_ids = Counter(table.row_ids)
    proposed_ids = Counter(row.id for row in new_rows)

    if current_ids != proposed_ids:
        missing = sorted((current_ids - proposed_ids).keys())
        extra = proposed_ids - current_ids
        duplicated = sorted(rid for rid in extra if rid in current_ids)
        unexpected = sorted(rid for rid in extra if rid not in current_ids)
        raise RowOrderError(
            "New row order is not a permutation of the current rows",
            missing=missing,
            unexpected=unexpected,
            duplicated=duplicated,
        )

    return EmailTable(rows=new_rows)


def reorder_rows_by_id(table: EmailTable, row_ids: Iterable[str]) -> EmailTable:
    """reorder_rows addressed by id, keeping each row's current fields."""
    ids = list(row_ids)
    by_id = {row.id: row for row in table.rows}
    unknown = [rid for rid in ids if rid not in by_id]
    if unknown:
        raise RowOrderError(
            "New row order references unknown rows",
            unexpected=sorted(set(unknown)),
        )
    return reorder_rows(table, [by_id[rid] for rid in ids])


def _check_new_row_id(table: EmailTable, row: TableRow) -> None:
    if row.id in table.row_ids:
        raise RowOrderError(
            f"Row id already in table: {row.id}",
            duplicated=[row.id],
        )


def add_row(
    table: EmailTable,
    row: Optional[TableRow] = None,
    id_source: Optional[IdSource] = None,
) -> EmailTable:
    """Append row, or a placeholder row when none is given."""
    new_row = row or create_new_row(id_source=id_source)
    _check_new_row_id(table, new_row)
    return EmailTable(rows=table.rows + (new_row,))


def insert_row(table: EmailTable, index: int, row: TableRow) -> EmailTable:
    """Insert row at index (clamped to the table bounds)."""
    _check_new_row_id(table, row)
    index = max(0, min(index, len(table.rows)))
    return EmailTable(rows=table.rows[:index] + (row,) + table.rows[index:])


def remove_row(table: EmailTable, row_id: str) -> EmailTable:
    """Drop the row with row_id. Removing the last row yields an empty table."""
    return EmailTable(rows=tuple(row for row in table.rows if row.id != row_id))
