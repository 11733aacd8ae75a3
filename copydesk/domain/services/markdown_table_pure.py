"""
Markdown table codec for structured email content.

Canonical persisted format:

    | Section | Content |
    |---------|---------|
    | SUBJECT LINE | Email subject content |
    | BODY | Email body content |

All functions are pure: no I/O, no logging. Absence of a table is a normal
state and parses to an empty EmailTable, never an error.
"""

import re
from typing import List, Optional, Tuple

from copydesk.domain.models.email_table import (
    EmailTable,
    IdSource,
    TableRow,
    default_id_source,
)


TABLE_HEADER = "| Section | Content |"
TABLE_SEPARATOR = "|---------|---------|"

_HEADER_LINE_RE = re.compile(r"^\|\s*Section\s*\|\s*Content\s*\|$")
_SEPARATOR_LINE_RE = re.compile(r"^\|(\s*:?-+:?\s*\|)+$")
_DASHES_RE = re.compile(r"^-+$")
_UNESCAPED_PIPE_RE = re.compile(r"(?<!\\)\|")
_LINE_BREAK_RE = re.compile(r"[\r\n]+")
_INVISIBLE_RE = re.compile("[\u200b-\u200d\ufeff]")


def has_table_header(text: Optional[str]) -> bool:
    """True when text contains the literal table header line."""
    return bool(text) and TABLE_HEADER in text


# ---------------------------------------------------------------------------
# Cell escaping
# ---------------------------------------------------------------------------

def escape_cell(value: str) -> str:
    """Escape pipes that are not already escaped. Idempotent."""
    return _UNESCAPED_PIPE_RE.sub(r"\\|", value)


def unescape_cell(value: str) -> str:
    return value.replace("\\|", "|")


def split_row_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a `| section | content |` line into raw (still escaped) cells.

    The outer pipes are stripped, then the line is split on the FIRST
    unescaped pipe only, so any further pipes stay inside content.
    Returns None when the line is not a pipe-delimited row.
    """
    stripped = line.strip()
    if len(stripped) < 2 or not (stripped.startswith("|") and stripped.endswith("|")):
        return None

    inner = stripped[1:-1]
    match = _UNESCAPED_PIPE_RE.search(inner)
    if match is None:
        return inner.strip(), ""
    return inner[:match.start()].strip(), inner[match.end():].strip()


def _is_separator(section: str, content: str) -> bool:
    return bool(_DASHES_RE.match(section)) and (not content or bool(_DASHES_RE.match(content)))


# ---------------------------------------------------------------------------
# Parse
# ---------------------------------------------------------------------------

def parse_markdown_table(
    markdown: Optional[str],
    id_source: Optional[IdSource] = None,
) -> EmailTable:
    """
    Parse a markdown pipe-table into an EmailTable.

    Rows are read from the lines following the `| Section | Content |`
    header. Separator lines are skipped. A row is emitted only when its
    section is non-empty; empty content is kept as "". Every row receives a
    fresh id from the identity source.
    """
    if not has_table_header(markdown):
        return EmailTable.empty()

    ids = id_source or default_id_source()
    rows: List[TableRow] = []
    header_seen = False

    for line in markdown.splitlines():
        stripped = line.strip()

        if not header_seen:
            if _HEADER_LINE_RE.match(stripped):
                header_seen = True
            continue

        if _SEPARATOR_LINE_RE.match(stripped):
            continue

        cells = split_row_line(stripped)
        if cells is None:
            continue

        section, content = cells
        if _is_separator(section, content):
            continue
        if not section:
            continue

        rows.append(TableRow(
            id=ids.next_id("row"),
            section=unescape_cell(section),
            content=unescape_cell(content),
        ))

    return EmailTable(rows=tuple(rows))


# ---------------------------------------------------------------------------
# Serialize
# ---------------------------------------------------------------------------

def sanitize_cell(value: str, empty_placeholder: str = "") -> str:
    """
    Prepare a cell for a single-line table row.

    Order matters: line breaks collapse to one space, unescaped pipes are
    escaped, whitespace is trimmed, then an empty result becomes the
    placeholder.
    """
    value = _LINE_BREAK_RE.sub(" ", value or "")
    value = escape_cell(value)
    value = value.strip()
    return value or empty_placeholder


def serialize_to_markdown(table: EmailTable) -> str:
    """
    Serialize an EmailTable to the canonical markdown format.

    An empty table serializes to "" (no header skeleton). Empty content is
    written as a single space so the row stays distinct when parsed back.
    """
    if table.is_empty:
        return ""

    lines = [TABLE_HEADER, TABLE_SEPARATOR]
    for row in table.rows:
        section = sanitize_cell(row.section)
        content = sanitize_cell(row.content, empty_placeholder=" ")
        lines.append(f"| {section} | {content} |")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Tracker sanitation
# ---------------------------------------------------------------------------

def sanitize_tracker_cell(value: str) -> str:
    """Clean one cell for the task tracker's markdown renderer."""
    if not value:
        return " "

    value = re.sub(r"\n+", "<br/>", value)
    value = re.sub(r"\r+", "", value)
    value = re.sub(r"\t+", " ", value)
    value = escape_cell(value)
    value = _INVISIBLE_RE.sub("", value)
    value = value.replace("\u00a0", " ")
    value = re.sub(r"\s{2,}", " ", value)
    value = value.strip()

    return value or " "


def sanitize_markdown_for_tracker(markdown: str) -> str:
    """
    Normalize every row of a markdown table for the tracker.

    Non-table text is returned unchanged. Header and separator lines are
    kept verbatim; other non-row lines pass through.
    """
    if not has_table_header(markdown):
        return markdown

    sanitized: List[str] = []
    for line in markdown.split("\n"):
        stripped = line.strip()
        if _HEADER_LINE_RE.match(stripped) or _SEPARATOR_LINE_RE.match(stripped):
            sanitized.append(line)
            continue

        cells = split_row_line(stripped)
        if cells is None:
            sanitized.append(line)
            continue

        section, content = cells
        sanitized.append(
            f"| {sanitize_tracker_cell(section)} | {sanitize_tracker_cell(content)} |"
        )

    return "\n".join(sanitized)


def reconstruct_markdown_table(content: str) -> str:
    """
    Rebuild a table whose cells were broken across lines.

    Lines after the header that do not start with a pipe are treated as a
    continuation of the previous row's content.
    """
    if not has_table_header(content):
        return content

    rows: List[List[str]] = []
    current: Optional[List[str]] = None
    in_table = False

    for line in content.split("\n"):
        if TABLE_HEADER in line:
            in_table = True
            continue
        if not in_table:
            continue
        stripped = line.strip()
        if _SEPARATOR_LINE_RE.match(stripped):
            continue

        if stripped.startswith("|"):
            if current is not None:
                rows.append(current)
            body = stripped[1:-1] if stripped.endswith("|") else stripped[1:]
            match = _UNESCAPED_PIPE_RE.search(body)
            if match is None:
                current = [body.strip(), ""]
            else:
                current = [body[:match.start()].strip(), body[match.end():].strip()]
        elif current is not None and stripped:
            continuation = stripped
            # The closing pipe of a broken row lands on its last line
            if continuation.endswith("|") and not continuation.endswith("\\|"):
                continuation = continuation[:-1].rstrip()
            current[1] = f"{current[1]} {continuation}".strip()

    if current is not None:
        rows.append(current)

    lines = [TABLE_HEADER, TABLE_SEPARATOR]
    for section, cell in rows:
        lines.append(f"| {sanitize_tracker_cell(section)} | {sanitize_tracker_cell(cell)} |")
    return "\n".join(lines)
