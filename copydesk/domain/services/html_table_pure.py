"""
HTML table codec for the rich-text editor surface.

The rich-text editor holds the email as an HTML <table>; the canonical
stored form is the markdown table. This module converts between the two.
Inline markup goes through copydesk.domain.services.inline_markup so both
directions share one definition of bold/italic/code/link handling.

Pure functions, no I/O.
"""

import re
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from copydesk.domain.models.email_table import EmailTable, IdSource
from copydesk.domain.services.inline_markup import (
    html_element_to_markdown,
    markdown_inline_to_html,
)
from copydesk.domain.services.markdown_table_pure import (
    has_table_header,
    parse_markdown_table,
    serialize_to_markdown,
    unescape_cell,
)


TABLE_CLASS = "border-collapse border border-gray-600 my-4 w-full"
ROW_CLASS = "border-b border-gray-600"
HEADER_CELL_CLASS = "border border-gray-600 px-3 py-2 bg-gray-700 font-semibold text-left"
BODY_CELL_CLASS = "border border-gray-600 px-3 py-2"

_UNESCAPED_PIPE_RE = re.compile(r"(?<!\\)\|")
_DASHES_RE = re.compile(r"^:?-+:?$")


def looks_like_html_table(content: Optional[str]) -> bool:
    """True when content carries HTML table markup."""
    return bool(content) and ("<table" in content or "<tr" in content)


# ---------------------------------------------------------------------------
# HTML -> markdown
# ---------------------------------------------------------------------------

def _body_rows(table: Tag) -> List[Tag]:
    """
    Data rows of a table.

    With a <tbody>, only its rows count, so <thead> rows are structurally
    excluded. Without one, rows made only of <th> cells are skipped and rows
    nested in a <thead> are never included.
    """
    tbody = table.find("tbody")
    if tbody is not None:
        return [tr for tr in tbody.find_all("tr") if tr.find_parent("table") is table]

    rows = []
    for tr in table.find_all("tr"):
        if tr.find_parent("table") is not table:
            continue
        if tr.find_parent("thead") is not None:
            continue
        if not tr.find_all("td", recursive=False):
            continue
        rows.append(tr)
    return rows


def html_table_pairs(html: str) -> Optional[List[Tuple[str, str]]]:
    """
    Extract (section, content) pairs from the first <table> in html.

    Returns None when there is no table at all. Rows with fewer than two
    <td> cells are skipped.
    """
    soup = BeautifulSoup(html or "", "html.parser")
    table = soup.find("table")
    if table is None:
        return None

    pairs: List[Tuple[str, str]] = []
    for tr in _body_rows(table):
        cells = tr.find_all("td", recursive=False)
        if len(cells) < 2:
            continue
        pairs.append((
            html_element_to_markdown(cells[0]),
            html_element_to_markdown(cells[1]),
        ))
    return pairs


def html_to_table(html: str, id_source: Optional[IdSource] = None) -> EmailTable:
    """Parse an HTML table into an EmailTable. No table means empty table."""
    pairs = html_table_pairs(html) or []
    return EmailTable.from_pairs(
        [(section, content) for section, content in pairs if section],
        id_source=id_source,
    )


def html_to_markdown(html: str) -> str:
    """
    Convert an HTML email table to the canonical markdown table.

    Input with no <table> element is returned unchanged so the raw text is
    never lost.
    """
    pairs = html_table_pairs(html)
    if pairs is None:
        return html
    return serialize_to_markdown(EmailTable.from_pairs(
        [(section, content) for section, content in pairs if section]
    ))


# ---------------------------------------------------------------------------
# markdown -> HTML
# ---------------------------------------------------------------------------

def markdown_table_pairs(markdown: str) -> List[Tuple[str, str]]:
    """
    Extract (section, content) pairs from the flattened cell stream.

    The text is split on unescaped pipes, empty and dash-only tokens are
    dropped, and cells are consumed pairwise starting right after the
    `Section` / `Content` header tokens. Pairs missing either side are
    dropped.
    """
    if not has_table_header(markdown):
        return []

    tokens = [
        token.strip()
        for token in _UNESCAPED_PIPE_RE.split(markdown)
    ]
    tokens = [token for token in tokens if token and not _DASHES_RE.match(token)]

    start = -1
    for i in range(len(tokens) - 1):
        if tokens[i] == "Section" and tokens[i + 1] == "Content":
            start = i + 2
            break
    if start == -1:
        return []

    pairs: List[Tuple[str, str]] = []
    for i in range(start, len(tokens) - 1, 2):
        section, content = tokens[i], tokens[i + 1]
        if section and content:
            pairs.append((unescape_cell(section), unescape_cell(content)))
    return pairs


def render_html_table(pairs: List[Tuple[str, str]]) -> str:
    """Render (section, content) pairs as the editor's styled HTML table."""
    lines = [
        f'<table class="{TABLE_CLASS}">',
        "<thead>",
        f'<tr class="{ROW_CLASS}">'
        f'<th class="{HEADER_CELL_CLASS}">Section</th>'
        f'<th class="{HEADER_CELL_CLASS}">Content</th>'
        "</tr>",
        "</thead>",
        "<tbody>",
    ]
    for section, content in pairs:
        lines.append(
            f'<tr class="{ROW_CLASS}">'
            f'<td class="{BODY_CELL_CLASS}">{markdown_inline_to_html(section)}</td>'
            f'<td class="{BODY_CELL_CLASS}">{markdown_inline_to_html(content)}</td>'
            "</tr>"
        )
    lines.extend(["</tbody>", "</table>"])
    return "\n".join(lines)


def markdown_to_html(markdown: str) -> str:
    """
    Convert a markdown email table to HTML for the rich-text editor.

    Unrecognized input (no header, or no complete pairs) is returned
    unchanged rather than rendered as an empty table.
    """
    pairs = markdown_table_pairs(markdown)
    if not pairs:
        return markdown
    return render_html_table(pairs)


def table_to_html(table: EmailTable) -> str:
    """Render an EmailTable directly. An empty table renders as ""."""
    if table.is_empty:
        return ""
    return render_html_table(list(table.pairs()))


# ---------------------------------------------------------------------------
# Defensive ingestion
# ---------------------------------------------------------------------------

def normalize_content(content: Optional[str]) -> str:
    """
    Canonical markdown for any incoming content.

    Content carrying `<table` or `<tr` is converted from HTML first, even
    where the caller expected markdown.
    """
    if not content:
        return ""
    if looks_like_html_table(content):
        return html_to_markdown(content)
    return content


def parse_content(
    content: Optional[str],
    id_source: Optional[IdSource] = None,
) -> EmailTable:
    """Parse markdown or HTML content into an EmailTable."""
    return parse_markdown_table(normalize_content(content), id_source=id_source)
