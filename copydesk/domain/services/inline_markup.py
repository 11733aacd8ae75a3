"""
Inline markup mapping shared by the markdown and HTML table codecs.

Rows store emphasis as raw markdown-style markers. This module is the single
definition of how those markers map to HTML tags and back:

    **_text_**     <->  <strong><em>text</em></strong>
    **text**       <->  <strong>text</strong>
    *text*         <->  <em>text</em>
    `text`         <->  <code>text</code>
    [text](href)   <->  <a href="href">text</a>
    (space)        <-   <br>

Pure functions, no I/O.
"""

import html
import re
from typing import List

from bs4 import BeautifulSoup, Comment, NavigableString, Tag


_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_CODE_RE = re.compile(r"`(.+?)`")
_BOLD_ITALIC_RE = re.compile(r"\*\*_(.+?)_\*\*")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_RE = re.compile(r"\*(.+?)\*")

_INVISIBLE_RE = re.compile("[\u200b-\u200d\ufeff]")
_WHITESPACE_RE = re.compile(r"\s+")

BOLD_TAGS = ("strong", "b")
ITALIC_TAGS = ("em", "i")
BLOCK_TAGS = ("p", "div", "li")


# ---------------------------------------------------------------------------
# markdown -> HTML
# ---------------------------------------------------------------------------

def markdown_inline_to_html(text: str) -> str:
    """
    Convert inline markers in a cell to HTML.

    Text is HTML-escaped first so literal angle brackets survive a trip
    through an HTML editor. The combined bold-italic marker is matched before
    plain bold and italic.
    """
    if not text:
        return ""

    result = html.escape(text, quote=False)
    result = _LINK_RE.sub(
        lambda m: f'<a href="{m.group(2).replace(chr(34), "&quot;")}">{m.group(1)}</a>',
        result,
    )
    result = _CODE_RE.sub(r"<code>\1</code>", result)
    result = _BOLD_ITALIC_RE.sub(r"<strong><em>\1</em></strong>", result)
    result = _BOLD_RE.sub(r"<strong>\1</strong>", result)
    result = _ITALIC_RE.sub(r"<em>\1</em>", result)
    return result


# ---------------------------------------------------------------------------
# HTML -> markdown
# ---------------------------------------------------------------------------

def html_element_to_markdown(element: Tag) -> str:
    """Extract the text of an element, re-encoding inline tags as markers."""
    parts: List[str] = []
    for child in element.children:
        _render_node(child, parts)
    return clean_cell_text("".join(parts))


def html_fragment_to_markdown(fragment: str) -> str:
    """Convenience wrapper for a cell given as an HTML string."""
    soup = BeautifulSoup(fragment or "", "html.parser")
    return html_element_to_markdown(soup)


def _render_node(node, parts: List[str]) -> None:
    if isinstance(node, Comment):
        return
    if isinstance(node, NavigableString):
        parts.append(str(node))
        return
    if not isinstance(node, Tag):
        return

    name = node.name.lower()

    if name in BOLD_TAGS:
        italic_child = any(
            isinstance(child, Tag) and child.name.lower() in ITALIC_TAGS
            for child in node.children
        )
        if italic_child:
            parts.append("**_")
            for child in node.children:
                if isinstance(child, Tag) and child.name.lower() in ITALIC_TAGS:
                    _render_children(child, parts)
                else:
                    _render_node(child, parts)
            parts.append("_**")
        else:
            parts.append("**")
            _render_children(node, parts)
            parts.append("**")
    elif name in ITALIC_TAGS:
        parts.append("*")
        _render_children(node, parts)
        parts.append("*")
    elif name == "code":
        parts.append("`")
        _render_children(node, parts)
        parts.append("`")
    elif name == "a":
        href = node.get("href")
        text = node.get_text()
        parts.append(f"[{text}]({href})" if href else text)
    elif name == "br":
        parts.append(" ")
    elif name in BLOCK_TAGS:
        parts.append(" ")
        _render_children(node, parts)
        parts.append(" ")
    else:
        _render_children(node, parts)


def _render_children(node: Tag, parts: List[str]) -> None:
    for child in node.children:
        _render_node(child, parts)


def clean_cell_text(text: str) -> str:
    """Drop invisible characters, collapse whitespace runs, trim."""
    text = _INVISIBLE_RE.sub("", text)
    text = text.replace("\u00a0", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Section name matching
# ---------------------------------------------------------------------------

def strip_markup(text: str) -> str:
    """Remove emphasis and code markers, leaving the plain label."""
    return re.sub(r"[*_`]+", "", text or "")


def normalize_section_name(name: str) -> str:
    """Key used to match a section name: markers stripped, case folded."""
    return _WHITESPACE_RE.sub(" ", strip_markup(name)).strip().casefold()
