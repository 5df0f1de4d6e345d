"""
Plain text to HTML fallbacks.

Used when a document could only be recovered as plain text. ``text_to_html``
first asks the table reconstructor whether the text is a table; if not,
the text is cut into paragraphs which are classified as headings, list
items or body paragraphs. ``raw_text_to_html`` keeps the line structure
untouched and is used for the lowest-fidelity recovery path.
"""

import math
import re
from html import escape

from filepreview.extractors.data_types import NodeKind, StyledContentNode
from filepreview.extractors.util.html_render import (
    EMPTY_DOCUMENT_HTML,
    render_nodes,
    render_table,
    wrap_document,
)
from filepreview.extractors.util.table_heuristics import infer

MAX_HEADING_LENGTH = 100
HEADING_UPPERCASE_RATIO = 0.3
FALLBACK_CHUNKS = 3

_BLANK_LINE_RE = re.compile(r"\n\s*\n")
_NUMBERED_ITEM_RE = re.compile(r"\d+[.\s]+[^0-9]+")
_NUMBERED_HEADING_RE = re.compile(r"^\d+\.")
_LIST_ITEM_RE = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s")
_UPPERCASE_RE = re.compile(r"[A-Z]")


def is_heading(text: str) -> bool:
    if not text:
        return False
    ratio = len(_UPPERCASE_RE.findall(text)) / len(text)
    return (len(text) < MAX_HEADING_LENGTH and ratio > HEADING_UPPERCASE_RATIO) or bool(
        _NUMBERED_HEADING_RE.match(text)
    )


def is_list_item(text: str) -> bool:
    return bool(_LIST_ITEM_RE.match(text))


def split_by_numbered_items(text: str) -> list[str]:
    items = [match.strip() for match in _NUMBERED_ITEM_RE.findall(text)]
    if items:
        return items
    words = text.split()
    if not words:
        return []
    size = math.ceil(len(words) / FALLBACK_CHUNKS)
    return [" ".join(words[i : i + size]) for i in range(0, len(words), size)]


def split_paragraphs(text: str) -> list[str]:
    """Blank-line separated blocks, else lines, else numbered items."""
    paragraphs = _BLANK_LINE_RE.split(text)
    if len(paragraphs) <= 1:
        paragraphs = text.split("\n")
    if len(paragraphs) <= 1:
        paragraphs = split_by_numbered_items(text)
    return [paragraph.strip() for paragraph in paragraphs if paragraph.strip()]


def text_to_nodes(text: str) -> list[StyledContentNode]:
    nodes = []
    for index, paragraph in enumerate(split_paragraphs(text.strip())):
        if is_heading(paragraph):
            node = StyledContentNode(kind=NodeKind.HEADING, text=paragraph, level=2, bold=True)
        elif is_list_item(paragraph):
            node = StyledContentNode(kind=NodeKind.LIST_ITEM, text=paragraph, level=1)
        else:
            node = StyledContentNode(kind=NodeKind.PARAGRAPH, text=paragraph)
        node.block_index = index
        nodes.append(node)
    return nodes


def text_to_html(text: str) -> str:
    if not text or not text.strip():
        return EMPTY_DOCUMENT_HTML
    structure = infer(text)
    if structure is not None:
        return render_table(structure)
    return wrap_document(render_nodes(text_to_nodes(text), inline_markup=True))


def raw_text_to_html(text: str) -> str:
    lines = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if not lines:
        return EMPTY_DOCUMENT_HTML
    return wrap_document("".join(f"<p>{escape(line, quote=False)}</p>" for line in lines))
