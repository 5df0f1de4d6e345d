"""HTML fragments for styled nodes, slides and reconstructed tables."""

import re
from html import escape
from itertools import groupby
from typing import Iterable

from filepreview.extractors.data_types import (
    Alignment,
    MediaAsset,
    NodeKind,
    SlidePreview,
    StyledContentNode,
    TableStructure,
)

EMPTY_DOCUMENT_HTML = '<div class="document"><p class="empty">No content could be extracted</p></div>'

_HEADING_SIZE_CLASSES = {2: "2xl", 3: "xl", 4: "lg"}

_BOLD_MARKUP_RE = re.compile(r"\*\*(.*?)\*\*")
_ITALIC_MARKUP_RE = re.compile(r"\*(.*?)\*")
_UNDERLINE_MARKUP_RE = re.compile(r"__(.*?)__")
_BULLET_RE = re.compile(r"^\s*[-*•]\s")


def render_inline(text: str) -> str:
    """Escape ``text`` and turn ``**bold**``, ``*italic*`` and ``__underline__`` into tags."""
    rendered = escape(text, quote=False)
    rendered = _BOLD_MARKUP_RE.sub(r"<strong>\1</strong>", rendered)
    rendered = _UNDERLINE_MARKUP_RE.sub(r"<u>\1</u>", rendered)
    rendered = _ITALIC_MARKUP_RE.sub(r"<em>\1</em>", rendered)
    return rendered


def _node_style(node: StyledContentNode) -> str:
    rules = []
    if node.alignment is not Alignment.LEFT:
        rules.append(f"text-align: {node.alignment.value}")
    if node.bold:
        rules.append("font-weight: bold")
    if node.italic:
        rules.append("font-style: italic")
    if node.underline:
        rules.append("text-decoration: underline")
    return "; ".join(rules)


def _node_classes(node: StyledContentNode) -> str:
    size = node.size_class
    if size == "base" and node.kind is NodeKind.HEADING:
        size = _HEADING_SIZE_CLASSES.get(node.level, "base")
    classes = [node.kind.value, f"text-{size}"]
    if node.placeholder:
        classes.append("placeholder")
    return " ".join(classes)


def render_node(node: StyledContentNode, inline_markup: bool = False) -> str:
    if inline_markup:
        text = render_inline(node.text)
        if node.kind is NodeKind.LIST_ITEM:
            text = _BULLET_RE.sub("• ", text)
    else:
        text = escape(node.text, quote=False)
    style = _node_style(node)
    style_attr = f' style="{style}"' if style else ""
    tag = "div" if node.kind is NodeKind.LIST_ITEM else node.tag
    return f'<{tag} class="{_node_classes(node)}"{style_attr}>{text}</{tag}>'


def render_nodes(nodes: Iterable[StyledContentNode], inline_markup: bool = False) -> str:
    """
    Render nodes block by block. A block with a parsed offset is wrapped in a
    positioned ``div`` so the relative layout of text boxes survives.
    """
    parts = []
    for _, block in groupby(nodes, key=lambda node: node.block_index):
        block = list(block)
        inner = "".join(render_node(node, inline_markup) for node in block)
        position = block[0].position
        if position is None:
            parts.append(f'<div class="text-block">{inner}</div>')
        else:
            parts.append(
                f'<div class="text-block" style="position: relative; '
                f'left: {position.left_pt}pt; top: {position.top_pt}pt;">{inner}</div>'
            )
    return "".join(parts)


def render_image(asset: MediaAsset) -> str:
    return (
        f'<img class="slide-image" src="{asset.src}" '
        f'alt="{escape(asset.name)}" data-path="{escape(asset.path)}"/>'
    )


def render_slide(slide: SlidePreview) -> str:
    body = render_nodes(slide.nodes)
    if slide.images:
        images = "".join(render_image(asset) for asset in slide.images)
        body += f'<div class="slide-images">{images}</div>'
    return f'<section class="slide" data-slide="{slide.index}">{body}</section>'


def render_presentation(slides: Iterable[SlidePreview]) -> str:
    return '<div class="presentation">' + "".join(slide.html for slide in slides) + "</div>"


def render_table(structure: TableStructure) -> str:
    parts = ['<div class="document table-document">']
    if structure.title:
        parts.append(f'<h2 class="table-title">{escape(structure.title)}</h2>')
    parts.append('<table class="reconstructed-table">')
    if structure.headers:
        cells = "".join(f"<th>{escape(header)}</th>" for header in structure.headers)
        parts.append(f"<thead><tr>{cells}</tr></thead>")
    parts.append("<tbody>")
    for row in structure.rows:
        cells = "".join(
            f'<td style="text-align: {structure.alignments.get(header, Alignment.CENTER).value}">'
            f"{escape(row.get(header, ''))}</td>"
            for header in structure.headers
        )
        parts.append(f"<tr>{cells}</tr>")
    parts.append("</tbody></table></div>")
    return "".join(parts)


def wrap_document(inner: str) -> str:
    return f'<div class="document">{inner}</div>'
