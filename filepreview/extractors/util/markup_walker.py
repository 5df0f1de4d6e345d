"""
Markup Content Walker
=====================

Turns the DrawingML markup of one slide into an ordered list of
``StyledContentNode`` objects.

The walker works in two layers:

``extract_text_runs``
    Pattern-based scanning of the raw markup. Finds shape blocks
    (``<p:sp>`` with a ``<p:txBody>``), their offset on the slide and the
    paragraphs inside them with their raw style attributes. When a slide
    has no shape with a text body, every bare ``<a:p>`` paragraph is
    scanned as one block instead (tables in graphic frames end up here).
    This is the only place that knows about markup; a structural parser can
    replace it as long as it returns the same ``MarkupBlock`` list.

``walk``
    Applies the presentation rules to the extracted paragraphs:
    nesting level 0/1/2 becomes heading 2/3/4, deeper levels become body
    paragraphs; the font size picks a size class (>=32, >=28, >=24, >=20,
    base) regardless of level; bold/italic/underline are carried as flags;
    alignment is left unless the paragraph says otherwise.

All runs of a paragraph are concatenated before styling, so a paragraph
that is only partly bold is reported with the style of its first run.

Both the ``lvl``/``sz``/``b``/``algn`` attribute forms written by
PowerPoint and the element forms (``<a:lvl val=..>``, ``<a:sz val=..>``,
``<a:b/>``, ``<a:jc val=..>``) are recognized. Sizes in the attribute form
are hundredths of a point.
"""

import html
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from filepreview.extractors.data_types import (
    Alignment,
    BlockPosition,
    NodeKind,
    StyledContentNode,
)

logger = logging.getLogger(__name__)

NO_CONTENT_TEXT = "No text content"
PARSE_FAILED_TEXT = "Slide content could not be parsed"

DEFAULT_FONT_SIZE = 18.0
HEADING_LEVELS = {0: 2, 1: 3, 2: 4}
SIZE_CLASSES = ((32, "3xl"), (28, "2xl"), (24, "xl"), (20, "lg"))
ALIGNMENTS = {
    "l": Alignment.LEFT,
    "left": Alignment.LEFT,
    "ctr": Alignment.CENTER,
    "center": Alignment.CENTER,
    "r": Alignment.RIGHT,
    "right": Alignment.RIGHT,
    "just": Alignment.JUSTIFY,
    "dist": Alignment.JUSTIFY,
    "justify": Alignment.JUSTIFY,
}

# =============================================================================
# Patterns
# =============================================================================
_SHAPE_RE = re.compile(r"<p:sp\b[^>]*>.*?</p:sp>", re.S)
_TEXT_BODY_RE = re.compile(r"<p:txBody\b.*?</p:txBody>", re.S)
_SHAPE_PROPS_RE = re.compile(r"<p:spPr\b.*?</p:spPr>", re.S)
_OFFSET_RE = re.compile(r"<a:off\b[^>]*?\bx=\"(-?\d+)\"[^>]*?\by=\"(-?\d+)\"")
# <a:p> or <a:p attr..> but neither <a:pPr> nor a self-closing <a:p/>
_PARAGRAPH_RE = re.compile(r"<a:p(?:\s[^>]*)?(?<!/)>(.*?)</a:p>", re.S)
_TEXT_RE = re.compile(r"<a:t(?:\s[^>]*)?>([^<]*)</a:t>")
_LEVEL_RES = (
    re.compile(r"<a:pPr\b[^>]*\blvl=\"(\d+)\""),
    re.compile(r"<a:lvl\b[^>]*\bval=\"(\d+)\""),
)
_SIZE_ATTR_RE = re.compile(r"<a:(?:rPr|defRPr)\b[^>]*\bsz=\"(\d+)\"")
_SIZE_ELEMENT_RE = re.compile(r"<a:sz\b[^>]*\bval=\"(\d+)\"")
_ALIGN_RES = (
    re.compile(r"<a:pPr\b[^>]*\balgn=\"(\w+)\""),
    re.compile(r"<a:jc\b[^>]*\bval=\"(\w+)\""),
)
_BOLD_RE = re.compile(r"<a:b\s*/>|<a:rPr\b[^>]*\bb=\"(?:1|true)\"")
_ITALIC_RE = re.compile(r"<a:i\s*/>|<a:rPr\b[^>]*\bi=\"(?:1|true)\"")
_UNDERLINE_RE = re.compile(r"<a:u\s*/>|<a:rPr\b[^>]*\bu=\"(?!none\")\w+\"")
_IMAGE_REF_RE = re.compile(r"<a:blip\b[^>]*\br:(?:embed|link)=\"([^\"]+)\"")


@dataclass
class ParagraphRun:
    """The concatenated text of one paragraph with its raw style attributes."""

    text: str = ""
    level: int = 0
    font_size: float = DEFAULT_FONT_SIZE
    bold: bool = False
    italic: bool = False
    underline: bool = False
    alignment: Alignment = Alignment.LEFT


@dataclass
class MarkupBlock:
    paragraphs: list[ParagraphRun] = field(default_factory=list)
    position: Optional[BlockPosition] = None


def _first_int(patterns, markup: str) -> Optional[int]:
    for pattern in patterns:
        match = pattern.search(markup)
        if match:
            return int(match.group(1))
    return None


def _font_size(markup: str) -> float:
    match = _SIZE_ATTR_RE.search(markup)
    if match:
        return int(match.group(1)) / 100
    match = _SIZE_ELEMENT_RE.search(markup)
    if match:
        return float(match.group(1))
    return DEFAULT_FONT_SIZE


def _alignment(markup: str) -> Alignment:
    for pattern in _ALIGN_RES:
        match = pattern.search(markup)
        if match:
            return ALIGNMENTS.get(match.group(1).lower(), Alignment.LEFT)
    return Alignment.LEFT


def parse_paragraph(markup: str) -> ParagraphRun:
    level = _first_int(_LEVEL_RES, markup)
    return ParagraphRun(
        text=html.unescape("".join(_TEXT_RE.findall(markup))),
        level=level or 0,
        font_size=_font_size(markup),
        bold=bool(_BOLD_RE.search(markup)),
        italic=bool(_ITALIC_RE.search(markup)),
        underline=bool(_UNDERLINE_RE.search(markup)),
        alignment=_alignment(markup),
    )


def _shape_position(shape: str) -> Optional[BlockPosition]:
    props = _SHAPE_PROPS_RE.search(shape)
    if not props:
        return None
    offset = _OFFSET_RE.search(props.group(0))
    if not offset:
        return None
    return BlockPosition(x_emu=int(offset.group(1)), y_emu=int(offset.group(2)))


def _paragraphs(markup: str) -> list[ParagraphRun]:
    return [parse_paragraph(match.group(0)) for match in _PARAGRAPH_RE.finditer(markup)]


def extract_text_runs(markup: str) -> list[MarkupBlock]:
    """Scan one unit of markup into text blocks, in document order."""
    blocks = []
    for shape in _SHAPE_RE.finditer(markup):
        text_body = _TEXT_BODY_RE.search(shape.group(0))
        if not text_body:
            continue
        blocks.append(
            MarkupBlock(
                paragraphs=_paragraphs(text_body.group(0)),
                position=_shape_position(shape.group(0)),
            )
        )
    if blocks:
        return blocks

    paragraphs = _paragraphs(markup)
    return [MarkupBlock(paragraphs=paragraphs)] if paragraphs else []


def size_class(font_size: float) -> str:
    for threshold, name in SIZE_CLASSES:
        if font_size >= threshold:
            return name
    return "base"


def style_paragraph(
    paragraph: ParagraphRun,
    block_index: int = 0,
    position: Optional[BlockPosition] = None,
) -> StyledContentNode:
    heading_level = HEADING_LEVELS.get(paragraph.level)
    return StyledContentNode(
        kind=NodeKind.HEADING if heading_level else NodeKind.PARAGRAPH,
        text=paragraph.text.strip(),
        level=heading_level or paragraph.level,
        bold=paragraph.bold,
        italic=paragraph.italic,
        underline=paragraph.underline,
        alignment=paragraph.alignment,
        font_size=paragraph.font_size,
        size_class=size_class(paragraph.font_size),
        block_index=block_index,
        position=position,
    )


def placeholder_node(text: str = NO_CONTENT_TEXT) -> StyledContentNode:
    return StyledContentNode(kind=NodeKind.PARAGRAPH, text=text, placeholder=True)


def walk(markup: str) -> list[StyledContentNode]:
    """Styled content of one markup unit; a placeholder node if it has no text."""
    nodes = []
    for index, block in enumerate(extract_text_runs(markup)):
        for paragraph in block.paragraphs:
            if paragraph.text.strip():
                nodes.append(style_paragraph(paragraph, index, block.position))
    if not nodes:
        logger.debug("Markup unit has no text, emitting placeholder")
        return [placeholder_node()]
    return nodes


def extract_image_references(markup: str) -> list[str]:
    """Relationship ids of the pictures referenced by the markup, in order."""
    seen = []
    for rel_id in _IMAGE_REF_RE.findall(markup):
        if rel_id not in seen:
            seen.append(rel_id)
    return seen
