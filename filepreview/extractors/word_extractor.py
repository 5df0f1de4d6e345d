"""
Word document previewer.

Paths, in order of fidelity:

    - mammoth: .docx to styled HTML (raw text when the HTML comes out empty)
    - package: paragraphs of ``word/document.xml`` read straight from the package
    - legacy:  .doc body text through the piece table, laid out as HTML
    - scrape:  printable UTF-16 runs of a .doc file as one paragraph per line

A ``.doc`` that is really a ZIP package is handled as ``.docx``.
"""

import io
import logging
import re
import xml.etree.ElementTree as ET
from typing import Any, Generator

import mammoth

from filepreview.exceptions import ExtractionFailedError, FormatError, UpstreamError
from filepreview.extractors.data_types import (
    CONTENT_TYPE_HTML,
    CONTENT_TYPE_TEXT,
    WordPreview,
)
from filepreview.extractors.util.legacy_doc import read_legacy_doc_text, scrape_text
from filepreview.extractors.util.package import is_zip_package, open_package
from filepreview.extractors.util.text_layout import raw_text_to_html, text_to_html

logger = logging.getLogger(__name__)

WORD_NS = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
DOCUMENT_PART = "word/document.xml"

STYLE_MAP = "\n".join(
    [
        "p[style-name='Heading 1'] => h1:fresh",
        "p[style-name='Heading 2'] => h2:fresh",
        "p[style-name='Heading 3'] => h3:fresh",
        "p[style-name='Heading 4'] => h4:fresh",
        "p[style-name='Heading 5'] => h5:fresh",
        "p[style-name='Heading 6'] => h6:fresh",
        "p[style-name='Title'] => h1.title:fresh",
        "p[style-name='Subtitle'] => h2.subtitle:fresh",
        "p[style-name='Quote'] => blockquote:fresh",
        "p[style-name='Intense Quote'] => blockquote.intense:fresh",
        "p[style-name='List Paragraph'] => li:fresh",
        "r[style-name='Strong'] => strong",
        "r[style-name='Emphasis'] => em",
        "r[style-name='Code'] => code",
    ]
)

# presentation styles added to the bare tags mammoth emits
INLINE_STYLES = {
    "p": "margin: 0.5em 0; line-height: 1.6;",
    "ul": "margin: 0.5em 0; padding-left: 2em;",
    "ol": "margin: 0.5em 0; padding-left: 2em;",
    "table": "border-collapse: collapse; width: 100%; margin: 1em 0;",
    "td": "border: 1px solid #ddd; padding: 8px; text-align: left;",
    "th": (
        "border: 1px solid #ddd; padding: 8px; text-align: left; "
        "background-color: #f5f5f5; font-weight: bold;"
    ),
    "h1": "color: #2c3e50; margin: 1em 0 0.5em 0; font-size: 1.8em; font-weight: bold;",
    "h2": "color: #34495e; margin: 1em 0 0.5em 0; font-size: 1.5em; font-weight: bold;",
    "h3": "color: #34495e; margin: 1em 0 0.5em 0; font-size: 1.3em; font-weight: bold;",
    "blockquote": (
        "border-left: 4px solid #3498db; margin: 1em 0; padding-left: 1em; "
        "color: #555; font-style: italic;"
    ),
    "code": (
        "background-color: #f8f9fa; padding: 2px 4px; border-radius: 3px; "
        "font-family: monospace; color: #e74c3c;"
    ),
}


def apply_inline_styles(html: str) -> str:
    for tag, style in INLINE_STYLES.items():
        html = re.sub(rf"<{tag}(\s[^>]*)?>", rf'<{tag}\1 style="{style}">', html)
    return html


###############
# .docx paths #
###############


def _convert_with_mammoth(data: bytes) -> WordPreview:
    try:
        result = mammoth.convert_to_html(
            io.BytesIO(data),
            style_map=STYLE_MAP,
            include_default_style_map=True,
            ignore_empty_paragraphs=False,
        )
        messages = [message.message for message in result.messages]
        if result.value.strip():
            return WordPreview(
                content=apply_inline_styles(result.value),
                content_type=CONTENT_TYPE_HTML,
                messages=messages,
                method="mammoth",
            )
        raw = mammoth.extract_raw_text(io.BytesIO(data))
    except Exception as exc:
        # mammoth raises whatever its zip and xml layers raise
        raise UpstreamError("mammoth could not convert the document", cause=exc) from exc
    return WordPreview(
        content=raw.value,
        content_type=CONTENT_TYPE_TEXT,
        messages=[message.message for message in raw.messages],
        method="mammoth",
    )


def read_document_paragraphs(data: bytes) -> list[str]:
    """Text of every ``w:p`` in the main document part, empty ones dropped."""
    with open_package(data) as package:
        markup = package.read_bytes(DOCUMENT_PART)
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as exc:
        raise FormatError(f"[{DOCUMENT_PART}] is not well-formed", cause=exc) from exc
    paragraphs = []
    for paragraph in root.iter(f"{WORD_NS}p"):
        text = "".join(node.text or "" for node in paragraph.iter(f"{WORD_NS}t"))
        if text.strip():
            paragraphs.append(text.strip())
    return paragraphs


def _read_docx(data: bytes, path: str | None) -> WordPreview:
    try:
        return _convert_with_mammoth(data)
    except UpstreamError as exc:
        logger.warning(f"Falling back to package paragraphs for [{path}]: {exc}")
    paragraphs = read_document_paragraphs(data)
    return WordPreview(
        content=raw_text_to_html("\n".join(paragraphs)),
        messages=["Converted from document paragraphs, formatting was not preserved"],
        method="package",
    )


##############
# .doc paths #
##############


def _read_doc(data: bytes, path: str | None) -> WordPreview:
    try:
        text = read_legacy_doc_text(data)
        if text.strip():
            return WordPreview(content=text_to_html(text), method="legacy")
        logger.info(f"Legacy reader found no body text in [{path}]")
    except UpstreamError as exc:
        logger.warning(f"Legacy reader failed for [{path}]: {exc}")

    text = scrape_text(data)
    if not text.strip():
        raise ExtractionFailedError(f"No text could be recovered from [{path}]")
    return WordPreview(
        content=raw_text_to_html(text),
        messages=["Recovered raw text, formatting was not preserved"],
        method="scrape",
    )


def read_word(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[WordPreview, Any, None]:
    """
    Preview a Word document (.docx or .doc).

    Args:
        file_like: A BytesIO object containing the document data.
        path: Optional file path, only used for logging.

    Yields:
        WordPreview with HTML (or plain text) content and converter messages.

    Raises:
        ExtractionFileEncryptedError: the document is password protected.
        ExtractionFailedError: no path recovered any text.
    """
    file_like.seek(0)
    data = file_like.read()

    try:
        if is_zip_package(data):
            preview = _read_docx(data, path)
        else:
            preview = _read_doc(data, path)
    except FormatError as exc:
        raise ExtractionFailedError(
            f"Failed to preview Word document [{path}]", cause=exc
        ) from exc
    logger.debug(f"Word document [{path}] previewed via [{preview.method}]")
    yield preview
