"""
Markdown previewer, rendered with Python-Markdown.
"""

import io
import logging
from typing import Any, Generator

import markdown

from filepreview.extractors.data_types import MarkdownPreview
from filepreview.extractors.plain_extractor import decode_text

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["tables", "fenced_code"]


def render_markdown(text: str) -> str:
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def read_markdown(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[MarkdownPreview, Any, None]:
    """
    Render a Markdown file to HTML.

    Args:
        file_like: A BytesIO object containing the Markdown source.
        path: Optional file path, only used for logging.

    Yields:
        MarkdownPreview with the HTML and the source text.
    """
    logger.debug(f"Rendering markdown [{path}]")
    file_like.seek(0)
    text, _ = decode_text(file_like.read())
    yield MarkdownPreview(content=render_markdown(text), raw_content=text)
