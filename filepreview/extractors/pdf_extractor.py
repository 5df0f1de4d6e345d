import io
import logging
import time
from typing import Any, Generator

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from filepreview.cache import BlobStore, get_default_cache
from filepreview.exceptions import UpstreamError
from filepreview.extractors.data_types import PdfPreview
from filepreview.settings import PreviewSettings

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


def _inspect(data: bytes) -> tuple[int, bool]:
    """Page count and whether any page carries extractable text."""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = reader.pages
        has_text = any((page.extract_text() or "").strip() for page in pages)
        return len(pages), has_text
    except (PyPdfError, ValueError, KeyError, TypeError, OSError) as exc:
        raise UpstreamError("PDF could not be parsed", cause=exc) from exc


def read_pdf(
    file_like: io.BytesIO,
    path: str | None = None,
    *,
    cache: BlobStore | None = None,
    settings: PreviewSettings | None = None,
) -> Generator[PdfPreview, Any, None]:
    """
    Preview a PDF document.

    The document itself is not rendered. Its bytes are parked in the blob
    cache and the preview points at the stream URL under which a client can
    fetch them.

    Args:
        file_like: a loaded binary of the pdf file as file-like object
        path: Optional file path, only used for logging.
        cache: Blob cache receiving the document, the process-wide one by default.
        settings: Provides the stream URL prefix.

    Yields:
        PdfPreview with file id, stream URL, size in MB, page count and text flag.

    Limitations:
    A PDF the parser cannot read is still cached and served; it is reported
    with a page count of 0.
    """
    settings = settings or PreviewSettings()
    if cache is None:
        cache = get_default_cache(settings.cache_ttl_seconds)

    file_like.seek(0)
    data = file_like.read()

    page_count, has_text = 0, False
    try:
        page_count, has_text = _inspect(data)
    except UpstreamError as exc:
        logger.warning(f"Serving unparsed PDF [{path}]: {exc}")

    display_name = f"document_{time.time_ns() // 1_000_000}.pdf"
    file_id = cache.put(data, format="pdf", display_name=display_name)
    logger.debug(f"PDF [{path}] cached as [{file_id}] with {page_count} page(s)")

    yield PdfPreview(
        file_id=file_id,
        file_url=settings.stream_url_prefix + file_id,
        file_name=display_name,
        file_size=round(len(data) / BYTES_PER_MB, 1),
        page_count=page_count,
        has_text=has_text,
    )
