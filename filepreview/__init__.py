"""
filepreview: Browser-ready previews of office documents and text files.

Turns spreadsheets, presentations, Word documents, PDFs, Markdown, CSV, XML
and plain text into JSON-serializable preview results: grids of cell values
with their embedded images, styled HTML, or a cached stream reference for
PDF documents. Modern ZIP-based office packages are read directly; legacy
binary formats get best-effort fallbacks.
"""

import io
import urllib.request
from pathlib import Path
from typing import Any, Generator, Optional

from filepreview.cache import BlobCache, BlobStore, CacheEntry, get_default_cache
from filepreview.extractors.data_types import (
    CsvPreview,
    ExcelPreview,
    FileInfo,
    MarkdownPreview,
    PdfPreview,
    PowerPointPreview,
    PreviewResult,
    TextPreview,
    WordPreview,
    XmlPreview,
)
from filepreview.fetch import fetch_bytes
from filepreview.mime_types import PREVIEW_KINDS
from filepreview.router import (
    get_extractor,
    get_file_extension,
    get_file_info,
    get_previewer_for_extension,
    is_supported_file,
)
from filepreview.settings import PreviewSettings

__version__ = "1.0.0"


def read_pdf(
    file_like: io.BytesIO,
    path: str | None = None,
    *,
    cache: BlobStore | None = None,
    settings: PreviewSettings | None = None,
) -> Generator[PdfPreview, Any, None]:
    """Preview a PDF file."""
    from filepreview.extractors.pdf_extractor import read_pdf as _read_pdf

    return _read_pdf(file_like, path, cache=cache, settings=settings)


def read_excel(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[ExcelPreview, Any, None]:
    """Preview an XLSX or XLS file."""
    from filepreview.extractors.excel_extractor import read_excel as _read_excel

    return _read_excel(file_like, path)


def read_word(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[WordPreview, Any, None]:
    """Preview a DOCX or DOC file."""
    from filepreview.extractors.word_extractor import read_word as _read_word

    return _read_word(file_like, path)


def read_powerpoint(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[PowerPointPreview, Any, None]:
    """Preview a PPTX or PPT file."""
    from filepreview.extractors.powerpoint_extractor import (
        read_powerpoint as _read_powerpoint,
    )

    return _read_powerpoint(file_like, path)


def read_markdown(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[MarkdownPreview, Any, None]:
    """Preview a Markdown file."""
    from filepreview.extractors.markdown_extractor import (
        read_markdown as _read_markdown,
    )

    return _read_markdown(file_like, path)


def read_text(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[TextPreview, Any, None]:
    """Preview a plain text file."""
    from filepreview.extractors.plain_extractor import read_text as _read_text

    return _read_text(file_like, path)


def read_csv(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[CsvPreview, Any, None]:
    """Preview a CSV file."""
    from filepreview.extractors.plain_extractor import read_csv as _read_csv

    return _read_csv(file_like, path)


def read_xml(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[XmlPreview, Any, None]:
    """Preview an XML file."""
    from filepreview.extractors.plain_extractor import read_xml as _read_xml

    return _read_xml(file_like, path)


def preview_bytes(
    data: bytes,
    extension: str,
    *,
    path: str | None = None,
    cache: BlobStore | None = None,
    settings: PreviewSettings | None = None,
) -> PreviewResult:
    """
    Build the preview of a file already held in memory.

    Args:
        data: The file content.
        extension: File extension deciding the previewer, with or without dot.
        path: Optional original path or URL, only used for logging.
        cache: Blob cache for PDF documents, the process-wide one by default.
        settings: Runtime settings, defaults when omitted.

    Raises:
        ExtractionFileFormatNotSupportedError: no previewer covers the extension.
        ExtractionError: the file could not be previewed.
    """
    settings = settings or PreviewSettings()
    previewer = get_previewer_for_extension(extension)
    kwargs = {}
    if PREVIEW_KINDS.get(extension.lower().lstrip(".")) == "pdf":
        kwargs = {
            "cache": cache
            if cache is not None
            else get_default_cache(settings.cache_ttl_seconds),
            "settings": settings,
        }
    return next(previewer(io.BytesIO(data), path, **kwargs))


def preview_file(
    location: str | Path,
    *,
    cache: BlobStore | None = None,
    settings: PreviewSettings | None = None,
    request_func=urllib.request.urlopen,
) -> PreviewResult:
    """
    Fetch the file at ``location`` (URL or local path) and preview it.

    The extension is checked before anything is fetched, so unsupported
    files never cause a download.

    Example:
        >>> import filepreview
        >>> result = filepreview.preview_file("report.xlsx")
        >>> result.sheet_names
        ['Sheet1']
    """
    settings = settings or PreviewSettings()
    extension = get_file_extension(str(location))
    get_previewer_for_extension(extension)
    data = fetch_bytes(location, settings, request_func=request_func)
    return preview_bytes(
        data, extension, path=str(location), cache=cache, settings=settings
    )


def get_cached_file(
    file_id: str, cache: BlobStore | None = None
) -> Optional[CacheEntry]:
    """The cached document behind a PDF preview's ``file_id``, or None when expired."""
    if cache is None:
        cache = get_default_cache()
    return cache.get(file_id)


__all__ = [
    # Version
    "__version__",
    # Main functions
    "preview_file",
    "preview_bytes",
    "get_cached_file",
    "get_file_info",
    "get_file_extension",
    "is_supported_file",
    "get_extractor",
    # Format-specific previewers
    "read_pdf",
    "read_excel",
    "read_word",
    "read_powerpoint",
    "read_markdown",
    "read_text",
    "read_csv",
    "read_xml",
    # Supporting types
    "BlobCache",
    "FileInfo",
    "PreviewSettings",
]
