import logging
import posixpath
from typing import Any, Callable, Generator
from urllib.parse import unquote, urlparse

from filepreview.exceptions import ExtractionFileFormatNotSupportedError
from filepreview.extractors.data_types import FileInfo, PreviewResult
from filepreview.mime_types import PREVIEW_KINDS, get_content_type

logger = logging.getLogger(__name__)

Previewer = Callable[..., Generator[PreviewResult, Any, None]]


def _get_previewer(kind: str) -> Previewer:
    """Return the previewer function for a preview kind (lazy import)."""
    if kind == "pdf":
        from filepreview.extractors.pdf_extractor import read_pdf

        return read_pdf
    elif kind == "excel":
        from filepreview.extractors.excel_extractor import read_excel

        return read_excel
    elif kind == "word":
        from filepreview.extractors.word_extractor import read_word

        return read_word
    elif kind == "powerpoint":
        from filepreview.extractors.powerpoint_extractor import read_powerpoint

        return read_powerpoint
    elif kind == "markdown":
        from filepreview.extractors.markdown_extractor import read_markdown

        return read_markdown
    elif kind == "csv":
        from filepreview.extractors.plain_extractor import read_csv

        return read_csv
    elif kind == "xml":
        from filepreview.extractors.plain_extractor import read_xml

        return read_xml
    elif kind == "text":
        from filepreview.extractors.plain_extractor import read_text

        return read_text
    else:
        raise ExtractionFileFormatNotSupportedError(kind)


def _path_component(url_or_path: str) -> str:
    parsed = urlparse(url_or_path)
    # "C:\..." parses as scheme "c"; only real URLs contribute their path
    if parsed.scheme in ("http", "https", "file"):
        return unquote(parsed.path)
    return url_or_path


def get_file_name(url_or_path: str) -> str:
    return posixpath.basename(_path_component(url_or_path).replace("\\", "/"))


def get_file_extension(url_or_path: str) -> str:
    """Lower-cased extension of the path component, without the dot."""
    return posixpath.splitext(get_file_name(url_or_path))[1].lower().lstrip(".")


def get_file_info(url: str) -> FileInfo:
    extension = get_file_extension(url)
    content_type = get_content_type(extension)
    return FileInfo(
        url=url,
        extension=extension,
        content_type=content_type,
        is_supported=content_type is not None,
        file_name=get_file_name(url),
    )


def is_supported_file(path: str) -> bool:
    """Checks if the path is a supported file"""
    return get_file_extension(path) in PREVIEW_KINDS


def get_previewer_for_extension(extension: str) -> Previewer:
    extension = extension.lower().lstrip(".")
    kind = PREVIEW_KINDS.get(extension)
    if kind is None:
        logger.debug(f"Extension [{extension}] is not supported")
        raise ExtractionFileFormatNotSupportedError(extension)
    logger.debug(f"Detected preview kind: {kind} for extension: {extension}")
    return _get_previewer(kind)


def get_extractor(path: str) -> Previewer:
    """Analyses the path of a file and returns a suited previewer.
       The file MUST not exist (yet). The path, URL or file name alone
       suffices to return a previewer.

    :returns a previewer function. All previewers take a file-like object and
             an optional path and yield exactly one result.
    :raises ExtractionFileFormatNotSupportedError: no previewer covers the file
    """
    extension = get_file_extension(path)
    if extension not in PREVIEW_KINDS:
        logger.debug(f"File [{path}] with extension [{extension}] is not supported")
        raise ExtractionFileFormatNotSupportedError(path)
    return get_previewer_for_extension(extension)
