"""
Byte fetcher.

Loads the bytes of a file to preview from an ``http(s)://`` URL, a
``file://`` URL or a local path. Network access goes through
``urllib.request``; the request function can be swapped out, which is how
the tests run without a network.
"""

import logging
import urllib.request
from pathlib import Path
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import unquote, urlparse

from filepreview.exceptions import FetchError
from filepreview.settings import PreviewSettings

logger = logging.getLogger(__name__)

RequestFunc = Callable[..., Any]

USER_AGENT = "filepreview/1.0"
READ_CHUNK_SIZE = 64 * 1024


def _read_limited(response: Any, location: str, max_bytes: int) -> bytes:
    length = None
    headers = getattr(response, "headers", None)
    if headers is not None and headers.get("Content-Length"):
        try:
            length = int(headers.get("Content-Length"))
        except ValueError:
            length = None
    if length is not None and length > max_bytes:
        raise FetchError(
            location, f"File is too large: {length} bytes (limit {max_bytes})"
        )

    chunks = []
    total = 0
    while True:
        chunk = response.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise FetchError(location, f"File exceeds the size limit of {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def fetch_url(
    url: str,
    settings: PreviewSettings,
    request_func: RequestFunc = urllib.request.urlopen,
) -> bytes:
    request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        response = request_func(request, timeout=settings.fetch_timeout_seconds)
    except HTTPError as exc:
        raise FetchError(url, f"HTTP {exc.code} while fetching {url}", cause=exc) from exc
    except URLError as exc:
        raise FetchError(
            url, f"Network error while fetching {url}: {exc.reason}", cause=exc
        ) from exc
    except TimeoutError as exc:
        raise FetchError(url, f"Timed out fetching {url}", cause=exc) from exc

    try:
        data = _read_limited(response, url, settings.max_file_size_bytes)
    except (OSError, TimeoutError) as exc:
        raise FetchError(url, f"Failed to read response from {url}", cause=exc) from exc
    finally:
        close = getattr(response, "close", None)
        if close is not None:
            close()
    logger.debug(f"Fetched {len(data)} bytes from [{url}]")
    return data


def fetch_path(path: Path, settings: PreviewSettings) -> bytes:
    try:
        size = path.stat().st_size
        if size > settings.max_file_size_bytes:
            raise FetchError(
                str(path),
                f"File is too large: {size} bytes (limit {settings.max_file_size_bytes})",
            )
        data = path.read_bytes()
    except OSError as exc:
        raise FetchError(str(path), cause=exc) from exc
    logger.debug(f"Read {len(data)} bytes from [{path}]")
    return data


def fetch_bytes(
    location: str | Path,
    settings: PreviewSettings | None = None,
    request_func: RequestFunc = urllib.request.urlopen,
) -> bytes:
    """
    Bytes of the file at ``location``.

    Raises:
        FetchError: the file is missing, unreachable or larger than
            ``settings.max_file_size_bytes``.
    """
    settings = settings or PreviewSettings()
    if isinstance(location, Path):
        return fetch_path(location, settings)

    parsed = urlparse(location)
    if parsed.scheme in ("http", "https"):
        return fetch_url(location, settings, request_func)
    if parsed.scheme == "file":
        return fetch_path(Path(unquote(parsed.path)), settings)
    return fetch_path(Path(location), settings)
