"""
Package Reader
==============

Read-only access to ZIP-structured office packages (xlsx, pptx, docx).

The first four bytes are checked against the ZIP local-file-header
signature before ``zipfile`` is involved at all: legacy binary formats that
share an extension with their modern counterpart (``.xls``, ``.ppt``,
``.doc``) are OLE compound files and must take an empty-result path instead
of surfacing a decompression error.

Entries are listed in the order they are stored in the central directory.
Entry bytes are read lazily and may be read any number of times.

Usage
-----
    >>> with open_package(data) as package:
    ...     for entry in package.entries:
    ...         print(entry.path, entry.size)
    ...     xml = package.read_text("ppt/presentation.xml")
"""

from __future__ import annotations

import io
import logging
import zipfile
import zlib
from dataclasses import dataclass, field

from filepreview.exceptions import CorruptEntryError, FormatError, NotAZipError
from filepreview.extractors.util.zip_bomb import (
    DEFAULT_ZIP_BOMB_LIMITS,
    ZipBombLimits,
    validate_zipfile,
)

logger = logging.getLogger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"


def is_zip_package(data: bytes) -> bool:
    """True when ``data`` starts with the ZIP local-file-header signature."""
    return data[:4] == ZIP_SIGNATURE


@dataclass(frozen=True)
class PackageEntry:
    path: str
    size: int
    _package: "Package" = field(repr=False, compare=False)

    def read_bytes(self) -> bytes:
        return self._package.read_bytes(self.path)


class Package:
    """An opened package. Owns its entries; close it to release the archive."""

    def __init__(
        self,
        data: bytes,
        *,
        limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
        source: str | None = None,
    ):
        if not is_zip_package(data):
            raise NotAZipError("Input is not a ZIP package")
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data), "r")
        except (zipfile.BadZipFile, zlib.error, EOFError, ValueError) as exc:
            raise FormatError(
                "Package directory is corrupt",
                reason=FormatError.CORRUPT_ENTRY,
                cause=exc,
            ) from exc
        try:
            validate_zipfile(self._zip, limits=limits, source=source)
        except FormatError:
            self._zip.close()
            raise
        self._entries = tuple(
            PackageEntry(info.filename, info.file_size, self)
            for info in self._zip.infolist()
            if not info.is_dir()
        )
        self._index = {entry.path: entry for entry in self._entries}
        logger.debug(f"Opened package with {len(self._entries)} entries")

    @property
    def entries(self) -> tuple[PackageEntry, ...]:
        return self._entries

    def namelist(self) -> list[str]:
        return [entry.path for entry in self._entries]

    def exists(self, path: str) -> bool:
        return path in self._index

    def read_bytes(self, path: str) -> bytes:
        if path not in self._index:
            raise CorruptEntryError(f"Package has no entry [{path}]")
        try:
            return self._zip.read(path)
        except (zipfile.BadZipFile, zlib.error, EOFError, OSError, RuntimeError) as exc:
            # RuntimeError is what zipfile raises for encrypted members
            raise CorruptEntryError(
                f"Failed to read package entry [{path}]", cause=exc
            ) from exc

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return self.read_bytes(path).decode(encoding, errors="replace")

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "Package":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_package(
    data: bytes,
    *,
    limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
    source: str | None = None,
) -> Package:
    """Open ``data`` as a package, raising ``FormatError`` when it is not one."""
    return Package(data, limits=limits, source=source)
