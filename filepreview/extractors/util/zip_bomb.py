from __future__ import annotations

import zipfile
from dataclasses import dataclass

from filepreview.exceptions import ExtractionZipBombError


@dataclass(frozen=True)
class ZipBombLimits:
    """
    Heuristics for rejecting probable ZIP bombs before any entry is inflated.

    Office packages compress well but never by several hundred to one, so
    the ratios below leave room for genuine documents.
    """

    max_entries: int = 10_000
    max_total_uncompressed_bytes: int = 1024 * 1024 * 1024  # 1 GiB
    max_single_uncompressed_bytes: int = 512 * 1024 * 1024  # 512 MiB
    max_total_compression_ratio: float = 200.0
    max_entry_compression_ratio: float = 500.0


DEFAULT_ZIP_BOMB_LIMITS = ZipBombLimits()


def _suffix(source: str | None) -> str:
    return f" [{source}]" if source else ""


def _ratio(uncompressed: int, compressed: int) -> float:
    return uncompressed / compressed if compressed > 0 else float("inf")


def validate_zipfile(
    zf: zipfile.ZipFile,
    *,
    limits: ZipBombLimits = DEFAULT_ZIP_BOMB_LIMITS,
    source: str | None = None,
) -> None:
    """
    Check the central directory of an opened package against ``limits``.

    Only the declared sizes are inspected; nothing is decompressed.
    """
    infos = [info for info in zf.infolist() if not info.is_dir()]
    if len(infos) > limits.max_entries:
        raise ExtractionZipBombError(
            f"Package has too many entries ({len(infos)} > {limits.max_entries})"
            + _suffix(source)
        )

    total_uncompressed = 0
    total_compressed = 0
    for info in infos:
        if info.file_size > limits.max_single_uncompressed_bytes:
            raise ExtractionZipBombError(
                f"Package entry [{info.filename}] too large "
                f"({info.file_size} bytes > {limits.max_single_uncompressed_bytes})"
                + _suffix(source)
            )
        if info.file_size > 0:
            ratio = _ratio(info.file_size, info.compress_size)
            if ratio > limits.max_entry_compression_ratio:
                raise ExtractionZipBombError(
                    f"Package entry [{info.filename}] compression ratio too high "
                    f"({ratio:.1f} > {limits.max_entry_compression_ratio})"
                    + _suffix(source)
                )
        total_uncompressed += info.file_size
        total_compressed += info.compress_size

    if total_uncompressed > limits.max_total_uncompressed_bytes:
        raise ExtractionZipBombError(
            f"Package uncompressed size too large "
            f"({total_uncompressed} bytes > {limits.max_total_uncompressed_bytes})"
            + _suffix(source)
        )
    if total_uncompressed > 0:
        total_ratio = _ratio(total_uncompressed, total_compressed)
        if total_ratio > limits.max_total_compression_ratio:
            raise ExtractionZipBombError(
                f"Package compression ratio too high "
                f"({total_ratio:.1f} > {limits.max_total_compression_ratio})"
                + _suffix(source)
            )
