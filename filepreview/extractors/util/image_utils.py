"""
Image Signature Classifier
==========================

Recognizes image formats from their leading bytes, independent of file
extension or declared content type. Used by the media extractor as the
authoritative gate: an entry named ``image1.png`` that does not start with
the PNG signature is not an image.

Signatures
----------
    PNG   89 50 4E 47 0D 0A 1A 0A
    JPEG  FF D8 FF
    GIF   47 49 46 38 ("GIF8"), optionally followed by "7a" or "9a"
    BMP   42 4D ("BM")
    WebP  "RIFF" at 0..3 and "WEBP" at 8..11
    TIFF  49 49 2A 00 (little endian) or 4D 4D 00 2A (big endian)
"""

import struct
from enum import Enum
from typing import Optional


class ImageFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"
    BMP = "bmp"
    WEBP = "webp"
    TIFF = "tiff"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"


# =============================================================================
# Signatures
# =============================================================================
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
JPEG_SIGNATURE = b"\xff\xd8\xff"
GIF_SIGNATURE = b"GIF8"
GIF_STRICT_SIGNATURES = (b"GIF87a", b"GIF89a")
BMP_SIGNATURE = b"BM"
RIFF_SIGNATURE = b"RIFF"
WEBP_SUBTYPE = b"WEBP"
TIFF_LE_SIGNATURE = b"II\x2a\x00"
TIFF_BE_SIGNATURE = b"MM\x00\x2a"

# Below this many bytes nothing is considered a valid image
MIN_VALID_IMAGE_BYTES = 8

_MIME_ALIASES = {
    "image/png": ImageFormat.PNG,
    "image/jpeg": ImageFormat.JPEG,
    "image/jpg": ImageFormat.JPEG,
    "image/pjpeg": ImageFormat.JPEG,
    "image/gif": ImageFormat.GIF,
    "image/bmp": ImageFormat.BMP,
    "image/x-ms-bmp": ImageFormat.BMP,
    "image/webp": ImageFormat.WEBP,
    "image/tiff": ImageFormat.TIFF,
}

_JPEG_FRAME_MARKERS = frozenset(
    (0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF)
)


def _matches(data: bytes, image_format: ImageFormat, strict_gif: bool = False) -> bool:
    if image_format is ImageFormat.PNG:
        return data[:8] == PNG_SIGNATURE
    if image_format is ImageFormat.WEBP:
        return data[:4] == RIFF_SIGNATURE and data[8:12] == WEBP_SUBTYPE
    if image_format is ImageFormat.GIF:
        if strict_gif:
            return data[:6] in GIF_STRICT_SIGNATURES
        return data[:4] == GIF_SIGNATURE
    if image_format is ImageFormat.TIFF:
        return data[:4] in (TIFF_LE_SIGNATURE, TIFF_BE_SIGNATURE)
    if image_format is ImageFormat.JPEG:
        return data[:3] == JPEG_SIGNATURE
    if image_format is ImageFormat.BMP:
        return data[:2] == BMP_SIGNATURE
    return False


# Longest signature first so a more specific match always wins
_CLASSIFY_ORDER = (
    ImageFormat.PNG,
    ImageFormat.WEBP,
    ImageFormat.GIF,
    ImageFormat.TIFF,
    ImageFormat.JPEG,
    ImageFormat.BMP,
)


def classify(header: bytes) -> Optional[ImageFormat]:
    """
    Return the image format announced by the leading bytes, or None.

    Only the prefix is inspected, so passing the first 16 bytes of a file is
    as good as passing all of it.
    """
    for image_format in _CLASSIFY_ORDER:
        if _matches(header, image_format):
            return image_format
    return None


def coerce_format(claimed) -> Optional[ImageFormat]:
    """Map an ImageFormat, a MIME type or an extension to an ImageFormat."""
    if isinstance(claimed, ImageFormat):
        return claimed
    if not claimed:
        return None
    value = str(claimed).strip().lower()
    if value in _MIME_ALIASES:
        return _MIME_ALIASES[value]
    value = value.lstrip(".")
    if value in ("jpg", "jpe"):
        return ImageFormat.JPEG
    if value == "tif":
        return ImageFormat.TIFF
    try:
        return ImageFormat(value)
    except ValueError:
        return None


def validate(data: bytes, claimed, *, strict_gif: bool = False) -> bool:
    """
    Check that ``data`` really is an image of the ``claimed`` format.

    ``claimed`` may be an ImageFormat, a MIME type ("image/jpeg") or an
    extension ("jpg"). A claim that names no known format accepts any
    recognized image. Fewer than 8 bytes never validate.
    """
    if data is None or len(data) < MIN_VALID_IMAGE_BYTES:
        return False
    image_format = coerce_format(claimed)
    if image_format is None:
        return classify(data) is not None
    return _matches(data, image_format, strict_gif=strict_gif)


def get_image_dimensions(data: bytes) -> tuple[int, int] | None:
    """Best-effort pixel size of PNG, GIF, BMP and JPEG payloads."""
    image_format = classify(data)
    try:
        if image_format is ImageFormat.PNG and len(data) >= 24:
            return struct.unpack(">II", data[16:24])
        if image_format is ImageFormat.GIF and len(data) >= 10:
            return struct.unpack("<HH", data[6:10])
        if image_format is ImageFormat.BMP and len(data) >= 26:
            width, height = struct.unpack("<ii", data[18:26])
            return width, abs(height)
        if image_format is ImageFormat.JPEG:
            return _get_jpeg_dimensions(data)
    except struct.error:
        return None
    return None


def _get_jpeg_dimensions(data: bytes) -> tuple[int, int] | None:
    # Walk the marker segments until a start-of-frame marker shows up
    pos = 2
    while pos + 9 <= len(data):
        if data[pos] != 0xFF:
            return None
        marker = data[pos + 1]
        if marker in (0xD8, 0x01) or 0xD0 <= marker <= 0xD7:
            pos += 2
            continue
        length = struct.unpack(">H", data[pos + 2 : pos + 4])[0]
        if marker in _JPEG_FRAME_MARKERS:
            height, width = struct.unpack(">HH", data[pos + 5 : pos + 9])
            return width, height
        pos += 2 + length
    return None
