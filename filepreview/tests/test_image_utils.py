import struct
import unittest

from filepreview.extractors.util.image_utils import (
    ImageFormat,
    classify,
    coerce_format,
    get_image_dimensions,
    validate,
)

tc = unittest.TestCase()

PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR"
PNG_BYTES = PNG_HEADER + struct.pack(">II", 2, 3) + b"\x08\x02\x00\x00\x00"
JPEG_BYTES = (
    b"\xff\xd8"
    + b"\xff\xe0\x00\x10"
    + b"JFIF\x00"
    + b"\x00" * 9
    + b"\xff\xc0\x00\x11\x08"
    + struct.pack(">HH", 40, 30)
    + b"\x03"
)


def test_classify_signatures() -> None:
    tc.assertEqual(ImageFormat.PNG, classify(PNG_HEADER))
    tc.assertEqual(ImageFormat.JPEG, classify(b"\xff\xd8\xff\xe0" + b"\x00" * 12))
    tc.assertEqual(ImageFormat.GIF, classify(b"GIF89a" + b"\x00" * 10))
    tc.assertEqual(ImageFormat.BMP, classify(b"BM" + b"\x00" * 14))
    tc.assertEqual(ImageFormat.WEBP, classify(b"RIFF\x24\x00\x00\x00WEBPVP8 "))
    tc.assertEqual(ImageFormat.TIFF, classify(b"II\x2a\x00" + b"\x00" * 12))
    tc.assertEqual(ImageFormat.TIFF, classify(b"MM\x00\x2a" + b"\x00" * 12))
    tc.assertIsNone(classify(b"<?xml version='1.0'?>"))


def test_riff_without_webp_subtype_is_not_an_image() -> None:
    tc.assertIsNone(classify(b"RIFF\x24\x00\x00\x00WAVEfmt "))


def test_validate_png_header() -> None:
    tc.assertTrue(validate(PNG_HEADER, ImageFormat.PNG))
    tc.assertTrue(validate(PNG_HEADER, "image/png"))
    tc.assertTrue(validate(PNG_HEADER, "png"))

    broken = bytearray(PNG_HEADER)
    broken[4] = 0x00
    tc.assertFalse(validate(bytes(broken), ImageFormat.PNG))


def test_validate_rejects_short_input() -> None:
    tc.assertFalse(validate(b"\x89PNG\r\n\x1a", ImageFormat.PNG))
    tc.assertFalse(validate(b"", None))
    tc.assertFalse(validate(None, ImageFormat.PNG))


def test_validate_checks_the_claimed_format() -> None:
    tc.assertFalse(validate(PNG_HEADER, "image/jpeg"))
    tc.assertTrue(validate(JPEG_BYTES, "jpg"))
    # no usable claim: any recognized image passes
    tc.assertTrue(validate(JPEG_BYTES, "application/octet-stream"))
    tc.assertFalse(validate(b"plain text here", None))


def test_strict_gif_needs_version() -> None:
    tc.assertTrue(validate(b"GIF8xx" + b"\x00" * 10, ImageFormat.GIF))
    tc.assertFalse(validate(b"GIF8xx" + b"\x00" * 10, ImageFormat.GIF, strict_gif=True))
    tc.assertTrue(validate(b"GIF87a" + b"\x00" * 10, ImageFormat.GIF, strict_gif=True))


def test_coerce_format() -> None:
    tc.assertEqual(ImageFormat.JPEG, coerce_format("jpg"))
    tc.assertEqual(ImageFormat.JPEG, coerce_format(".JPEG"))
    tc.assertEqual(ImageFormat.JPEG, coerce_format("image/pjpeg"))
    tc.assertEqual(ImageFormat.TIFF, coerce_format("tif"))
    tc.assertEqual(ImageFormat.BMP, coerce_format("image/x-ms-bmp"))
    tc.assertEqual(ImageFormat.PNG, coerce_format(ImageFormat.PNG))
    tc.assertIsNone(coerce_format("svg"))
    tc.assertIsNone(coerce_format(None))


def test_mime_type() -> None:
    tc.assertEqual("image/jpeg", ImageFormat.JPEG.mime_type)


def test_dimensions() -> None:
    tc.assertEqual((2, 3), get_image_dimensions(PNG_BYTES))
    tc.assertEqual((30, 40), get_image_dimensions(JPEG_BYTES))
    tc.assertEqual((5, 7), get_image_dimensions(b"GIF89a" + struct.pack("<HH", 5, 7)))
    tc.assertIsNone(get_image_dimensions(PNG_HEADER))
    tc.assertIsNone(get_image_dimensions(b"no image at all"))
