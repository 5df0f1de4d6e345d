import io
import unittest
import zipfile

import pytest

from filepreview.exceptions import (
    CorruptEntryError,
    ExtractionZipBombError,
    FormatError,
    NotAZipError,
)
from filepreview.extractors.util.package import Package, is_zip_package, open_package
from filepreview.extractors.util.zip_bomb import ZipBombLimits

tc = unittest.TestCase()


def _make_zip_bytes(files: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def test_signature_check() -> None:
    tc.assertTrue(is_zip_package(_make_zip_bytes({"a.txt": b"a"})))
    tc.assertFalse(is_zip_package(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"))
    tc.assertFalse(is_zip_package(b"PK"))
    tc.assertFalse(is_zip_package(b""))


def test_non_zip_input_is_rejected_before_decompression() -> None:
    legacy = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 512

    with pytest.raises(NotAZipError) as exc_info:
        open_package(legacy)

    tc.assertEqual(FormatError.NOT_A_ZIP, exc_info.value.reason)


def test_corrupt_directory_raises_format_error() -> None:
    with pytest.raises(FormatError) as exc_info:
        open_package(b"PK\x03\x04" + b"\x00" * 64)

    tc.assertEqual(FormatError.CORRUPT_ENTRY, exc_info.value.reason)
    tc.assertIsNotNone(exc_info.value.__cause__)


def test_entries_keep_stored_order_and_skip_directories() -> None:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("z/last.xml", b"<z/>")
        zf.writestr("a/", b"")
        zf.writestr("a/first.xml", b"<a/>")
        zf.writestr("m.bin", b"\x00\x01")

    with open_package(buffer.getvalue()) as package:
        tc.assertEqual(["z/last.xml", "a/first.xml", "m.bin"], package.namelist())
        tc.assertEqual(2, package.get("m.bin").size)
        tc.assertEqual("first.xml", package.get("a/first.xml").name)


def test_entries_can_be_read_repeatedly() -> None:
    with open_package(_make_zip_bytes({"doc.xml": b"<doc>text</doc>"})) as package:
        entry = package.entries[0]
        tc.assertEqual(b"<doc>text</doc>", entry.read_bytes())
        tc.assertEqual(b"<doc>text</doc>", entry.read_bytes())
        tc.assertEqual("<doc>text</doc>", package.read_text("doc.xml"))


def test_missing_entry_is_a_corrupt_entry() -> None:
    with open_package(_make_zip_bytes({"doc.xml": b"<doc/>"})) as package:
        tc.assertFalse(package.exists("other.xml"))
        with pytest.raises(CorruptEntryError) as exc_info:
            package.read_bytes("other.xml")

    tc.assertEqual(FormatError.CORRUPT_ENTRY, exc_info.value.reason)


def test_zip_bomb_limits_apply_on_open() -> None:
    data = _make_zip_bytes({"a.txt": b"a", "b.txt": b"b", "c.txt": b"c"})

    with pytest.raises(ExtractionZipBombError):
        Package(data, limits=ZipBombLimits(max_entries=2), source="test")

    with Package(data, limits=ZipBombLimits(max_entries=3), source="test") as package:
        tc.assertEqual(3, len(package.entries))
