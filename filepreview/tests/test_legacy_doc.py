import unittest

import pytest

from filepreview.exceptions import UpstreamError
from filepreview.extractors.util.legacy_doc import (
    clean_text,
    read_legacy_doc_text,
    scrape_text,
)

tc = unittest.TestCase()


def test_clean_text_maps_control_characters() -> None:
    tc.assertEqual("Hello  World", clean_text("Hello\x07World\x07\r"))
    tc.assertEqual("line one\nline two", clean_text("line one\x0bline two"))
    tc.assertEqual("page one\n\npage two", clean_text("page one\x0cpage two"))
    tc.assertEqual("a b", clean_text("a\xa0b"))


def test_clean_text_flattens_fields() -> None:
    text = 'See \x13 HYPERLINK "https://example.com" \x14Link\x15 here'

    tc.assertEqual("See Link here", clean_text(text))


def test_clean_text_collapses_blank_runs() -> None:
    tc.assertEqual("a\n\nb", clean_text("a\r\r\r\r\rb"))
    tc.assertEqual("a  b", clean_text("a      b"))


def test_scrape_text_finds_utf16_runs() -> None:
    data = b"\x01\x01" + "Legacy body text".encode("utf-16-le") + b"\x00\x00\x03\x00"

    tc.assertEqual("Legacy body text", scrape_text(data))


def test_scrape_text_finds_cjk() -> None:
    data = b"\x00\x00" + "报检单号".encode("utf-16-le")

    tc.assertEqual("报检单号", scrape_text(data))


def test_scrape_text_of_noise_is_empty() -> None:
    tc.assertEqual("", scrape_text(b"\x00" * 64))


def test_non_ole_input_raises_upstream_error() -> None:
    with pytest.raises(UpstreamError):
        read_legacy_doc_text(b"this is not an OLE compound file" * 20)
