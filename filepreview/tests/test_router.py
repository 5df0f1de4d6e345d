import io
import unittest

import pytest

import filepreview
from filepreview.exceptions import ExtractionFileFormatNotSupportedError
from filepreview.router import (
    get_extractor,
    get_file_extension,
    get_file_info,
    get_file_name,
    get_previewer_for_extension,
    is_supported_file,
)

tc = unittest.TestCase()


def test_is_supported_file() -> None:
    tc.assertTrue(is_supported_file("report.pdf"))
    tc.assertTrue(is_supported_file("/data/Book1.XLSX"))
    tc.assertTrue(is_supported_file("notes.markdown"))
    tc.assertTrue(is_supported_file("https://example.com/files/deck.pptx?sig=abc"))
    tc.assertFalse(is_supported_file("archive.zip"))
    tc.assertFalse(is_supported_file("README"))


def test_file_name_and_extension() -> None:
    tc.assertEqual("pdf", get_file_extension("C:\\docs\\a.PDF"))
    tc.assertEqual("a.PDF", get_file_name("C:\\docs\\a.PDF"))
    tc.assertEqual("Q1 report.docx", get_file_name("https://host/x/Q1%20report.docx#page=2"))
    tc.assertEqual("", get_file_extension("https://host/folder/"))


def test_get_file_info() -> None:
    info = get_file_info("https://example.com/files/Report.XLSX?sig=1")

    tc.assertEqual("xlsx", info.extension)
    tc.assertEqual("Report.XLSX", info.file_name)
    tc.assertEqual(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        info.content_type,
    )
    tc.assertTrue(info.is_supported)


def test_get_file_info_unsupported() -> None:
    info = get_file_info("https://example.com/files/setup.exe")

    tc.assertEqual("exe", info.extension)
    tc.assertIsNone(info.content_type)
    tc.assertFalse(info.is_supported)


def test_get_extractor() -> None:
    from filepreview.extractors.excel_extractor import read_excel
    from filepreview.extractors.plain_extractor import read_csv, read_text, read_xml
    from filepreview.extractors.powerpoint_extractor import read_powerpoint
    from filepreview.extractors.word_extractor import read_word

    tc.assertIs(read_excel, get_extractor("a.xls"))
    tc.assertIs(read_excel, get_extractor("a.xlsx"))
    tc.assertIs(read_word, get_extractor("a.doc"))
    tc.assertIs(read_powerpoint, get_extractor("a.ppt"))
    tc.assertIs(read_csv, get_extractor("a.csv"))
    tc.assertIs(read_text, get_extractor("a.txt"))
    tc.assertIs(read_xml, get_extractor("a.xml"))


def test_get_extractor_unsupported() -> None:
    with pytest.raises(ExtractionFileFormatNotSupportedError) as exc_info:
        get_extractor("movie.mp4")

    tc.assertEqual("movie.mp4", exc_info.value.file_path)


def test_previewer_for_extension_accepts_dot() -> None:
    from filepreview.extractors.markdown_extractor import read_markdown

    tc.assertIs(read_markdown, get_previewer_for_extension(".MD"))
    with pytest.raises(ExtractionFileFormatNotSupportedError):
        get_previewer_for_extension("rtf")


def test_extractors_yield_a_single_result() -> None:
    extractor = get_extractor("notes.txt")

    results = list(extractor(io.BytesIO(b"first line\nsecond line"), "notes.txt"))

    tc.assertEqual(1, len(results))
    tc.assertEqual("first line\nsecond line", results[0].content)


def test_public_api() -> None:
    for name in filepreview.__all__:
        tc.assertTrue(hasattr(filepreview, name), name)
