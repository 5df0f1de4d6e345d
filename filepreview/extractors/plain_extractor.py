"""
Text-based previewers: plain text, CSV and XML.

Encoding Handling
-----------------
Plain text and XML are decoded with charset_normalizer's best guess,
falling back to UTF-8 with replacement characters.

CSV files exported from spreadsheet tools in East Asian locales are often
not UTF-8, so a fixed list of encodings is tried first (utf-8, gbk, gb2312,
big5, utf-16-le); the first one that decodes cleanly wins. charset_normalizer
is only consulted when none of them does.

Known Limitations
-----------------
- XML is converted to a JSON tree without namespaces being resolved;
  element names keep ElementTree's ``{namespace}local`` form.
- Mixed content (text between child elements) is reduced to the element's
  leading text.
"""

import csv
import io
import json
import logging
import xml.etree.ElementTree as ET
from typing import Any, Generator

from charset_normalizer import from_bytes

from filepreview.exceptions import ExtractionFailedError
from filepreview.extractors.data_types import CsvPreview, TextPreview, XmlPreview

logger = logging.getLogger(__name__)

CSV_ENCODINGS = ("utf-8", "gbk", "gb2312", "big5", "utf-16-le")
ATTRIBUTES_KEY = "@attributes"
TEXT_KEY = "#text"


def decode_text(content: bytes) -> tuple[str, str]:
    """
    Detect encoding and decode bytes to string.

    Returns:
        Tuple of (decoded_text, detected_encoding). If detection fails the
        encoding is "utf-8" and undecodable bytes are replaced.
    """
    if not content:
        return "", "utf-8"

    best_match = from_bytes(content).best()
    if best_match is not None:
        logger.debug("Detected encoding: %s", best_match.encoding)
        return str(best_match), best_match.encoding

    logger.debug("Encoding detection failed, falling back to UTF-8")
    return content.decode("utf-8", errors="replace"), "utf-8"


def decode_csv(content: bytes) -> tuple[str, str]:
    """Decode with the first of ``CSV_ENCODINGS`` that fits, else detect."""
    for encoding in CSV_ENCODINGS:
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError:
            continue
        if "\ufffd" not in text:
            return text, encoding
    return decode_text(content)


########
# Text #
########


def read_text(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[TextPreview, Any, None]:
    """Plain text with automatic encoding detection."""
    logger.debug(f"Reading plain text file [{path}]")
    file_like.seek(0)
    text, encoding = decode_text(file_like.read())
    yield TextPreview(content=text, encoding=encoding)


#######
# CSV #
#######


def parse_csv(text: str) -> list[list[str]]:
    """
    Quote-aware rows with trimmed cells; blank rows are dropped and every
    row is padded to the widest one.
    """
    text = text.lstrip("\ufeff")
    rows = [
        [cell.strip() for cell in row]
        for row in csv.reader(io.StringIO(text, newline=""))
        if any(cell.strip() for cell in row)
    ]
    width = max((len(row) for row in rows), default=0)
    return [row + [""] * (width - len(row)) for row in rows]


def read_csv(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[CsvPreview, Any, None]:
    """
    Parse a CSV file into a rectangular grid of strings.

    Yields:
        CsvPreview with the rows, row and column counts and the encoding used.
    """
    file_like.seek(0)
    text, encoding = decode_csv(file_like.read())
    try:
        data = parse_csv(text)
    except csv.Error as exc:
        raise ExtractionFailedError(f"Failed to parse CSV [{path}]", cause=exc) from exc
    logger.debug(f"CSV [{path}] has {len(data)} row(s) in {encoding}")
    yield CsvPreview(
        data=data,
        max_rows=len(data),
        max_cols=len(data[0]) if data else 0,
        encoding=encoding,
    )


#######
# XML #
#######


def element_to_dict(element: ET.Element) -> Any:
    """
    JSON-compatible value of an element: its text when it is a bare leaf,
    else a dict of attributes, children (lists when repeated) and text.
    """
    text = (element.text or "").strip()
    if not element.attrib and len(element) == 0:
        return text

    node: dict[str, Any] = {}
    if element.attrib:
        node[ATTRIBUTES_KEY] = dict(element.attrib)
    for child in element:
        value = element_to_dict(child)
        if child.tag not in node:
            node[child.tag] = value
        elif isinstance(node[child.tag], list):
            node[child.tag].append(value)
        else:
            node[child.tag] = [node[child.tag], value]
    if text:
        node[TEXT_KEY] = text
    return node


def xml_to_tree(text: str) -> dict:
    root = ET.fromstring(text.lstrip("\ufeff"))
    return {root.tag: element_to_dict(root)}


def read_xml(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[XmlPreview, Any, None]:
    """
    Convert an XML document to a JSON tree.

    Yields:
        XmlPreview whose content is the tree as indented JSON.
    """
    file_like.seek(0)
    text, _ = decode_text(file_like.read())
    try:
        tree = xml_to_tree(text)
    except ET.ParseError as exc:
        raise ExtractionFailedError(f"Failed to parse XML [{path}]", cause=exc) from exc
    yield XmlPreview(
        content=json.dumps(tree, ensure_ascii=False, indent=2),
        raw_content=text,
    )
