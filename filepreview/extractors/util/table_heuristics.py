"""
Table Heuristic Reconstructor
=============================

Guesses whether unstructured text (typically the plain text recovered from
a legacy ``.doc`` file) is a table, and if so rebuilds it as a
``TableStructure``. Everything here is a pure function of the input text.

Detection
---------
Single line
    At least two numeric markers (digits followed by ``.`` or whitespace),
    at least one table keyword (序号, 品名, 规格, 数量, 重量, 日期, 报检单号)
    and at least two non-empty items between the markers.
Several lines
    Columns are separated by runs of two or more whitespace characters. The
    text is a table when the modal column count is at least 3, at least 60%
    of the lines have that count, and there are at least 3 lines.

Header and rows
---------------
The first line is taken as a document title unless it already looks like a
header (no digits, 3 to 8 segments, every segment at most 10 characters).
Otherwise the header is searched in the next three lines, falling back to
the first line after the title. Every other line after the title becomes a
row: a leading numeric marker is removed and the segments are zipped
against the headers, missing cells being "".

Single-line tables are re-segmented with the pattern
``digits whitespace text-until-next-digits``; the digits fill the first
column and the text is split on runs of spaces.

Known Limitations
-----------------
- There is no grammar behind this. Prose with numbered references can be
  taken for a table; irregular spacing can hide one.
- Removing the leading number shifts the remaining cells one column to the
  left relative to the header. This mirrors what the heuristic has always
  done and is kept so previews stay stable.
"""

import logging
import math
import re
from typing import Optional

from filepreview.extractors.data_types import Alignment, TableStructure

logger = logging.getLogger(__name__)

TABLE_KEYWORDS = ("序号", "品名", "规格", "数量", "重量", "日期", "报检单号")
CENTER_KEYWORDS = ("序号", "编号", "数量", "重量", "金额", "价格", "日期", "时间")
LEFT_KEYWORDS = ("名称", "品名", "内容", "规格", "备注", "说明")

SEQUENCE_HEADER = "序号"
NAME_HEADER = "名称"
REMARKS_HEADER = "备注"
INSPECTION_HEADERS = (
    "序号",
    "品名",
    "原产地/地区",
    "规格",
    "报检数/重量",
    "生产日期",
    "保质期",
)

MIN_TABLE_COLUMNS = 3
MAX_HEADER_COLUMNS = 8
MAX_HEADER_LABEL_LENGTH = 10
MIN_TABLE_LINES = 3
CONSISTENT_LINE_RATIO = 0.6
HEADER_SCAN_LINES = 3
DEFAULT_COLUMN_COUNT = 4

_COLUMN_GAP_RE = re.compile(r"\s{2,}")
_NUMERIC_MARKER_RE = re.compile(r"\d+[.\s]+")
_LEADING_MARKER_RE = re.compile(r"^\d+[.\s]+")
_DIGIT_RE = re.compile(r"\d")
_SINGLE_LINE_ROW_RE = re.compile(r"\d+\s+[^0-9]+?(?=\d+\s|$)")
_INSPECTION_HEADER_RE = re.compile(
    r"序号\s+品名\s+原产地/地区\s+规格\s+报检数/重量\s+生产日期\s+保质期"
)
_SINGLE_LINE_HEADER_RES = tuple(
    re.compile(r"序号" + r"\s+(\S+)" * count) for count in (6, 5, 4)
)
_TITLE_RES = (
    re.compile(r"^(.+?)(?:报检单号|单号|编号|NO\.)", re.IGNORECASE),
    re.compile(r"^(.+?)(?:清单|列表|表格|表|报告|报表)"),
)


#############
# Splitting #
#############


def split_lines(text: str) -> list[str]:
    """Non-blank lines, stripped."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def column_count(line: str) -> int:
    return len(_COLUMN_GAP_RE.split(line.strip()))


def split_table_row(line: str) -> list[str]:
    """
    Split one row into cells: on runs of whitespace, else on tabs, else on
    single spaces while gluing words of one or two characters to the next.
    """
    parts = _COLUMN_GAP_RE.split(line)
    if len(parts) > 1:
        return [part.strip() for part in parts]
    parts = line.split("\t")
    if len(parts) > 1:
        return [part.strip() for part in parts]

    merged = []
    current = ""
    words = line.split()
    for index, word in enumerate(words):
        current = f"{current} {word}" if current else word
        if len(word) > 2 or index == len(words) - 1:
            merged.append(current.strip())
            current = ""
    return merged


def split_on_space_runs(text: str) -> list[str]:
    """Cells of a single-line row: text separated by two or more spaces."""
    return [part.strip() for part in re.split(r" {2,}", text) if part.strip()]


def most_common(values: list[int]) -> Optional[int]:
    """Modal value; on ties the value that first reached the top count wins."""
    counts: dict[int, int] = {}
    best = values[0] if values else None
    best_count = 0
    for value in values:
        counts[value] = counts.get(value, 0) + 1
        if counts[value] > best_count:
            best_count = counts[value]
            best = value
    return best


#############
# Detection #
#############


def is_single_line_table(line: str) -> bool:
    if len(_NUMERIC_MARKER_RE.findall(line)) < 2:
        return False
    if not any(keyword in line for keyword in TABLE_KEYWORDS):
        return False
    items = [item for item in _NUMERIC_MARKER_RE.split(line) if item.strip()]
    return len(items) >= 2


def is_table_data(text: str) -> bool:
    lines = split_lines(text)
    if len(lines) == 1:
        return is_single_line_table(lines[0])
    if len(lines) < MIN_TABLE_LINES:
        return False

    counts = [column_count(line) for line in lines]
    modal = most_common(counts)
    consistent = counts.count(modal) >= math.floor(len(lines) * CONSISTENT_LINE_RATIO)
    # numbered rows alone never qualify; the column count must agree as well
    return modal >= MIN_TABLE_COLUMNS and consistent


##########
# Header #
##########


def looks_like_header(line: str) -> bool:
    if _DIGIT_RE.search(line):
        return False
    parts = split_table_row(line)
    if not MIN_TABLE_COLUMNS <= len(parts) <= MAX_HEADER_COLUMNS:
        return False
    return all(len(part) <= MAX_HEADER_LABEL_LENGTH for part in parts)


def find_header_index(lines: list[str]) -> tuple[Optional[int], int]:
    """
    Return (title index or None, header index) for a multi-line table.
    """
    if looks_like_header(lines[0]):
        return None, 0
    for index in range(1, min(1 + HEADER_SCAN_LINES, len(lines))):
        if looks_like_header(lines[index]):
            return 0, index
    return 0, 1


def header_by_position(content: str, index: int, total: int) -> str:
    label = content.strip()
    if label and len(label) <= MAX_HEADER_LABEL_LENGTH:
        return label
    if index == 0:
        return SEQUENCE_HEADER
    if index == 1:
        return NAME_HEADER
    if index == total - 1:
        return REMARKS_HEADER
    return f"列{index + 1}"


def _unique_headers(labels: list[str]) -> list[str]:
    headers: list[str] = []
    for index, label in enumerate(labels):
        if label in headers:
            suffix = index + 1
            candidate = f"{label}_{suffix}"
            while candidate in headers or candidate in labels:
                suffix += 1
                candidate = f"{label}_{suffix}"
            label = candidate
        headers.append(label)
    return headers


def headers_from_line(line: str) -> list[str]:
    parts = split_table_row(line)
    return _unique_headers(
        [header_by_position(part, index, len(parts)) for index, part in enumerate(parts)]
    )


def estimate_column_count(text: str) -> int:
    match = _SINGLE_LINE_ROW_RE.search(text)
    if not match:
        return DEFAULT_COLUMN_COUNT
    data = re.sub(r"^\d+\s+", "", match.group(0))
    return len(split_on_space_runs(data)) + 1


def headers_from_single_line(text: str) -> list[str]:
    if _INSPECTION_HEADER_RE.search(text):
        return list(INSPECTION_HEADERS)
    for pattern in _SINGLE_LINE_HEADER_RES:
        match = pattern.search(text)
        if match:
            return _unique_headers([SEQUENCE_HEADER] + list(match.groups()))
    return [SEQUENCE_HEADER] + [f"列{i}" for i in range(1, estimate_column_count(text))]


########
# Rows #
########


def parse_row(line: str, headers: list[str]) -> dict[str, str]:
    parts = split_table_row(_LEADING_MARKER_RE.sub("", line))
    return {
        header: parts[index] if index < len(parts) else ""
        for index, header in enumerate(headers)
    }


def parse_single_line_rows(text: str, headers: list[str]) -> list[dict[str, str]]:
    rows = []
    for match in _SINGLE_LINE_ROW_RE.finditer(text):
        number = re.match(r"\d+", match.group(0)).group(0)
        parts = split_on_space_runs(re.sub(r"^\d+\s+", "", match.group(0)))
        row = {header: "" for header in headers}
        row[headers[0]] = number
        for index, header in enumerate(headers[1:]):
            if index < len(parts):
                row[header] = parts[index]
        rows.append(row)
    return rows


###########
# Styling #
###########


def column_alignment(header: str) -> Alignment:
    label = header.lower()
    if header.isdigit() or any(keyword in label for keyword in CENTER_KEYWORDS):
        return Alignment.CENTER
    if any(keyword in label for keyword in LEFT_KEYWORDS):
        return Alignment.LEFT
    return Alignment.CENTER


def extract_document_title(line: str) -> str:
    for pattern in _TITLE_RES:
        match = pattern.match(line)
        if match and match.group(1).strip():
            return match.group(1).strip()
    return line.strip()


#########
# Entry #
#########


def infer(text: str) -> Optional[TableStructure]:
    """
    Rebuild ``text`` as a table, or return None when it does not look like one.
    """
    if not text or not text.strip():
        return None
    if not is_table_data(text):
        return None

    lines = split_lines(text)
    if len(lines) == 1:
        headers = headers_from_single_line(lines[0])
        structure = TableStructure(
            headers=headers,
            rows=parse_single_line_rows(lines[0], headers),
            single_line=True,
        )
    else:
        title_index, header_index = find_header_index(lines)
        headers = headers_from_line(lines[header_index])
        first_row = 0 if title_index is None else title_index + 1
        rows = [
            parse_row(line, headers)
            for index, line in enumerate(lines)
            if index >= first_row and index != header_index
        ]
        structure = TableStructure(
            headers=headers,
            rows=rows,
            title=None if title_index is None else extract_document_title(lines[0]),
        )

    structure.alignments = {header: column_alignment(header) for header in structure.headers}
    logger.debug(
        f"Reconstructed table with {len(structure.headers)} columns and {len(structure.rows)} rows"
    )
    return structure
