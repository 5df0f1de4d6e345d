import json
from base64 import b64encode
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from filepreview.extractors.util.image_utils import ImageFormat

# Marks a field holding raw or encoded binary payload; omitted from
# serialized output unless binary output is requested
BINARY = {"binary": True}

EMU_PER_POINT = 12700


class PreviewType(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    WORD = "word"
    POWERPOINT = "powerpoint"
    MARKDOWN = "markdown"
    TEXT = "text"
    CSV = "csv"
    XML = "xml"


CONTENT_TYPE_PDF = "application/pdf"
CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_HTML = "text/html"
CONTENT_TYPE_TEXT = "text/plain"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class NodeKind(str, Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST_ITEM = "list_item"


#########
# Media #
#########


@dataclass
class AssetPosition:
    # grid coordinates, 1-based
    row: int = 1
    col: int = 1
    width: int = 2
    height: int = 1


@dataclass
class MediaAsset:
    identifier: str = ""
    name: str = ""
    path: str = ""
    mime_type: str = "image/png"
    format: Optional[ImageFormat] = None
    size: int = 0
    data: bytes = field(default=b"", repr=False, metadata=BINARY)
    base64: str = field(default="", repr=False, metadata=BINARY)
    position: Optional[AssetPosition] = None
    pixel_width: Optional[int] = None
    pixel_height: Optional[int] = None

    @property
    def src(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64}"

    @classmethod
    def from_bytes(
        cls, identifier: str, path: str, data: bytes, mime_type: str
    ) -> "MediaAsset":
        return cls(
            identifier=identifier,
            name=path.rsplit("/", 1)[-1],
            path=path,
            mime_type=mime_type,
            size=len(data),
            data=data,
            base64=b64encode(data).decode("ascii"),
        )


##################
# Styled content #
##################


@dataclass
class BlockPosition:
    """Offset of a shape on its slide, in EMU as stored in the markup."""

    x_emu: int = 0
    y_emu: int = 0

    @property
    def left_pt(self) -> float:
        return round(self.x_emu / EMU_PER_POINT, 1)

    @property
    def top_pt(self) -> float:
        return round(self.y_emu / EMU_PER_POINT, 1)


@dataclass
class StyledContentNode:
    kind: NodeKind = NodeKind.PARAGRAPH
    text: str = ""
    # heading level (2..4) for headings, paragraph nesting level otherwise
    level: int = 0
    bold: bool = False
    italic: bool = False
    underline: bool = False
    alignment: Alignment = Alignment.LEFT
    font_size: float = 18.0
    size_class: str = "base"
    block_index: int = 0
    position: Optional[BlockPosition] = None
    placeholder: bool = False

    @property
    def tag(self) -> str:
        if self.kind is NodeKind.HEADING:
            return f"h{self.level}"
        if self.kind is NodeKind.LIST_ITEM:
            return "li"
        return "p"


@dataclass
class TableStructure:
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)
    alignments: Dict[str, Alignment] = field(default_factory=dict)
    title: Optional[str] = None
    single_line: bool = False

    def get_table(self) -> list[list[str]]:
        """Header row followed by the data rows, as plain lists."""
        return [list(self.headers)] + [
            [row.get(header, "") for header in self.headers] for row in self.rows
        ]


###########
# Results #
###########


class PreviewResult:
    """Common behaviour of every preview dataclass."""

    def to_dict(self, include_binary: bool = False) -> dict:
        from filepreview.extractors.serialization import serialize_preview

        return serialize_preview(self, include_binary=include_binary)

    def get_full_text(self) -> str:
        return getattr(self, "content", "")


@dataclass
class FileInfo:
    url: str = ""
    extension: str = ""
    content_type: Optional[str] = None
    is_supported: bool = False
    file_name: str = ""


@dataclass
class PdfPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.PDF, init=False)
    content_type: str = field(default=CONTENT_TYPE_PDF, init=False)
    file_id: str = ""
    file_url: str = ""
    file_name: str = ""
    # megabytes, one decimal
    file_size: float = 0.0
    page_count: int = 0
    has_text: bool = False

    def get_full_text(self) -> str:
        return (
            f"PDF document: {self.page_count} page(s), {self.file_size} MB, "
            f"available at {self.file_url}"
        )


@dataclass
class SheetInfo:
    max_row: int = 0
    max_col: int = 0
    data_length: int = 0
    image_count: int = 0


@dataclass
class ExcelPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.EXCEL, init=False)
    content_type: str = field(default=CONTENT_TYPE_JSON, init=False)
    sheets: Dict[str, List[List[Any]]] = field(default_factory=dict)
    sheet_names: List[str] = field(default_factory=list)
    sheet_info: Dict[str, SheetInfo] = field(default_factory=dict)
    images: Dict[str, List[MediaAsset]] = field(default_factory=dict)

    def get_full_text(self) -> str:
        blocks = []
        for name in self.sheet_names:
            lines = [
                "\t".join(str(value) for value in row)
                for row in self.sheets.get(name, [])
            ]
            blocks.append("\n".join([name] + lines))
        return "\n\n".join(blocks)


@dataclass
class WordPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.WORD, init=False)
    content: str = ""
    content_type: str = CONTENT_TYPE_HTML
    messages: List[str] = field(default_factory=list)
    # which path produced the content: mammoth, package, legacy or scrape
    method: str = ""


@dataclass
class SlidePreview:
    index: int = 0
    nodes: List[StyledContentNode] = field(default_factory=list)
    images: List[MediaAsset] = field(default_factory=list)
    html: str = ""


@dataclass
class PowerPointPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.POWERPOINT, init=False)
    content_type: str = field(default=CONTENT_TYPE_HTML, init=False)
    content: str = ""
    slides: List[SlidePreview] = field(default_factory=list)
    slide_count: int = 0

    def get_full_text(self) -> str:
        return "\n\n".join(
            "\n".join(node.text for node in slide.nodes if not node.placeholder)
            for slide in self.slides
        ).strip()


@dataclass
class MarkdownPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.MARKDOWN, init=False)
    content_type: str = field(default=CONTENT_TYPE_HTML, init=False)
    content: str = ""
    raw_content: str = ""


@dataclass
class TextPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.TEXT, init=False)
    content_type: str = field(default=CONTENT_TYPE_TEXT, init=False)
    content: str = ""
    encoding: str = "utf-8"


@dataclass
class CsvPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.CSV, init=False)
    content_type: str = field(default=CONTENT_TYPE_JSON, init=False)
    data: List[List[str]] = field(default_factory=list)
    max_rows: int = 0
    max_cols: int = 0
    encoding: str = "utf-8"

    def get_full_text(self) -> str:
        return "\n".join("\t".join(row) for row in self.data)


@dataclass
class XmlPreview(PreviewResult):
    type: PreviewType = field(default=PreviewType.XML, init=False)
    content_type: str = field(default=CONTENT_TYPE_JSON, init=False)
    content: str = ""
    raw_content: str = ""

    def get_tree(self) -> dict:
        return json.loads(self.content) if self.content else {}
