"""
Legacy Word (.doc) Text Reader
==============================

Recovers the main body text of Word 97-2003 binary documents.

File Format Background
----------------------
A .doc file is an OLE2 compound file. The ``WordDocument`` stream starts
with the File Information Block (FIB):

    0x00  wIdent       magic number, 0xA5EC (Word 97+) or 0xA5DC (Word 95)
    0x0A  flags        bit 0x0100 = encrypted, bit 0x0200 = use "1Table"
    0x4C  ccpText      number of characters in the main document body

The FIB ends with a variable array of (fc, lcb) pairs; pair 33 locates the
CLX structure in the table stream (``0Table`` or ``1Table``). The CLX holds
the piece table: a list of character positions and, for every piece, the
byte offset of its text in ``WordDocument`` plus a flag telling whether the
piece is stored as cp1252 (one byte per character) or UTF-16LE.

Known Limitations
-----------------
- Only the main body is read; footnotes, headers and comments are skipped.
- Fields are flattened: instructions are dropped, results kept.
- Word 6/95 files without a piece table fall through to ``scrape_text``.

Dependencies
------------
    - olefile: OLE2 container access
"""

import io
import logging
import re
import struct

import olefile

from filepreview.exceptions import ExtractionFileEncryptedError, UpstreamError

logger = logging.getLogger(__name__)

# =============================================================================
# FIB constants
# =============================================================================
FIB_MAGIC_WORD97 = 0xA5EC
FIB_MAGIC_WORD95 = 0xA5DC
FIB_FLAGS_OFFSET = 0x0A
FIB_ENCRYPTED_FLAG = 0x0100
FIB_TABLE_STREAM_FLAG = 0x0200
FIB_CSW_OFFSET = 0x20
FIB_CCP_TEXT_INDEX = 3
FIB_CLX_PAIR_INDEX = 33
MIN_DOC_SIZE = 0x200

CLX_PRC = 0x01
CLX_PCDT = 0x02
PCD_SIZE = 8
COMPRESSED_FLAG = 0x40000000

_CONTROL_REPLACEMENTS = {
    "\x07": "\t",  # table cell end
    "\x0b": "\n",
    "\x0c": "\n\n",
    "\x0d": "\n",
    "\x14": " ",  # field separator
    "\xa0": " ",
}
_FIELD_INSTRUCTION_RE = re.compile(r"\x13[^\x13\x14\x15]*\x14?")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0e-\x1f\x7f]")
# Printable ASCII, Latin-1, CJK punctuation, ideographs and full-width forms
_PRINTABLE_RUN_RE = re.compile(
    r"[\t\n\r\x20-\x7e\xa0-\xff\u3000-\u303f\u4e00-\u9fff\uff00-\uffef]{4,}"
)


def clean_text(text: str) -> str:
    """Map Word control characters to plain-text layout and drop the rest."""
    text = _FIELD_INSTRUCTION_RE.sub("", text)
    for old, new in _CONTROL_REPLACEMENTS.items():
        text = text.replace(old, new)
    text = _CONTROL_RE.sub("", text)
    # cell markers become tabs; keep them as column gaps for table detection
    text = text.replace("\t", "  ")
    text = re.sub(r"[ ]{3,}", "  ", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


class LegacyDocReader:
    """Reads the body text of a .doc file. Use as a context manager."""

    def __init__(self, file_like: io.BytesIO):
        self.file_like = file_like
        self.ole = None

    def __enter__(self) -> "LegacyDocReader":
        self.file_like.seek(0)
        try:
            self.ole = olefile.OleFileIO(self.file_like)
        except OSError as exc:
            raise UpstreamError("Not an OLE2 compound document", cause=exc) from exc
        return self

    def __exit__(self, *args) -> None:
        if self.ole:
            self.ole.close()

    def _stream(self, name: str) -> bytes:
        if not (self.ole and self.ole.exists(name)):
            return b""
        try:
            return self.ole.openstream(name).read()
        except OSError as exc:
            raise UpstreamError(f"Unreadable OLE stream [{name}]", cause=exc) from exc

    def word_document_stream(self) -> bytes:
        word_doc = self._stream("WordDocument")
        if not word_doc:
            raise UpstreamError("No WordDocument stream")
        if len(word_doc) < MIN_DOC_SIZE:
            raise UpstreamError("WordDocument stream too small")
        magic = struct.unpack_from("<H", word_doc, 0)[0]
        if magic not in (FIB_MAGIC_WORD97, FIB_MAGIC_WORD95):
            raise UpstreamError(f"Not a valid .doc file (Magic: {hex(magic)})")
        flags = struct.unpack_from("<H", word_doc, FIB_FLAGS_OFFSET)[0]
        if flags & FIB_ENCRYPTED_FLAG:
            raise ExtractionFileEncryptedError("DOC is encrypted or password-protected")
        return word_doc

    def read_text(self) -> str:
        word_doc = self.word_document_stream()
        try:
            ccp_text, fc_clx, lcb_clx = self._read_fib(word_doc)
            flags = struct.unpack_from("<H", word_doc, FIB_FLAGS_OFFSET)[0]
            table_name = "1Table" if flags & FIB_TABLE_STREAM_FLAG else "0Table"
            table = self._stream(table_name)
            if not table or lcb_clx == 0 or fc_clx + lcb_clx > len(table):
                raise UpstreamError(f"No piece table in [{table_name}]")
            text = self._read_pieces(word_doc, table[fc_clx : fc_clx + lcb_clx], ccp_text)
        except struct.error as exc:
            raise UpstreamError("Malformed FIB or piece table", cause=exc) from exc
        logger.debug(f"Read {len(text)} characters from legacy document")
        return clean_text(text)

    @staticmethod
    def _read_fib(word_doc: bytes) -> tuple[int, int, int]:
        csw = struct.unpack_from("<H", word_doc, FIB_CSW_OFFSET)[0]
        pos = FIB_CSW_OFFSET + 2 + csw * 2
        cslw = struct.unpack_from("<H", word_doc, pos)[0]
        lw_start = pos + 2
        ccp_text = struct.unpack_from("<I", word_doc, lw_start + FIB_CCP_TEXT_INDEX * 4)[0]
        pos = lw_start + cslw * 4
        cb_fc_lcb = struct.unpack_from("<H", word_doc, pos)[0]
        if cb_fc_lcb <= FIB_CLX_PAIR_INDEX:
            raise UpstreamError("FIB has no CLX location")
        fc_clx, lcb_clx = struct.unpack_from(
            "<II", word_doc, pos + 2 + FIB_CLX_PAIR_INDEX * 8
        )
        return ccp_text, fc_clx, lcb_clx

    @staticmethod
    def _read_pieces(word_doc: bytes, clx: bytes, ccp_text: int) -> str:
        pos = 0
        while pos < len(clx) and clx[pos] == CLX_PRC:
            cb_grpprl = struct.unpack_from("<h", clx, pos + 1)[0]
            pos += 3 + cb_grpprl
        if pos >= len(clx) or clx[pos] != CLX_PCDT:
            raise UpstreamError("CLX has no piece descriptor table")
        lcb = struct.unpack_from("<I", clx, pos + 1)[0]
        plc = clx[pos + 5 : pos + 5 + lcb]
        count = (len(plc) - 4) // (4 + PCD_SIZE)
        positions = struct.unpack_from(f"<{count + 1}I", plc, 0)
        descriptors = (count + 1) * 4

        chunks = []
        remaining = ccp_text
        for index in range(count):
            if remaining <= 0:
                break
            length = min(positions[index + 1] - positions[index], remaining)
            fc = struct.unpack_from("<I", plc, descriptors + index * PCD_SIZE + 2)[0]
            if fc & COMPRESSED_FLAG:
                start = (fc & ~COMPRESSED_FLAG) // 2
                chunks.append(word_doc[start : start + length].decode("cp1252", errors="replace"))
            else:
                chunks.append(
                    word_doc[fc : fc + length * 2].decode("utf-16-le", errors="replace")
                )
            remaining -= length
        return "".join(chunks)


def read_legacy_doc_text(data: bytes) -> str:
    """Body text of a .doc file. Raises UpstreamError when it cannot be parsed."""
    with LegacyDocReader(io.BytesIO(data)) as reader:
        return reader.read_text()


def scrape_text(data: bytes) -> str:
    """
    Last-resort recovery: printable UTF-16LE runs anywhere in the file.

    Produces noise for some binaries; used only when every structured path
    failed.
    """
    decoded = data[: len(data) // 2 * 2].decode("utf-16-le", errors="ignore")
    runs = [run.strip() for run in _PRINTABLE_RUN_RE.findall(decoded)]
    return "\n".join(run for run in runs if run)
