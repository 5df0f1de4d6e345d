"""
Spreadsheet previewer.

Workbooks are turned into rectangular grids of cell values, one per
worksheet, together with the embedded images of each worksheet.

Readers are tried in order:

    - openpyxl for ZIP packages (.xlsx, .xlsm)
    - xlrd for legacy binary workbooks (.xls)
    - pandas with the calamine engine when the primary reader failed

Legacy workbooks carry no ZIP package, so they produce no images.
"""

import datetime
import io
import logging
import zipfile
from typing import Any, Callable, Generator

import pandas as pd
import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError
from xlrd.xldate import XLDateError, xldate_as_datetime

from filepreview.exceptions import ExtractionFailedError, FormatError, UpstreamError
from filepreview.extractors.data_types import ExcelPreview, MediaAsset, SheetInfo
from filepreview.extractors.util import media
from filepreview.extractors.util.package import is_zip_package

logger = logging.getLogger(__name__)

Grid = list[list[Any]]

# Cell type constants for quick comparison
_CELL_EMPTY = xlrd.XL_CELL_EMPTY
_CELL_NUMBER = xlrd.XL_CELL_NUMBER
_CELL_DATE = xlrd.XL_CELL_DATE
_CELL_BOOLEAN = xlrd.XL_CELL_BOOLEAN
_CELL_ERROR = xlrd.XL_CELL_ERROR


# =============================================================================
# Cell values
# =============================================================================


def _normalize_value(value: Any) -> Any:
    """JSON-friendly cell value; empty cells become ""."""
    if value is None:
        return ""
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, datetime.timedelta):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _xlrd_cell_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
    if cell.ctype == _CELL_EMPTY:
        return ""
    if cell.ctype == _CELL_NUMBER:
        return _normalize_value(cell.value)
    if cell.ctype == _CELL_DATE:
        try:
            return xldate_as_datetime(cell.value, datemode).isoformat()
        except (ValueError, OverflowError, XLDateError):
            return cell.value
    if cell.ctype == _CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == _CELL_ERROR:
        return "#ERROR"
    return cell.value


def _pad(grid: Grid) -> Grid:
    width = max((len(row) for row in grid), default=0)
    if width == 0:
        return [[""]]
    return [row + [""] * (width - len(row)) for row in grid]


# =============================================================================
# Readers
# =============================================================================


def _read_with_openpyxl(data: bytes) -> dict[str, Grid]:
    try:
        workbook = load_workbook(io.BytesIO(data), data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        raise UpstreamError("openpyxl could not open the workbook", cause=exc) from exc
    try:
        sheets = {}
        for worksheet in workbook.worksheets:
            logger.debug(f"Reading sheet: [{worksheet.title}]")
            sheets[worksheet.title] = _pad(
                [
                    [_normalize_value(value) for value in row]
                    for row in worksheet.iter_rows(values_only=True)
                ]
            )
        return sheets
    finally:
        workbook.close()


def _read_with_xlrd(data: bytes) -> dict[str, Grid]:
    try:
        workbook = xlrd.open_workbook(file_contents=data)
    except (xlrd.XLRDError, CompDocError, ValueError, OSError) as exc:
        raise UpstreamError("xlrd could not open the workbook", cause=exc) from exc
    sheets = {}
    for sheet in workbook.sheets():
        logger.debug(f"Reading sheet: [{sheet.name}]")
        sheets[sheet.name] = _pad(
            [
                [_xlrd_cell_value(cell, workbook.datemode) for cell in sheet.row(row_idx)]
                for row_idx in range(sheet.nrows)
            ]
        )
    return sheets


def _read_with_calamine(data: bytes) -> dict[str, Grid]:
    try:
        frames = pd.read_excel(
            io.BytesIO(data), engine="calamine", sheet_name=None, header=None
        )
    except Exception as exc:
        # calamine surfaces its own error types; any failure ends this path
        raise UpstreamError("calamine could not read the workbook", cause=exc) from exc
    sheets = {}
    for sheet_name, df in frames.items():
        logger.debug(f"Reading sheet: [{sheet_name}]")
        df = df.astype(object).where(pd.notna(df), None)
        sheets[str(sheet_name)] = _pad(
            [[_normalize_value(value) for value in row] for row in df.values.tolist()]
        )
    return sheets


def read_sheets(data: bytes) -> dict[str, Grid]:
    """
    Every worksheet as a grid, keyed by sheet name in workbook order.

    Raises ExtractionFailedError when no reader can open the workbook.
    """
    primary: Callable[[bytes], dict[str, Grid]] = (
        _read_with_openpyxl if is_zip_package(data) else _read_with_xlrd
    )
    for reader in (primary, _read_with_calamine):
        try:
            return reader(data)
        except UpstreamError as exc:
            logger.warning(f"Workbook reader [{reader.__name__}] failed: {exc}")
    raise ExtractionFailedError("Failed to parse the spreadsheet with any reader")


def _read_images(data: bytes, default_unit: str | None) -> dict[str, list[MediaAsset]]:
    try:
        return media.extract_all(data, default_unit=default_unit)
    except FormatError as exc:
        logger.warning(f"Skipping spreadsheet images: {exc}")
        return {}


def read_excel(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[ExcelPreview, Any, None]:
    """
    Preview a spreadsheet.

    Args:
        file_like: A BytesIO object containing the workbook data.
        path: Optional file path, only used for logging.

    Yields:
        ExcelPreview with one grid per sheet, sheet information and images.
    """
    logger.debug(f"Previewing spreadsheet [{path}]")
    file_like.seek(0)
    data = file_like.read()

    sheets = read_sheets(data)
    sheet_names = list(sheets)
    extracted = _read_images(data, sheet_names[0] if sheet_names else None)

    images: dict[str, list[MediaAsset]] = {}
    sheet_info: dict[str, SheetInfo] = {}
    for name, grid in sheets.items():
        images[name] = extracted.get(name, [])
        sheet_info[name] = SheetInfo(
            max_row=len(grid),
            max_col=len(grid[0]) if grid else 0,
            data_length=len(grid),
            image_count=len(images[name]),
        )

    yield ExcelPreview(
        sheets=sheets,
        sheet_names=sheet_names,
        sheet_info=sheet_info,
        images=images,
    )
