"""
Media Extractor
===============

Collects the embedded images of an office package and groups them per
structural unit (worksheet).

Algorithm
---------
1. Keep entries whose path contains a ``media/`` or ``drawings/`` segment or
   ends with an image extension.
2. Read each candidate, guess its MIME type from the extension (PNG when the
   extension says nothing) and base64-encode it.
3. Drop candidates that are empty or whose bytes do not carry the guessed
   format (see ``image_utils.validate``). Drawing XML parts living under
   ``drawings/`` are discarded here.
4. Attach assets to their worksheet when the workbook -> worksheet ->
   drawing -> image relationship chain resolves for every asset; otherwise
   all assets go to one implicit unit (the first worksheet, or ``Sheet1``).
5. Lay assets out two per row in reading order.

Known Limitations
-----------------
- The implicit-unit fallback can attribute images to the wrong worksheet of
  a multi-sheet workbook.
- Anchors from the drawing parts are not used for positions.

Input that is not a ZIP package (legacy ``.xls``) yields no assets.
"""

import logging
import posixpath
import xml.etree.ElementTree as ET
from typing import Optional, Union

from filepreview.exceptions import FormatError, ValidationError
from filepreview.extractors.data_types import AssetPosition, MediaAsset
from filepreview.extractors.util.identifiers import generate_identifier
from filepreview.extractors.util.image_utils import (
    classify,
    get_image_dimensions,
    validate,
)
from filepreview.extractors.util.package import Package, is_zip_package, open_package
from filepreview.extractors.util.relationships import read_part_relationships

logger = logging.getLogger(__name__)

SPREADSHEET_NS = "{http://schemas.openxmlformats.org/spreadsheetml/2006/main}"
OFFICE_REL_NS = (
    "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
)
WORKBOOK_PART = "xl/workbook.xml"

MEDIA_DIR_SEGMENTS = ("media/", "drawings/")
EXTENSION_MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
    ".webp": "image/webp",
    ".tif": "image/tiff",
    ".tiff": "image/tiff",
}
IMAGE_EXTENSIONS = tuple(EXTENSION_MIME_TYPES)
DEFAULT_MIME_TYPE = "image/png"
DEFAULT_UNIT = "Sheet1"
ASSETS_PER_ROW = 2


def is_media_candidate(path: str) -> bool:
    lowered = path.lower()
    return any(segment in lowered for segment in MEDIA_DIR_SEGMENTS) or lowered.endswith(
        IMAGE_EXTENSIONS
    )


def guess_mime_type(path: str) -> str:
    extension = posixpath.splitext(path.lower())[1]
    return EXTENSION_MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)


def build_asset(path: str, data: bytes) -> MediaAsset:
    """
    Turn the bytes of one entry into a MediaAsset.

    Raises ValidationError when the bytes are empty or are not an image of
    the format the extension announces.
    """
    if not data:
        raise ValidationError(f"Media entry [{path}] is empty")
    mime_type = guess_mime_type(path)
    asset = MediaAsset.from_bytes(generate_identifier("image"), path, data, mime_type)
    if not asset.base64:
        raise ValidationError(f"Media entry [{path}] could not be encoded")
    if not validate(data, mime_type):
        raise ValidationError(
            f"Media entry [{path}] does not carry a valid {mime_type} signature"
        )
    asset.format = classify(data)
    dimensions = get_image_dimensions(data)
    if dimensions:
        asset.pixel_width, asset.pixel_height = dimensions
    return asset


def collect_media(package: Package) -> list[MediaAsset]:
    """All validated image assets of ``package`` in package order."""
    assets = []
    for entry in package.entries:
        if not is_media_candidate(entry.path):
            continue
        try:
            assets.append(build_asset(entry.path, entry.read_bytes()))
        except ValidationError as exc:
            logger.debug(f"Skipping media candidate: {exc}")
        except FormatError as exc:
            logger.warning(f"Skipping unreadable media entry [{entry.path}]: {exc}")
    logger.debug(f"Collected {len(assets)} media assets")
    return assets


def assign_positions(assets: list[MediaAsset]) -> list[MediaAsset]:
    for index, asset in enumerate(assets):
        asset.position = AssetPosition(
            row=index // ASSETS_PER_ROW + 1,
            col=index % ASSETS_PER_ROW + 1,
        )
    return assets


def read_sheet_parts(package: Package) -> list[tuple[str, str]]:
    """(sheet name, worksheet part path) pairs in workbook order."""
    if not package.exists(WORKBOOK_PART):
        return []
    try:
        root = ET.fromstring(package.read_bytes(WORKBOOK_PART))
    except (FormatError, ET.ParseError) as exc:
        logger.warning(f"Workbook part is unreadable: {exc}")
        return []

    workbook_rels = read_part_relationships(package, WORKBOOK_PART)
    sheets = []
    for sheet in root.iter(f"{SPREADSHEET_NS}sheet"):
        name = sheet.get("name")
        relationship = workbook_rels.get(sheet.get(f"{OFFICE_REL_NS}id", ""))
        if name is None:
            continue
        sheets.append((name, relationship.target if relationship else ""))
    return sheets


def map_media_to_sheets(
    package: Package, sheets: list[tuple[str, str]]
) -> dict[str, str]:
    """Media entry path -> sheet name, following drawing relationships."""
    mapping: dict[str, str] = {}
    for sheet_name, sheet_part in sheets:
        if not sheet_part:
            continue
        for relationship in read_part_relationships(package, sheet_part).values():
            if not relationship.type.endswith("/drawing"):
                continue
            drawing_rels = read_part_relationships(package, relationship.target)
            for image_rel in drawing_rels.values():
                if image_rel.type.endswith("/image"):
                    mapping.setdefault(image_rel.target, sheet_name)
    return mapping


def extract_all(
    source: Union[bytes, Package], default_unit: Optional[str] = None
) -> dict[str, list[MediaAsset]]:
    """
    Extract the images of a package grouped by unit name.

    ``source`` may be raw bytes or an opened Package. Bytes that are not a
    ZIP package produce an empty mapping. A ZIP package whose directory is
    corrupt raises FormatError.
    """
    if isinstance(source, Package):
        return _extract_from_package(source, default_unit)
    if not is_zip_package(source):
        logger.debug("Input is not a ZIP package, no media to extract")
        return {}
    with open_package(source) as package:
        return _extract_from_package(package, default_unit)


def _extract_from_package(
    package: Package, default_unit: Optional[str]
) -> dict[str, list[MediaAsset]]:
    assets = collect_media(package)
    if not assets:
        return {}

    sheets = read_sheet_parts(package)
    fallback_unit = default_unit or (sheets[0][0] if sheets else DEFAULT_UNIT)
    mapping = map_media_to_sheets(package, sheets)
    complete = all(asset.path in mapping for asset in assets)
    if not complete and mapping:
        logger.info(
            "Drawing relationships cover %d of %d images, using unit [%s] for all",
            sum(asset.path in mapping for asset in assets),
            len(assets),
            fallback_unit,
        )

    units: dict[str, list[MediaAsset]] = {}
    for asset in assets:
        unit = mapping[asset.path] if complete else fallback_unit
        units.setdefault(unit, []).append(asset)
    for unit_assets in units.values():
        assign_positions(unit_assets)
    return units
