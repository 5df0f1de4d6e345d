"""
Presentation previewer.

Slides are read straight from the package: the slide list of
``ppt/presentation.xml`` gives the slide count, every
``ppt/slides/slideN.xml`` is run through the markup walker, and the pictures
a slide references are resolved through the slide's relationships.

Legacy binary presentations (.ppt) are not parsed; they get a notice page.
"""

import io
import logging
import re
from dataclasses import replace
from typing import Any, Generator, Optional

from filepreview.exceptions import FormatError, ValidationError
from filepreview.extractors.data_types import MediaAsset, PowerPointPreview, SlidePreview
from filepreview.extractors.util import markup_walker, media
from filepreview.extractors.util.html_render import render_presentation, render_slide
from filepreview.extractors.util.package import Package, is_zip_package, open_package
from filepreview.extractors.util.relationships import RelationshipMap, resolve

logger = logging.getLogger(__name__)

PRESENTATION_PART = "ppt/presentation.xml"
SLIDE_PART = "ppt/slides/slide{index}.xml"
FALLBACK_MEDIA_EXTENSIONS = ("jpg", "png", "jpeg", "gif")

_SLIDE_LIST_RE = re.compile(r"<p:sldIdLst\b[^>]*>(.*?)</p:sldIdLst>", re.S)
_SLIDE_ID_RE = re.compile(r"<p:sldId\b")
_SLIDE_ENTRY_RE = re.compile(r"^ppt/slides/slide\d+\.xml$")
_REL_NUMBER_RE = re.compile(r"^rId(\d+)$")

LEGACY_NOTICE_HTML = (
    '<div class="presentation legacy">'
    "<h1>PowerPoint 97-2003 presentation (.ppt)</h1>"
    '<p class="notice">Slides of the legacy binary format cannot be previewed. '
    "Save the file as .pptx to see its content.</p>"
    "<p>File size: {size_mb} MB</p>"
    "</div>"
)


def count_slides(package: Package) -> int:
    """Entries of the presentation slide list, else the slide parts present."""
    if package.exists(PRESENTATION_PART):
        match = _SLIDE_LIST_RE.search(package.read_text(PRESENTATION_PART))
        if match:
            return len(_SLIDE_ID_RE.findall(match.group(1)))
    return sum(1 for path in package.namelist() if _SLIDE_ENTRY_RE.match(path))


class SlideImageResolver:
    """Builds the image assets of a slide, reading each media entry once."""

    def __init__(self, package: Package):
        self.package = package
        self._assets: dict[str, Optional[MediaAsset]] = {}

    def _asset(self, path: str) -> Optional[MediaAsset]:
        if path not in self._assets:
            try:
                self._assets[path] = media.build_asset(path, self.package.read_bytes(path))
            except (ValidationError, FormatError) as exc:
                logger.debug(f"Skipping slide image: {exc}")
                self._assets[path] = None
        return self._assets[path]

    def _fallback_path(self, rel_id: str) -> Optional[str]:
        match = _REL_NUMBER_RE.match(rel_id)
        if not match:
            return None
        for extension in FALLBACK_MEDIA_EXTENSIONS:
            candidate = f"ppt/media/image{match.group(1)}.{extension}"
            if self.package.exists(candidate):
                return candidate
        return None

    def images_for(self, markup: str, relationships: RelationshipMap) -> list[MediaAsset]:
        images = []
        seen = set()
        for rel_id in markup_walker.extract_image_references(markup):
            path = relationships.get(rel_id) or self._fallback_path(rel_id)
            if path is None:
                logger.debug(f"No media found for reference [{rel_id}]")
                continue
            asset = self._asset(path)
            if asset is not None and path not in seen:
                seen.add(path)
                # positions are per slide, the cached asset is shared
                images.append(replace(asset))
        return media.assign_positions(images)


def read_slide(package: Package, index: int, resolver: SlideImageResolver) -> SlidePreview:
    part = SLIDE_PART.format(index=index)
    markup = package.read_text(part)
    slide = SlidePreview(
        index=index,
        nodes=markup_walker.walk(markup),
        images=resolver.images_for(markup, resolve(package, part)),
    )
    slide.html = render_slide(slide)
    return slide


def _failed_slide(index: int) -> SlidePreview:
    slide = SlidePreview(
        index=index,
        nodes=[markup_walker.placeholder_node(markup_walker.PARSE_FAILED_TEXT)],
    )
    slide.html = render_slide(slide)
    return slide


def _read_package(package: Package, path: str | None) -> PowerPointPreview:
    slide_count = count_slides(package)
    resolver = SlideImageResolver(package)
    slides = []
    for index in range(1, slide_count + 1):
        if not package.exists(SLIDE_PART.format(index=index)):
            logger.warning(f"Slide {index} of [{path}] is listed but has no part")
            continue
        try:
            slides.append(read_slide(package, index, resolver))
        except FormatError as exc:
            logger.warning(f"Slide {index} of [{path}] could not be parsed: {exc}")
            slides.append(_failed_slide(index))
    return PowerPointPreview(
        content=render_presentation(slides),
        slides=slides,
        slide_count=slide_count,
    )


def read_powerpoint(
    file_like: io.BytesIO, path: str | None = None
) -> Generator[PowerPointPreview, Any, None]:
    """
    Preview a presentation.

    Args:
        file_like: A BytesIO object containing the presentation data.
        path: Optional file path, only used for logging.

    Yields:
        PowerPointPreview with the rendered HTML, per-slide nodes and images.
    """
    file_like.seek(0)
    data = file_like.read()

    if not is_zip_package(data):
        logger.info(f"[{path}] is a legacy presentation, emitting notice only")
        yield PowerPointPreview(
            content=LEGACY_NOTICE_HTML.format(size_mb=round(len(data) / 1024 / 1024, 2)),
        )
        return

    with open_package(data, source=path) as package:
        preview = _read_package(package, path)
    logger.debug(f"Presentation [{path}] has {preview.slide_count} slide(s)")
    yield preview
