"""
Relationship Resolver
=====================

Office packages link their parts through relationship descriptors: small
XML side files stored as ``<dir>/_rels/<part>.rels`` next to the part that
owns them. Each ``<Relationship Id="rId2" Target="../media/image1.png"/>``
maps a short identifier used inside the part markup (``r:embed="rId2"``) to
another entry of the package.

Targets are relative to the owning part's directory. A target that climbs
out of it (``../media/image1.png`` owned by ``ppt/slides``) is rewritten to
the package path it designates (``ppt/media/image1.png``); package-absolute
targets (``/xl/media/image1.png``) lose their leading slash.

``resolve`` builds a media-only ``RelationshipMap`` for one structural unit.
``read_part_relationships`` returns every relationship of a single part and
is used to walk workbook -> worksheet -> drawing chains.
"""

import logging
import posixpath
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Iterator, Optional

from filepreview.exceptions import FormatError
from filepreview.extractors.util.package import Package

logger = logging.getLogger(__name__)

RELS_DIR = "_rels/"
RELS_SUFFIX = ".rels"
EXTERNAL_TARGET_MODE = "External"

MEDIA_LIKE_EXTENSIONS = (
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".bmp",
    ".webp",
    ".tif",
    ".tiff",
)


@dataclass(frozen=True)
class Relationship:
    id: str
    type: str
    target: str
    external: bool = False


class RelationshipMap(Mapping):
    """Read-only mapping of relationship id to resolved package path."""

    def __init__(self, scope: Optional[str], targets: dict[str, str]):
        self.scope = scope
        self._targets = dict(targets)

    def __getitem__(self, rel_id: str) -> str:
        return self._targets[rel_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def __len__(self) -> int:
        return len(self._targets)

    def __repr__(self) -> str:
        return f"RelationshipMap(scope={self.scope!r}, targets={self._targets!r})"


def is_relationship_descriptor(path: str) -> bool:
    return path.endswith(RELS_SUFFIX) and (
        path.startswith(RELS_DIR) or f"/{RELS_DIR}" in path
    )


def relationships_path_for(part_path: str) -> str:
    """``ppt/slides/slide1.xml`` -> ``ppt/slides/_rels/slide1.xml.rels``"""
    directory, name = posixpath.split(part_path)
    return posixpath.join(directory, RELS_DIR + name + RELS_SUFFIX)


def split_descriptor_path(rels_path: str) -> tuple[str, str]:
    """
    Return (owning directory, source part path) of a descriptor.

    ``ppt/slides/_rels/slide1.xml.rels`` -> (``ppt/slides``, ``ppt/slides/slide1.xml``)
    """
    directory, name = posixpath.split(rels_path)
    owning_dir = posixpath.dirname(directory) if directory.endswith("_rels") else directory
    source_name = name[: -len(RELS_SUFFIX)]
    if not source_name:
        return owning_dir, owning_dir
    return owning_dir, posixpath.join(owning_dir, source_name)


def resolve_target(owning_dir: str, target: str) -> str:
    target = target.strip()
    if target.startswith("/"):
        return target.lstrip("/")
    if target.startswith("../"):
        return posixpath.normpath(posixpath.join(owning_dir, target)).lstrip("/")
    return target


def is_media_target(target: str) -> bool:
    lowered = target.lower()
    return "/media/" in lowered or lowered.startswith("media/") or lowered.endswith(
        MEDIA_LIKE_EXTENSIONS
    )


def parse_descriptor(markup: bytes) -> list[Relationship]:
    """Parse one ``.rels`` document. Raises ``ET.ParseError`` on broken XML."""
    root = ET.fromstring(markup)
    relationships = []
    for element in root.iter():
        if not element.tag.endswith("Relationship"):
            continue
        rel_id = element.get("Id")
        target = element.get("Target")
        if not rel_id or target is None:
            continue
        relationships.append(
            Relationship(
                id=rel_id,
                type=element.get("Type", ""),
                target=target,
                external=element.get("TargetMode") == EXTERNAL_TARGET_MODE,
            )
        )
    return relationships


def _in_scope(source_part: str, unit_scope: Optional[str]) -> bool:
    if unit_scope is None:
        return True
    scope = unit_scope.rstrip("/")
    return source_part == scope or source_part.startswith(scope + "/")


def resolve(package: Package, unit_scope: Optional[str] = None) -> RelationshipMap:
    """
    Build the media relationship map of one structural unit.

    ``unit_scope`` is either a part path (``ppt/slides/slide3.xml``) or a
    directory prefix (``xl/drawings``); None takes every descriptor in the
    package. Descriptors are read in package order and the first target seen
    for an id wins. Targets that do not look like media are dropped.
    """
    targets: dict[str, str] = {}
    for entry in package.entries:
        if not is_relationship_descriptor(entry.path):
            continue
        owning_dir, source_part = split_descriptor_path(entry.path)
        if not _in_scope(source_part, unit_scope):
            continue
        try:
            relationships = parse_descriptor(entry.read_bytes())
        except (FormatError, ET.ParseError) as exc:
            logger.warning(f"Skipping unreadable relationships [{entry.path}]: {exc}")
            continue
        for relationship in relationships:
            if relationship.external:
                continue
            resolved = resolve_target(owning_dir, relationship.target)
            if is_media_target(resolved) and relationship.id not in targets:
                targets[relationship.id] = resolved
    logger.debug(f"Resolved {len(targets)} media relationships for scope [{unit_scope}]")
    return RelationshipMap(unit_scope, targets)


def read_part_relationships(package: Package, part_path: str) -> dict[str, Relationship]:
    """
    All relationships owned by ``part_path`` with targets resolved.

    Returns an empty dict when the part has no descriptor or it is unreadable.
    Unlike ``resolve`` every relative target is joined to the owning
    directory, so the result can be used to open the target entry.
    """
    rels_path = relationships_path_for(part_path)
    if not package.exists(rels_path):
        return {}
    try:
        relationships = parse_descriptor(package.read_bytes(rels_path))
    except (FormatError, ET.ParseError) as exc:
        logger.warning(f"Skipping unreadable relationships [{rels_path}]: {exc}")
        return {}

    owning_dir = posixpath.dirname(part_path)
    resolved = {}
    for relationship in relationships:
        if relationship.id in resolved:
            continue
        target = relationship.target.strip()
        if not relationship.external:
            if target.startswith("/"):
                target = target.lstrip("/")
            else:
                target = posixpath.normpath(posixpath.join(owning_dir, target))
        resolved[relationship.id] = Relationship(
            relationship.id, relationship.type, target, relationship.external
        )
    return resolved
