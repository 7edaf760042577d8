from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from parkline.models.apartment import ApartmentRecord

"""Join check between apartment ids and the floor-plan SVG overlays.

Overlay shapes are identified by their ``data-name`` attribute; the viewer
joins them to records by exact, case- and whitespace-sensitive id match.
Group names containing "Layer" are editor layers, not apartments.
"""

__all__ = ["OverlayJoin", "extract_overlay_ids", "match_overlay"]

logger = logging.getLogger(__name__)

ID_ATTRIBUTE = "data-name"
LAYER_MARKER = "Layer"


@dataclass(frozen=True)
class OverlayJoin:
    matched: tuple[str, ...]
    records_without_shape: tuple[str, ...]
    shapes_without_record: tuple[str, ...]

    @property
    def is_complete(self) -> bool:
        return not self.records_without_shape and not self.shapes_without_record


def extract_overlay_ids(svg_text: str) -> list[str]:
    """``data-name`` values in document order (first occurrence kept).

    Raises ``xml.etree.ElementTree.ParseError`` for malformed documents.
    """
    root = ET.fromstring(svg_text)
    ids: list[str] = []
    seen: set[str] = set()
    for element in root.iter():
        name = element.get(ID_ATTRIBUTE)
        if not name or LAYER_MARKER in name or name in seen:
            continue
        seen.add(name)
        ids.append(name)
    return ids


def match_overlay(records: Sequence[ApartmentRecord], overlay_ids: Iterable[str]) -> OverlayJoin:
    shape_ids = list(overlay_ids)
    shapes = set(shape_ids)
    record_ids = [r.id for r in records]
    known = set(record_ids)
    join = OverlayJoin(
        matched=tuple(i for i in record_ids if i in shapes),
        records_without_shape=tuple(i for i in record_ids if i not in shapes),
        shapes_without_record=tuple(i for i in shape_ids if i not in known),
    )
    if not join.is_complete:
        logger.warning(
            "overlay join: matched=%d records_without_shape=%d shapes_without_record=%d",
            len(join.matched),
            len(join.records_without_shape),
            len(join.shapes_without_record),
        )
    return join
