from __future__ import annotations

import logging
from dataclasses import dataclass

from parkline.models.apartment import ColumnSchema, RawRecord, StatusLegend
from parkline.models.config_models import SheetLayout

from .anchors import AnchorPositions, locate_anchors
from .extractor import extract_raw_records
from .legend import extract_status_legend
from .schema import build_column_schema
from .tokenizer import split_lines

"""Sheet parse facade.

Runs tokenizer -> anchor locator -> (schema, legend) -> record extractor over
one CSV document. Raises MissingAnchorError (a ParseError); never returns a
partial result.
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParsedSheet:
    anchors: AnchorPositions
    schema: tuple[ColumnSchema, ...]
    legend: StatusLegend
    raw_records: tuple[RawRecord, ...]
    line_count: int


def parse_sheet(text: str, layout: SheetLayout | None = None) -> ParsedSheet:
    layout = layout or SheetLayout()
    lines = split_lines(text)
    anchors = locate_anchors(lines)
    logger.debug(
        "anchors: anchor1 at column %d, anchor2 at column %d",
        anchors.anchor1 + 1,
        anchors.anchor2 + 1,
    )
    schema = build_column_schema(lines, anchors, layout)
    legend = extract_status_legend(lines, anchors, layout)
    raw_records = extract_raw_records(lines, anchors, schema, layout)
    logger.info(
        "parsed sheet: lines=%d columns=%d legend_entries=%d apartments=%d",
        len(lines),
        len(schema),
        len(legend),
        len(raw_records),
    )
    return ParsedSheet(
        anchors=anchors,
        schema=tuple(schema),
        legend=legend,
        raw_records=tuple(raw_records),
        line_count=len(lines),
    )
