from __future__ import annotations

import logging
from collections.abc import Sequence

from parkline.models.apartment import ColumnSchema, RawField, RawRecord
from parkline.models.config_models import SheetLayout

from .anchors import AnchorPositions
from .schema import cell
from .tokenizer import parse_csv_line

logger = logging.getLogger(__name__)


def extract_raw_records(
    lines: list[str],
    anchors: AnchorPositions,
    schema: Sequence[ColumnSchema],
    layout: SheetLayout | None = None,
) -> list[RawRecord]:
    """Walk the data rows and build one RawRecord per apartment row.

    A row is an apartment iff the cell right of anchor1 (the id) is
    non-empty. Raw fields are keyed by the canonical subject label; when two
    columns share a label the later column wins.
    """
    layout = layout or SheetLayout()
    records: list[RawRecord] = []
    for row_index in range(layout.data_start_row, len(lines)):
        row = parse_csv_line(lines[row_index])
        apartment_id = cell(row, anchors.id_column)
        if not apartment_id:
            continue
        fields: dict[str, RawField] = {}
        for column in schema:
            fields[column.subject] = RawField(
                value=cell(row, column.column_index),
                filter_keyword=column.filter_keyword,
                is_visible=column.is_visible,
                column_index=column.column_index,
                subjects=column.subjects,
            )
        records.append(RawRecord(id=apartment_id, row_index=row_index, fields=fields))

    logger.debug("extracted %d raw apartment rows", len(records))
    return records
