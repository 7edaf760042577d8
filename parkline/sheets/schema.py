from __future__ import annotations

import logging

from parkline.models.apartment import ColumnSchema, SubjectLabels
from parkline.models.config_models import SheetLayout

from .anchors import AnchorPositions
from .tokenizer import parse_csv_line

logger = logging.getLogger(__name__)

CHECKED_GLYPH = "☑"


def row_cells(lines: list[str], index: int) -> list[str]:
    """Tokenised row ``index``, or an empty row when the sheet is shorter."""
    if 0 <= index < len(lines):
        return parse_csv_line(lines[index])
    return []


def cell(row: list[str], index: int) -> str:
    return row[index] if 0 <= index < len(row) else ""


def is_checked(value: str) -> bool:
    """Visibility checkbox: the ☑ glyph, anything containing 'true', or '1'."""
    return value == CHECKED_GLYPH or "true" in value.lower() or value == "1"


def build_column_schema(
    lines: list[str], anchors: AnchorPositions, layout: SheetLayout | None = None
) -> list[ColumnSchema]:
    """Build one ColumnSchema per column between the anchors, in column order.

    Columns whose subject labels are all empty are kept; display code decides
    what to show.
    """
    layout = layout or SheetLayout()
    keywords = row_cells(lines, layout.filter_keyword_row)
    checkboxes = row_cells(lines, layout.visibility_row)
    subjects_mk = row_cells(lines, layout.subject_row)
    subjects_en = row_cells(lines, layout.subject_en_row)
    subjects_sq = row_cells(lines, layout.subject_sq_row)

    schema: list[ColumnSchema] = []
    for i in anchors.data_columns:
        entry = ColumnSchema(
            column_index=i,
            filter_keyword=cell(keywords, i),
            is_visible=is_checked(cell(checkboxes, i)),
            subjects=SubjectLabels(
                mk=cell(subjects_mk, i),
                en=cell(subjects_en, i),
                sq=cell(subjects_sq, i),
            ),
        )
        logger.debug(
            "column %s: MK=%r EN=%r SQ=%r keyword=%r visible=%s",
            entry.column_letter,
            entry.subjects.mk,
            entry.subjects.en,
            entry.subjects.sq,
            entry.filter_keyword,
            entry.is_visible,
        )
        schema.append(entry)
    return schema
