from __future__ import annotations

import logging

from parkline.models.apartment import StatusLegend
from parkline.models.config_models import SheetLayout

from .anchors import AnchorPositions
from .schema import cell, row_cells

logger = logging.getLogger(__name__)


def extract_status_legend(
    lines: list[str], anchors: AnchorPositions, layout: SheetLayout | None = None
) -> StatusLegend:
    """Read (token, display text) pairs from the legend rows right of anchor2.

    Pairs with an empty token or text are skipped; fewer than three pairs is
    not an error.
    """
    layout = layout or SheetLayout()
    entries: dict[str, str] = {}
    for row_index in layout.legend_rows:
        row = row_cells(lines, row_index)
        token = cell(row, anchors.legend_token_column)
        text = cell(row, anchors.legend_text_column)
        if token and text:
            entries[token] = text
            logger.debug("status legend: %s = %s", token, text)
    return StatusLegend(entries)
