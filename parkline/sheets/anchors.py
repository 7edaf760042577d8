from __future__ import annotations

from dataclasses import dataclass

from .tokenizer import parse_csv_line

"""Anchor locator.

The sheet's first row carries two marker cells, ``anchor1`` and ``anchor2``.
Apartment columns lie strictly between them; the status legend sits in the
two columns right of ``anchor2``. All downstream offsets depend on these
indices, so a missing marker fails the whole parse.
"""

__all__ = [
    "ANCHOR1",
    "ANCHOR2",
    "AnchorPositions",
    "ParseError",
    "MissingAnchorError",
    "locate_anchors",
]

ANCHOR1 = "anchor1"
ANCHOR2 = "anchor2"


class ParseError(Exception):
    """Raised when the sheet structure cannot be parsed."""
    kind = "ParseError"


class MissingAnchorError(ParseError):
    """Raised when anchor1 or anchor2 is absent from the header row."""
    kind = "MissingAnchor"


@dataclass(frozen=True)
class AnchorPositions:
    anchor1: int
    anchor2: int

    @property
    def id_column(self) -> int:
        return self.anchor1 + 1

    @property
    def data_columns(self) -> range:
        return range(self.anchor1 + 1, self.anchor2)

    @property
    def legend_token_column(self) -> int:
        return self.anchor2 + 1

    @property
    def legend_text_column(self) -> int:
        return self.anchor2 + 2


def locate_anchors(lines: list[str]) -> AnchorPositions:
    """Find both anchor markers in the first line.

    Matching is a case-insensitive substring test; when a marker occurs more
    than once the right-most cell is used.
    """
    if not lines:
        raise MissingAnchorError("could not find anchor1 or anchor2 in row 1: document is empty")

    anchor1 = -1
    anchor2 = -1
    for index, cell in enumerate(parse_csv_line(lines[0])):
        lowered = cell.lower()
        if ANCHOR1 in lowered:
            anchor1 = index
        if ANCHOR2 in lowered:
            anchor2 = index

    missing = [name for name, pos in ((ANCHOR1, anchor1), (ANCHOR2, anchor2)) if pos == -1]
    if missing:
        raise MissingAnchorError(f"could not find {' and '.join(missing)} in row 1")
    return AnchorPositions(anchor1=anchor1, anchor2=anchor2)
