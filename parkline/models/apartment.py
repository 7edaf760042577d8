from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

"""Apartment domain models.

Column schema, status legend, raw (pre-normalisation) records and the final
ApartmentRecord served to the floor-plan viewer.

All models are frozen: a record set is built once per load and never mutated
afterwards. Reloading builds a new set.
"""

__all__ = [
    "ApartmentStatus",
    "SubjectLabels",
    "ColumnSchema",
    "StatusLegend",
    "RawField",
    "RawRecord",
    "ApartmentRecord",
    "STATUS_TOKENS",
    "map_status_value",
]


class ApartmentStatus(Enum):
    """Canonical sales status of an apartment.

    The numeric code is what the sheet (and the legend) use: 1/2/3.
    """
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"

    @property
    def code(self) -> str:
        return _STATUS_CODES[self]

    @classmethod
    def parse(cls, value: str) -> ApartmentStatus:
        """Parse a canonical name (``"sold"``) or code (``"3"``); raises ValueError."""
        token = value.strip().lower()
        for status in cls:
            if token in (status.value, status.code):
                return status
        raise ValueError(f"unknown apartment status: {value!r}")


_STATUS_CODES = {
    ApartmentStatus.AVAILABLE: "1",
    ApartmentStatus.RESERVED: "2",
    ApartmentStatus.SOLD: "3",
}

# Lexical table used for classification (lower-cased keys).
STATUS_TOKENS: Mapping[str, ApartmentStatus] = MappingProxyType({
    "1": ApartmentStatus.AVAILABLE,
    "2": ApartmentStatus.RESERVED,
    "3": ApartmentStatus.SOLD,
    "available": ApartmentStatus.AVAILABLE,
    "reserved": ApartmentStatus.RESERVED,
    "sold": ApartmentStatus.SOLD,
    "free": ApartmentStatus.AVAILABLE,
    "слободен": ApartmentStatus.AVAILABLE,
    "резервиран": ApartmentStatus.RESERVED,
    "продаден": ApartmentStatus.SOLD,
})


def map_status_value(value: str | None) -> ApartmentStatus:
    """Map a raw sheet status token to a canonical status (unknown -> available)."""
    if not value:
        return ApartmentStatus.AVAILABLE
    return STATUS_TOKENS.get(value.strip().lower(), ApartmentStatus.AVAILABLE)


@dataclass(frozen=True)
class SubjectLabels:
    """Column subject in the three site languages (mk is canonical)."""
    mk: str = ""
    en: str = ""
    sq: str = ""

    def for_language(self, lang: str) -> str:
        """Label in ``lang``, falling back to the canonical Macedonian label."""
        label = getattr(self, lang, "") if lang in ("mk", "en", "sq") else ""
        return label or self.mk


def _column_letter(index: int) -> str:
    letters = ""
    n = index + 1
    while n > 0:
        n, rem = divmod(n - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


@dataclass(frozen=True)
class ColumnSchema:
    """One apartment-data column between the two anchors."""
    column_index: int
    filter_keyword: str
    is_visible: bool
    subjects: SubjectLabels

    @property
    def subject(self) -> str:
        return self.subjects.mk

    @property
    def column_letter(self) -> str:
        return _column_letter(self.column_index)


@dataclass(frozen=True)
class StatusLegend:
    """Raw status token -> display text, as published next to anchor2.

    Display only; classification uses STATUS_TOKENS.
    """
    entries: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    def __len__(self) -> int:
        return len(self.entries)

    def display_text(self, token: str) -> str | None:
        return self.entries.get(token)

    def status_for(self, token: str) -> ApartmentStatus:
        return map_status_value(token)

    def display_for_status(self, status: ApartmentStatus) -> str:
        """Display text for a canonical status, falling back to its name."""
        for token, text in self.entries.items():
            if map_status_value(token) is status:
                return text
        return status.value


@dataclass(frozen=True)
class RawField:
    """Raw cell of one apartment row, with its column metadata."""
    value: str
    filter_keyword: str
    is_visible: bool
    column_index: int
    subjects: SubjectLabels


@dataclass(frozen=True)
class RawRecord:
    """Apartment row before field normalisation."""
    id: str
    row_index: int
    fields: Mapping[str, RawField]


@dataclass(frozen=True)
class ApartmentRecord:
    """Normalised apartment (or office space) served to the viewer.

    ``id`` must match the ``data-name`` attribute of the SVG overlay shape
    exactly (case and whitespace sensitive).
    """
    id: str
    row_index: int
    is_office_space: bool
    bedrooms: int | None
    floor: int | None
    area: float | None
    status: ApartmentStatus
    status_value: str | None
    raw_fields: Mapping[str, RawField]
    area_detection_method: str | None = None

    def visible_fields(self) -> dict[str, str]:
        """Subject -> value for the columns ticked visible in the sheet."""
        return {subject: f.value for subject, f in self.raw_fields.items() if f.is_visible}
