from __future__ import annotations

from dataclasses import dataclass, field

from .apartment import ApartmentStatus

"""Filter criteria for the apartment query layer.

Note the asymmetry carried over from the site's filter panel: an empty
``bedrooms`` set hides every apartment (no bedroom button selected), while an
empty ``status`` set means "no status restriction".
"""

__all__ = [
    "FilterCriteria",
    "FilterBounds",
    "ALL_STATUSES",
]

ALL_STATUSES = frozenset(ApartmentStatus)


@dataclass(frozen=True)
class FilterCriteria:
    bedrooms: frozenset[int]
    floors: tuple[int, int]
    area: tuple[float, float]
    status: frozenset[ApartmentStatus] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        bedrooms: set[int] | frozenset[int] | list[int],
        floors: tuple[int, int] | list[int],
        area: tuple[float, float] | list[float],
        status: set[ApartmentStatus] | frozenset[ApartmentStatus] | list[ApartmentStatus] | None = None,
    ) -> FilterCriteria:
        """Convenience constructor accepting lists (as the site sends them)."""
        return cls(
            bedrooms=frozenset(bedrooms),
            floors=(floors[0], floors[1]),
            area=(area[0], area[1]),
            status=frozenset(status or ()),
        )


@dataclass(frozen=True)
class FilterBounds:
    """Full ranges available in a record set (initial slider positions)."""
    bedrooms: tuple[int, ...]
    floors: tuple[int, int]
    area: tuple[float, float]
