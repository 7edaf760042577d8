from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from parkline.models.apartment import ApartmentRecord, ApartmentStatus
from parkline.models.filter_criteria import FilterBounds, FilterCriteria

"""Query layer over a normalised record set.

All functions are pure and keep input order. ``filter_apartments`` is the
contract the floor-plan viewer relies on; the bound helpers reproduce the
initial state of the site's filter panel.
"""

__all__ = [
    "filter_apartments",
    "matches",
    "get_by_id",
    "get_by_status",
    "derive_filter_bounds",
    "default_criteria",
    "DEFAULT_FLOOR_RANGE",
    "DEFAULT_AREA_RANGE",
]

DEFAULT_FLOOR_RANGE = (1, 24)
DEFAULT_AREA_RANGE = (30.0, 200.0)
AREA_PADDING = 10
MIN_AREA_BOUND = 10
NEGLIGIBLE_AREA = 10  # areas at or below are ignored when deriving bounds


def matches(record: ApartmentRecord, criteria: FilterCriteria) -> bool:
    # office spaces pass every bedroom selection, including the empty one
    if not record.is_office_space and record.bedrooms not in criteria.bedrooms:
        return False
    if record.floor is None or not (criteria.floors[0] <= record.floor <= criteria.floors[1]):
        return False
    if record.area is None or not (criteria.area[0] <= record.area <= criteria.area[1]):
        return False
    if criteria.status and record.status not in criteria.status:
        return False
    return True


def filter_apartments(records: Iterable[ApartmentRecord], criteria: FilterCriteria) -> list[ApartmentRecord]:
    """Records satisfying every criterion, in input order.

    An empty ``bedrooms`` set excludes every non-office record; an empty
    ``status`` set does not restrict status at all.
    """
    return [r for r in records if matches(r, criteria)]


def get_by_id(records: Iterable[ApartmentRecord], apartment_id: str) -> ApartmentRecord | None:
    """Exact, case-sensitive id lookup (ids match SVG ``data-name`` values)."""
    for record in records:
        if record.id == apartment_id:
            return record
    return None


def get_by_status(records: Iterable[ApartmentRecord], status: ApartmentStatus) -> list[ApartmentRecord]:
    return [r for r in records if r.status is status]


def derive_filter_bounds(records: Sequence[ApartmentRecord]) -> FilterBounds:
    """Full ranges present in ``records`` for the filter panel.

    Bedrooms: distinct positive counts of non-office records. Floors: min/max
    over known floors >= 0. Area: min/max over areas above 10 m², padded by
    10 m² on each side (lower bound never below 10).
    """
    bedrooms = sorted({
        r.bedrooms for r in records
        if not r.is_office_space and r.bedrooms is not None and r.bedrooms > 0
    })

    floors = [r.floor for r in records if r.floor is not None and r.floor >= 0]
    floor_range = (min(floors), max(floors)) if floors else DEFAULT_FLOOR_RANGE

    areas = [r.area for r in records if r.area is not None and r.area > NEGLIGIBLE_AREA]
    if areas:
        area_range = (
            float(max(math.floor(min(areas) - AREA_PADDING), MIN_AREA_BOUND)),
            float(math.ceil(max(areas) + AREA_PADDING)),
        )
    else:
        area_range = DEFAULT_AREA_RANGE

    return FilterBounds(bedrooms=tuple(bedrooms), floors=floor_range, area=area_range)


def default_criteria(bounds: FilterBounds) -> FilterCriteria:
    """Criteria with every bedroom button selected and full slider ranges."""
    return FilterCriteria(
        bedrooms=frozenset(bounds.bedrooms),
        floors=bounds.floors,
        area=bounds.area,
    )
