from __future__ import annotations

from parkline.models.apartment import ApartmentRecord, ApartmentStatus
from parkline.models.filter_criteria import FilterBounds, FilterCriteria
from parkline.services.query import (
    DEFAULT_AREA_RANGE,
    DEFAULT_FLOOR_RANGE,
    default_criteria,
    derive_filter_bounds,
    filter_apartments,
    get_by_id,
    get_by_status,
)


def apt(
    apartment_id: str,
    bedrooms: int | None,
    floor: int | None,
    area: float | None,
    status: ApartmentStatus = ApartmentStatus.AVAILABLE,
    office: bool = False,
) -> ApartmentRecord:
    return ApartmentRecord(
        id=apartment_id,
        row_index=0,
        is_office_space=office,
        bedrooms=bedrooms,
        floor=floor,
        area=area,
        status=status,
        status_value=status.code,
        raw_fields={},
    )


RECORDS = [
    apt("1.1", 2, 1, 70, ApartmentStatus.AVAILABLE),
    apt("2.1", 3, 2, 95, ApartmentStatus.SOLD),
]


def ids(records) -> list[str]:
    return [r.id for r in records]


def test_filter_scenario():
    criteria = FilterCriteria.build(bedrooms=[2], floors=[1, 5], area=[50, 100], status=[ApartmentStatus.AVAILABLE])
    assert ids(filter_apartments(RECORDS, criteria)) == ["1.1"]


def test_empty_bedroom_set_excludes_apartments():
    criteria = FilterCriteria.build(bedrooms=[], floors=[0, 50], area=[0, 1000])
    assert filter_apartments(RECORDS, criteria) == []


def test_empty_status_set_does_not_restrict():
    criteria = FilterCriteria.build(bedrooms=[2, 3], floors=[0, 50], area=[0, 1000], status=[])
    assert ids(filter_apartments(RECORDS, criteria)) == ["1.1", "2.1"]


def test_office_passes_any_bedroom_selection():
    office = apt("ДП3", None, 0, 50, office=True)
    for bedrooms in ([], [1], [4]):
        criteria = FilterCriteria.build(bedrooms=bedrooms, floors=[0, 5], area=[0, 100])
        assert ids(filter_apartments([office], criteria)) == ["ДП3"]


def test_ranges_are_inclusive():
    criteria = FilterCriteria.build(bedrooms=[2, 3], floors=[1, 2], area=[70, 95])
    assert ids(filter_apartments(RECORDS, criteria)) == ["1.1", "2.1"]
    criteria = FilterCriteria.build(bedrooms=[2, 3], floors=[1, 1], area=[70.5, 95])
    assert filter_apartments(RECORDS, criteria) == []


def test_missing_floor_or_area_never_matches():
    records = [apt("a", 2, None, 70), apt("b", 2, 1, None)]
    criteria = FilterCriteria.build(bedrooms=[2], floors=[0, 100], area=[0, 1000])
    assert filter_apartments(records, criteria) == []


def test_filter_keeps_input_order():
    records = [apt(str(i), 2, 1, 60) for i in (5, 3, 9, 1)]
    criteria = FilterCriteria.build(bedrooms=[2], floors=[1, 1], area=[0, 100])
    assert ids(filter_apartments(records, criteria)) == ["5", "3", "9", "1"]


def test_get_by_id_exact_match():
    assert get_by_id(RECORDS, "2.1").bedrooms == 3
    assert get_by_id(RECORDS, " 2.1") is None
    assert get_by_id(RECORDS, "9.9") is None


def test_get_by_status():
    assert ids(get_by_status(RECORDS, ApartmentStatus.SOLD)) == ["2.1"]
    assert get_by_status(RECORDS, ApartmentStatus.RESERVED) == []


def test_derive_filter_bounds():
    records = RECORDS + [apt("ДП1", None, 0, 120, office=True), apt("x", 0, -1, 5)]
    bounds = derive_filter_bounds(records)
    assert bounds.bedrooms == (2, 3)
    assert bounds.floors == (0, 2)
    assert bounds.area == (60.0, 130.0)


def test_derive_filter_bounds_lower_area_clamped():
    bounds = derive_filter_bounds([apt("a", 1, 1, 15.5)])
    assert bounds.area == (10.0, 26.0)


def test_derive_filter_bounds_defaults_when_empty():
    bounds = derive_filter_bounds([])
    assert bounds == FilterBounds(bedrooms=(), floors=DEFAULT_FLOOR_RANGE, area=DEFAULT_AREA_RANGE)


def test_default_criteria_selects_everything():
    bounds = derive_filter_bounds(RECORDS)
    criteria = default_criteria(bounds)
    assert criteria.status == frozenset()
    assert ids(filter_apartments(RECORDS, criteria)) == ["1.1", "2.1"]
