from __future__ import annotations

from datetime import datetime, timezone

import pytest

from parkline.models.apartment import (
    ApartmentRecord,
    ApartmentStatus,
    ColumnSchema,
    StatusLegend,
    SubjectLabels,
    map_status_value,
)
from parkline.models.crm import LeadStatus
from parkline.models.filter_criteria import FilterCriteria
from parkline.models.load_result import DetectionStats, LoadResult, LoadSource, RecordSet


@pytest.mark.parametrize("token, expected", [
    ("1", ApartmentStatus.AVAILABLE),
    ("sold", ApartmentStatus.SOLD),
    (" 2 ", ApartmentStatus.RESERVED),
])
def test_status_parse(token, expected):
    assert ApartmentStatus.parse(token) is expected


def test_status_parse_unknown():
    with pytest.raises(ValueError, match="unknown apartment status"):
        ApartmentStatus.parse("maybe")


@pytest.mark.parametrize("value, expected", [
    (None, ApartmentStatus.AVAILABLE),
    ("", ApartmentStatus.AVAILABLE),
    ("Продаден", ApartmentStatus.SOLD),
    ("RESERVED", ApartmentStatus.RESERVED),
    ("free", ApartmentStatus.AVAILABLE),
    ("7", ApartmentStatus.AVAILABLE),
])
def test_map_status_value(value, expected):
    assert map_status_value(value) is expected


def test_legend_lookup():
    legend = StatusLegend({"1": "Слободен", "3": "Продаден"})
    assert len(legend) == 2
    assert legend.display_text("1") == "Слободен"
    assert legend.display_text("2") is None
    assert legend.display_for_status(ApartmentStatus.SOLD) == "Продаден"
    assert legend.display_for_status(ApartmentStatus.RESERVED) == "reserved"
    with pytest.raises(TypeError):
        legend.entries["2"] = "x"  # type: ignore[index]


@pytest.mark.parametrize("index, letter", [(0, "A"), (2, "C"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ")])
def test_column_letter(index, letter):
    col = ColumnSchema(column_index=index, filter_keyword="", is_visible=True, subjects=SubjectLabels(mk="x"))
    assert col.column_letter == letter


def test_subject_language_fallback():
    labels = SubjectLabels(mk="Спрат", en="Floor")
    assert labels.for_language("en") == "Floor"
    assert labels.for_language("sq") == "Спрат"
    assert labels.for_language("de") == "Спрат"


def _rec(apartment_id: str, status=ApartmentStatus.AVAILABLE, office=False) -> ApartmentRecord:
    return ApartmentRecord(
        id=apartment_id, row_index=0, is_office_space=office, bedrooms=None, floor=1,
        area=50.0, status=status, status_value=status.code, raw_fields={},
    )


def test_record_set_index_first_wins():
    first, second = _rec("1.1"), _rec("1.1", ApartmentStatus.SOLD)
    rs = RecordSet(
        records=(first, second, _rec("ДП1", office=True)),
        schema=(),
        legend=StatusLegend(),
        source=LoadSource.SHEET,
        stats=DetectionStats(),
        loaded_at=datetime.now(timezone.utc),
    )
    assert rs.by_id["1.1"] is first
    assert len(rs) == 3
    assert rs.office_count == 1
    assert rs.count_by_status() == {
        ApartmentStatus.AVAILABLE: 2, ApartmentStatus.RESERVED: 0, ApartmentStatus.SOLD: 1,
    }
    assert LoadResult(rs, 0.1).fell_back is False


def test_detection_stats_percentage():
    stats = DetectionStats(area_by_keyword=2, total=3)
    assert stats.percentage(2) == 67
    assert DetectionStats().percentage(5) == 0


def test_filter_criteria_build():
    c = FilterCriteria.build([1, 2, 2], [1, 24], [30, 200])
    assert c.bedrooms == frozenset({1, 2})
    assert c.floors == (1, 24)
    assert c.area == (30, 200)
    assert c.status == frozenset()
    assert FilterCriteria.build([], (0, 1), (0, 1), [ApartmentStatus.SOLD]).status == {ApartmentStatus.SOLD}


def test_visible_fields():
    from parkline.services.sample_data import build_sample_records

    rec = build_sample_records()[0]
    fields = rec.visible_fields()
    assert set(fields) == {"Type", "Bedrooms", "Floor", "Net Area", "Price", "Status"}


def test_lead_status_closed():
    assert LeadStatus.CLOSED_WON.is_closed
    assert not LeadStatus.NEGOTIATION.is_closed
