from __future__ import annotations

import re
from datetime import datetime, timezone

import pytest

from parkline.models.load_result import DetectionStats, LoadResult, LoadSource, RecordSet
from parkline.services.sample_data import SAMPLE_LEGEND, build_sample_record_set, build_sample_records
from parkline.services.summary import format_seconds, render_summary_line

"""Unit tests for SUMMARY line rendering."""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY source=(sheet|local_file|sample) apartments=([0-9]+) offices=([0-9]+) "
    r"available=([0-9]+) reserved=([0-9]+) sold=([0-9]+) area_keyword=([0-9]+) "
    r"area_subject=([0-9]+) area_pattern=([0-9]+) area_default=([0-9]+) "
    r"elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def _record_set(source: LoadSource, stats: DetectionStats) -> RecordSet:
    records = tuple(build_sample_records()[:10])
    return RecordSet(
        records=records,
        schema=(),
        legend=SAMPLE_LEGEND,
        source=source,
        stats=stats,
        loaded_at=datetime(2025, 9, 3, tzinfo=timezone.utc),
    )


def test_render_summary_line_sheet():
    stats = DetectionStats(area_by_keyword=6, area_by_subject=2, area_by_pattern=1, area_by_default=1, total=10)
    line = render_summary_line(LoadResult(_record_set(LoadSource.SHEET, stats), elapsed_seconds=0.25))
    m = SUMMARY_PATTERN.match(line)
    assert m is not None
    assert m.group(1) == "sheet"
    assert m.group(2) == "10"
    assert m.group(3) == "0"
    assert int(m.group(4)) + int(m.group(5)) + int(m.group(6)) == 10
    assert (m.group(7), m.group(8), m.group(9), m.group(10)) == ("6", "2", "1", "1")
    assert line.endswith("elapsed_sec=0.25")


def test_render_summary_line_sample_fallback():
    result = LoadResult(build_sample_record_set(), elapsed_seconds=1.0, error="HTTP 404")
    line = render_summary_line(result)
    assert SUMMARY_PATTERN.match(line)
    assert "source=sample apartments=81 offices=0" in line
    assert "area_keyword=0 area_subject=0 area_pattern=0 area_default=0" in line
    assert line.endswith("elapsed_sec=1")


def test_summary_key_order_is_fixed():
    line = render_summary_line(LoadResult(build_sample_record_set(), 0.5))
    keys = [part.split("=")[0] for part in line.split()[1:]]
    assert keys == [
        "source", "apartments", "offices", "available", "reserved", "sold",
        "area_keyword", "area_subject", "area_pattern", "area_default", "elapsed_sec",
    ]


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0"), (-1, "0"), (2.0, "2"), (0.5, "0.5"), (1.234567891, "1.234568"), (0.0000001, "0")],
)
def test_format_seconds(seconds: float, expected: str):
    assert format_seconds(seconds) == expected
