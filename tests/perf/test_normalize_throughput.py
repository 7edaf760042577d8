from __future__ import annotations

import time

from parkline.services.normalizer import normalize_records
from parkline.sheets.parser import parse_sheet

"""Throughput smoke test: parse + normalise a sheet far larger than the building."""

HEADER_LINES = 10
ROWS = 5_000


def _large_sheet(sheet_csv: str) -> str:
    header = sheet_csv.split("\r\n")[:HEADER_LINES]
    rows = [
        f',,{i // 100}.{i % 100},Стан,{i % 4 + 1},{i // 100},"{40 + i % 90},5 m²",€1,{i % 3 + 1},,,'
        for i in range(ROWS)
    ]
    return "\r\n".join(header + rows) + "\r\n"


def test_parse_and_normalize_throughput(sheet_csv: str):
    text = _large_sheet(sheet_csv)
    start = time.perf_counter()
    parsed = parse_sheet(text)
    records, stats = normalize_records(parsed.raw_records)
    elapsed = time.perf_counter() - start

    assert len(records) == ROWS
    assert stats.area_by_keyword == ROWS
    # lenient budget so CI stays green on slow runners
    assert elapsed < 10.0, f"normalisation too slow: {elapsed:.3f}s"
    assert ROWS / elapsed > 500
