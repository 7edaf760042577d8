from __future__ import annotations

import logging
from datetime import datetime, timezone

from parkline.models.apartment import (
    ApartmentRecord,
    ApartmentStatus,
    ColumnSchema,
    RawField,
    StatusLegend,
    SubjectLabels,
)
from parkline.models.load_result import DetectionStats, LoadSource, RecordSet

from .defaults import DEMO_STATUSES

"""Deterministic synthetic record set served when the sheet cannot be loaded.

81 apartments ``1.1`` .. ``9.9`` (floor.unit). Building it has no inputs and
no I/O, so the fallback itself cannot fail.
"""

__all__ = ["SAMPLE_LEGEND", "SAMPLE_SCHEMA", "build_sample_records", "build_sample_record_set"]

logger = logging.getLogger(__name__)

FLOORS = range(1, 10)
UNITS = range(1, 10)
BEDROOM_TYPES = (1, 2, 2, 3, 4)
BASE_AREA = {1: 50, 2: 75, 3: 105, 4: 135}
PRICE_PER_M2 = 1800

SAMPLE_LEGEND = StatusLegend({"1": "Слободен", "2": "Резервиран", "3": "Продаден"})

SAMPLE_SCHEMA = tuple(
    ColumnSchema(column_index=i + 2, filter_keyword=keyword, is_visible=True, subjects=SubjectLabels(mk=subject, en=subject))
    for i, (subject, keyword) in enumerate((
        ("Type", "TYPE"),
        ("Bedrooms", "BEDROOMS"),
        ("Floor", "FLOORS"),
        ("Net Area", "AREA"),
        ("Price", "PRICE"),
        ("Status", "STATUS"),
    ))
)


def _area_offset(floor: int, unit: int) -> int:
    """Fixed per-unit variation in [-10, 10]."""
    return (floor * 7 + unit * 3) % 21 - 10


def _sample_record(floor: int, unit: int, row_index: int) -> ApartmentRecord:
    status: ApartmentStatus = DEMO_STATUSES[(floor + unit) % len(DEMO_STATUSES)]
    bedrooms = BEDROOM_TYPES[unit % len(BEDROOM_TYPES)]
    area = float(BASE_AREA.get(bedrooms, 80) + _area_offset(floor, unit))
    values = {
        "Type": f"{bedrooms}BR",
        "Bedrooms": str(bedrooms),
        "Floor": str(floor),
        "Net Area": f"{area:.1f}",
        "Price": f"€{int(area) * PRICE_PER_M2:,}",
        "Status": status.code,
    }
    fields = {
        column.subject: RawField(
            value=values[column.subject],
            filter_keyword=column.filter_keyword,
            is_visible=column.is_visible,
            column_index=column.column_index,
            subjects=column.subjects,
        )
        for column in SAMPLE_SCHEMA
    }
    return ApartmentRecord(
        id=f"{floor}.{unit}",
        row_index=row_index,
        is_office_space=False,
        bedrooms=bedrooms,
        floor=floor,
        area=area,
        status=status,
        status_value=status.code,
        raw_fields=fields,
        area_detection_method="sample data",
    )


def build_sample_records() -> list[ApartmentRecord]:
    records: list[ApartmentRecord] = []
    for floor in FLOORS:
        for unit in UNITS:
            records.append(_sample_record(floor, unit, row_index=len(records)))
    return records


def build_sample_record_set() -> RecordSet:
    records = build_sample_records()
    record_set = RecordSet(
        records=tuple(records),
        schema=SAMPLE_SCHEMA,
        legend=SAMPLE_LEGEND,
        source=LoadSource.SAMPLE,
        stats=DetectionStats(total=len(records)),
        loaded_at=datetime.now(timezone.utc),
    )
    counts = record_set.count_by_status()
    logger.warning(
        "using sample data: apartments=%d available=%d reserved=%d sold=%d",
        len(record_set),
        counts[ApartmentStatus.AVAILABLE],
        counts[ApartmentStatus.RESERVED],
        counts[ApartmentStatus.SOLD],
    )
    return record_set
