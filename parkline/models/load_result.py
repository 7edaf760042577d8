from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .apartment import ApartmentRecord, ApartmentStatus, ColumnSchema, StatusLegend

"""Load result models.

RecordSet is the immutable unit the repository publishes; DetectionStats
carries the normaliser's per-method counters (logged and rendered into the
SUMMARY line).
"""


class LoadSource(Enum):
    """Where the published record set came from."""
    SHEET = "sheet"
    LOCAL_FILE = "local_file"
    SAMPLE = "sample"


@dataclass
class DetectionStats:
    """Counters accumulated during one normalisation pass."""
    area_by_keyword: int = 0
    area_by_subject: int = 0
    area_by_pattern: int = 0
    area_by_default: int = 0
    bedrooms_by_default: int = 0
    floors_by_default: int = 0
    status_by_default: int = 0
    total: int = 0

    def percentage(self, count: int) -> int:
        if self.total == 0:
            return 0
        return round(count / self.total * 100)


@dataclass(frozen=True)
class RecordSet:
    """A fully normalised, read-only apartment record set."""
    records: tuple[ApartmentRecord, ...]
    schema: tuple[ColumnSchema, ...]
    legend: StatusLegend
    source: LoadSource
    stats: DetectionStats
    loaded_at: datetime
    by_id: Mapping[str, ApartmentRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.by_id:
            index: dict[str, ApartmentRecord] = {}
            for rec in self.records:
                index.setdefault(rec.id, rec)
            object.__setattr__(self, "by_id", MappingProxyType(index))

    def __len__(self) -> int:
        return len(self.records)

    @property
    def office_count(self) -> int:
        return sum(1 for r in self.records if r.is_office_space)

    def count_by_status(self) -> dict[ApartmentStatus, int]:
        counts = {s: 0 for s in ApartmentStatus}
        for rec in self.records:
            counts[rec.status] += 1
        return counts


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one load attempt (sheet or fallback)."""
    record_set: RecordSet
    elapsed_seconds: float
    error: str | None = None  # set when the attempt fell back to sample data

    @property
    def fell_back(self) -> bool:
        return self.record_set.source is LoadSource.SAMPLE
