from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from parkline.models.apartment import ApartmentRecord, ApartmentStatus
from parkline.models.crm import AnalyticsEvent

"""Aggregations for the sales overview and the visitor analytics dashboard.

Both summaries are built on a pandas DataFrame of the input rows; the result
types are plain dataclasses so callers never handle pandas objects.
"""

__all__ = [
    "InventorySummary",
    "EventSummary",
    "ApartmentClicks",
    "summarize_inventory",
    "summarize_events",
    "TOP_APARTMENTS_LIMIT",
]

TOP_APARTMENTS_LIMIT = 10

EVENT_APARTMENT_CLICK = "apartment_click"
EVENT_INTERESTED_CLICK = "interested_button_click"
EVENT_FILTER_CHANGE = "filter_change"
EVENT_FILTERS_APPLIED = "filters_applied"
EVENT_FILTERS_CLEARED = "filters_clear_restore"


@dataclass(frozen=True)
class InventorySummary:
    total: int
    status_counts: dict[ApartmentStatus, int]
    status_percentages: dict[ApartmentStatus, int]
    bedroom_counts: dict[int, int]  # non-office records only
    floor_counts: dict[int, int]
    office_count: int = 0
    area_min: float | None = None
    area_max: float | None = None
    area_average: int | None = None


@dataclass(frozen=True)
class ApartmentClicks:
    apartment_id: str
    count: int
    status: str = "unknown"
    bedrooms: Any = None
    floor: Any = None
    area: Any = None
    is_office_space: bool = False


@dataclass(frozen=True)
class EventSummary:
    total_events: int
    unique_visitors: int
    apartment_clicks: int
    interested_clicks: int
    top_apartments: list[ApartmentClicks] = field(default_factory=list)
    event_breakdown: dict[str, int] = field(default_factory=dict)
    filter_usage: dict[str, int] = field(default_factory=dict)


def _inventory_frame(records: Sequence[ApartmentRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": r.id,
                "office": r.is_office_space,
                "bedrooms": r.bedrooms,
                "floor": r.floor,
                "area": r.area,
                "status": r.status.value,
            }
            for r in records
        ],
        columns=["id", "office", "bedrooms", "floor", "area", "status"],
    )


def _int_counts(series: pd.Series) -> dict[int, int]:
    counts = series.dropna().astype(int).value_counts().sort_index()
    return {int(k): int(v) for k, v in counts.items()}


def summarize_inventory(records: Sequence[ApartmentRecord]) -> InventorySummary:
    """Totals, status split, bedroom / floor histograms and area statistics.

    Percentages are rounded to whole numbers and may not add up to 100.
    """
    df = _inventory_frame(records)
    total = len(df)
    by_status = df["status"].value_counts()
    status_counts = {s: int(by_status.get(s.value, 0)) for s in ApartmentStatus}
    status_percentages = {
        s: (round(n / total * 100) if total else 0) for s, n in status_counts.items()
    }

    apartments = df[~df["office"].astype(bool)]
    areas = pd.to_numeric(df["area"], errors="coerce").dropna()

    return InventorySummary(
        total=total,
        status_counts=status_counts,
        status_percentages=status_percentages,
        bedroom_counts=_int_counts(apartments["bedrooms"]),
        floor_counts=_int_counts(df["floor"]),
        office_count=int(df["office"].astype(bool).sum()),
        area_min=float(areas.min()) if not areas.empty else None,
        area_max=float(areas.max()) if not areas.empty else None,
        area_average=round(float(areas.mean())) if not areas.empty else None,
    )


def _event_frame(events: Iterable[AnalyticsEvent]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "event_type": e.event_type,
                "visitor_id": e.visitor_id,
                "session_id": e.session_id,
                "event_data": e.event_data or {},
            }
            for e in events
        ],
        columns=["event_type", "visitor_id", "session_id", "event_data"],
    )


def _top_apartments(df: pd.DataFrame, limit: int) -> list[ApartmentClicks]:
    clicks = df[df["event_type"] == EVENT_APARTMENT_CLICK]
    rows = [d for d in clicks["event_data"] if d.get("apartment_id")]
    if not rows:
        return []
    data = pd.DataFrame(rows)
    data["apartment_id"] = data["apartment_id"].astype(str)
    counts = data["apartment_id"].value_counts()
    # first click carries the apartment details shown in the table
    first = data.drop_duplicates("apartment_id").set_index("apartment_id")
    # ties keep first-seen order
    order = sorted(first.index, key=lambda k: -int(counts[k]))
    result: list[ApartmentClicks] = []
    for apartment_id in order[:limit]:
        details = first.loc[apartment_id]
        result.append(
            ApartmentClicks(
                apartment_id=apartment_id,
                count=int(counts[apartment_id]),
                status=_detail(details, "status") or "unknown",
                bedrooms=_detail(details, "bedrooms"),
                floor=_detail(details, "floor"),
                area=_detail(details, "area"),
                is_office_space=bool(_detail(details, "is_office_space") or False),
            )
        )
    return result


def _detail(details: pd.Series, key: str) -> Any:
    value = details.get(key)
    if value is None or (not isinstance(value, (list, dict)) and pd.isna(value)):
        return None
    return value.item() if hasattr(value, "item") else value


def summarize_events(events: Iterable[AnalyticsEvent], top_limit: int = TOP_APARTMENTS_LIMIT) -> EventSummary:
    """Dashboard aggregation over ``analytics_events`` rows."""
    df = _event_frame(events)
    if df.empty:
        return EventSummary(total_events=0, unique_visitors=0, apartment_clicks=0, interested_clicks=0)

    types = df["event_type"]
    breakdown = types.value_counts()
    filter_types = df["event_data"].map(lambda d: d.get("filter_type"))
    filter_events = types.str.contains("filter")

    return EventSummary(
        total_events=len(df),
        unique_visitors=int(df["visitor_id"].nunique()),
        apartment_clicks=int((types == EVENT_APARTMENT_CLICK).sum()),
        interested_clicks=int((types == EVENT_INTERESTED_CLICK).sum()),
        top_apartments=_top_apartments(df, top_limit),
        event_breakdown={str(k): int(v) for k, v in breakdown.items()},
        filter_usage={
            "total_filter_changes": int(filter_events.sum()),
            "bedroom_toggles": int(((types == EVENT_FILTER_CHANGE) & (filter_types == "bedroom_toggle")).sum()),
            "filters_applied": int((types == EVENT_FILTERS_APPLIED).sum()),
            "filters_cleared": int((types == EVENT_FILTERS_CLEARED).sum()),
        },
    )
