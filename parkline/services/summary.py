from __future__ import annotations

from ..models.apartment import ApartmentStatus
from ..models.load_result import LoadResult

"""SUMMARY line rendering for one load.

Format (one line, space separated key=value pairs, fixed key order):

SUMMARY source={sheet|local_file|sample} apartments={n} offices={n}
available={n} reserved={n} sold={n} area_keyword={n} area_subject={n}
area_pattern={n} area_default={n} elapsed_sec={elapsed}
"""

__all__ = ["render_summary_line", "format_seconds"]


def format_seconds(seconds: float) -> str:
    """Render elapsed seconds without scientific notation or trailing zeros."""
    if seconds <= 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    return f"{seconds:.6f}".rstrip("0").rstrip(".")


def render_summary_line(result: LoadResult) -> str:
    """Render the SUMMARY line for a LoadResult.

    Examples:
        >>> from parkline.services.sample_data import build_sample_record_set
        >>> line = render_summary_line(LoadResult(build_sample_record_set(), 0.5))
        >>> line.split()[:3]
        ['SUMMARY', 'source=sample', 'apartments=81']
    """
    record_set = result.record_set
    stats = record_set.stats
    counts = record_set.count_by_status()
    return (
        f"SUMMARY source={record_set.source.value} "
        f"apartments={len(record_set)} "
        f"offices={record_set.office_count} "
        f"available={counts[ApartmentStatus.AVAILABLE]} "
        f"reserved={counts[ApartmentStatus.RESERVED]} "
        f"sold={counts[ApartmentStatus.SOLD]} "
        f"area_keyword={stats.area_by_keyword} "
        f"area_subject={stats.area_by_subject} "
        f"area_pattern={stats.area_by_pattern} "
        f"area_default={stats.area_by_default} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
