from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from parkline.models.apartment import ApartmentRecord, ApartmentStatus, RawRecord, map_status_value
from parkline.models.config_models import PlausibilityBands
from parkline.models.load_result import DetectionStats

from .defaults import CyclingDefaults, DefaultStrategy
from .progress import ProgressTracker

"""Field normaliser.

Turns RawRecords into ApartmentRecords by deciding ``is_office_space``,
``bedrooms``, ``floor``, ``area`` and ``status`` for each row.

Each field is resolved by a fixed cascade, strongest method first:

1. pass 1, direct scan: per field an ordered list of FieldRules (filter
   keyword rule, then subject rule) is tested against every raw field in
   schema order; the first column that matches a rule AND parses to a
   plausible value wins.
2. pass 2 (area only): broader subject patterns, same plausibility band.
3. pass 3 (area only): every numeric value in the candidate band is scored
   by column position and subject words; the best score wins.
4. defaults: derived from the id where possible, otherwise the injected
   DefaultStrategy / fixed tables.

A field set by a method is never revisited by a weaker one. The normaliser
never raises: missing data degrades to defaults.
"""

__all__ = [
    "OFFICE_PREFIX",
    "FieldView",
    "FieldRule",
    "STATUS_RULES",
    "BEDROOM_RULES",
    "FLOOR_RULES",
    "AREA_RULES",
    "AREA_FALLBACK_PATTERNS",
    "extract_number",
    "is_office_space",
    "area_priority",
    "default_bedrooms",
    "default_area",
    "floor_from_id",
    "normalize_record",
    "normalize_records",
]

logger = logging.getLogger(__name__)

OFFICE_PREFIX = "ДП"
OFFICE_FLOOR = 0
OFFICE_DEFAULT_AREA = 50.0
DEFAULT_BEDROOMS = 2
FALLBACK_AREA = 80.0
AREA_BY_BEDROOMS = {1: 45.0, 2: 75.0, 3: 105.0, 4: 135.0, 5: 165.0}

AREA_FALLBACK_PATTERNS = (
    "нето", "net", "total", "вкупно", "површина", "area", "м²", "m2", "square", "surface",
)

# (substring, weight) applied to the lower-cased subject in pass 3
AREA_SUBJECT_WEIGHTS = (
    ("area", 20),
    ("вкупно", 25),
    ("total", 15),
    (("м²", "m2"), 15),
    ("net", 10),
    ("surface", 10),
    ("price", -20),
    ("цена", -20),
    ("floor", -15),
    ("спрат", -15),
)

_NUMBER_CHARS = re.compile(r"[^\d.,]")
_LEADING_FLOAT = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_FIRST_DIGITS = re.compile(r"\d+")
_FLOOR_PREFIX = re.compile(r"^(\d+)\.")


def extract_number(value: Any) -> float | None:
    """Extract a number from a sheet cell.

    Keeps digits, dots and commas, turns commas into dots and parses the
    longest leading float ("85,5 m²" -> 85.5, "1.250.000" -> 1.25).
    Returns None, never 0, when nothing parses.
    """
    if value is None:
        return None
    cleaned = _NUMBER_CHARS.sub("", str(value)).replace(",", ".")
    m = _LEADING_FLOAT.match(cleaned)
    if not m:
        return None
    return float(m.group(0))


def _contains_any(text: str, needles: Iterable[str]) -> bool:
    return any(n in text for n in needles)


@dataclass(frozen=True)
class FieldView:
    """One raw field as seen by the rules (keyword/subject lower-cased)."""
    subject: str
    keyword: str
    value: str
    column_index: int

    @property
    def subject_lower(self) -> str:
        return self.subject.lower()


@dataclass(frozen=True)
class FieldRule:
    """Predicate + parser; ``parse`` returns None to reject the value."""
    name: str
    matches: Callable[[FieldView], bool]
    parse: Callable[[str], Any]


def _in_band(low: float, high: float, *, include_high: bool) -> Callable[[str], float | None]:
    def parse(value: str) -> float | None:
        number = extract_number(value)
        if number is None:
            return None
        if number > low and (number <= high if include_high else number < high):
            return number
        return None
    return parse


def _parse_status(value: str) -> ApartmentStatus:
    return map_status_value(value)


def _build_rules(bands: PlausibilityBands) -> dict[str, tuple[FieldRule, ...]]:
    bedrooms = _in_band(*bands.bedrooms, include_high=True)
    floor = _in_band(*bands.floor, include_high=True)
    area = _in_band(*bands.area, include_high=False)
    return {
        "status": (
            FieldRule("keyword", lambda f: "status" in f.keyword, _parse_status),
            FieldRule("subject", lambda f: _contains_any(f.subject_lower, ("status", "статус")), _parse_status),
        ),
        "bedrooms": (
            FieldRule("keyword", lambda f: "bedroom" in f.keyword, bedrooms),
            FieldRule(
                "subject",
                lambda f: _contains_any(f.subject_lower, ("спални", "bedroom", "rooms", "br")),
                bedrooms,
            ),
        ),
        "floor": (
            FieldRule("keyword", lambda f: "floor" in f.keyword, floor),
            FieldRule(
                "subject",
                lambda f: _contains_any(f.subject_lower, ("спрат", "floor", "level", "етаж")),
                floor,
            ),
        ),
        "area": (
            FieldRule("keyword", lambda f: "area" in f.keyword, area),
            FieldRule(
                "subject",
                lambda f: _contains_any(f.subject_lower, ("вкупно", "area", "м²", "m2", "surface", "total")),
                area,
            ),
        ),
    }


_DEFAULT_RULES = _build_rules(PlausibilityBands())
STATUS_RULES = _DEFAULT_RULES["status"]
BEDROOM_RULES = _DEFAULT_RULES["bedrooms"]
FLOOR_RULES = _DEFAULT_RULES["floor"]
AREA_RULES = _DEFAULT_RULES["area"]


def is_office_space(apartment_id: str, prefix: str = OFFICE_PREFIX) -> bool:
    return apartment_id.strip().upper().startswith(prefix.upper())


def area_priority(subject: str, column_index: int) -> int:
    """Score a pass-3 area candidate by column position and subject words."""
    priority = 0
    if column_index >= 3:
        priority += 10
    if column_index >= 5:
        priority += 5
    subject_lower = subject.lower()
    for needles, weight in AREA_SUBJECT_WEIGHTS:
        if isinstance(needles, str):
            needles = (needles,)
        if _contains_any(subject_lower, needles):
            priority += weight
    return priority


def default_bedrooms(apartment_id: str) -> int:
    """Bedroom guess from the first digit run of the id (1-4), else 2."""
    m = _FIRST_DIGITS.search(apartment_id)
    if not m:
        return DEFAULT_BEDROOMS
    return min(max(int(m.group(0)) % 4 + 1, 1), 4)


def floor_from_id(apartment_id: str) -> int | None:
    """Floor from a leading ``N.`` in the id ("3.2" -> 3)."""
    m = _FLOOR_PREFIX.match(apartment_id)
    return int(m.group(1)) if m else None


def default_area(bedrooms: int | None, office: bool) -> float:
    if office:
        return OFFICE_DEFAULT_AREA
    return AREA_BY_BEDROOMS.get(bedrooms or 0, FALLBACK_AREA)


def _views(raw: RawRecord) -> list[FieldView]:
    return [
        FieldView(
            subject=subject,
            keyword=(f.filter_keyword or "").strip().lower(),
            value=(f.value or "").strip(),
            column_index=f.column_index,
        )
        for subject, f in raw.fields.items()
    ]


def _first_match(
    views: Sequence[FieldView], rules: Sequence[FieldRule]
) -> tuple[Any, FieldView, FieldRule] | None:
    """First column (schema order) matched by a rule and parsing to a value."""
    for view in views:
        for rule in rules:
            if not rule.matches(view):
                continue
            parsed = rule.parse(view.value)
            if parsed is not None:
                return parsed, view, rule
    return None


def _area_by_pattern(views: Sequence[FieldView], bands: PlausibilityBands) -> tuple[float, FieldView] | None:
    parse = _in_band(*bands.area, include_high=False)
    for view in views:
        if not _contains_any(view.subject_lower, AREA_FALLBACK_PATTERNS):
            continue
        number = parse(view.value)
        if number is not None:
            return number, view
    return None


def _area_by_candidates(
    views: Sequence[FieldView], bands: PlausibilityBands
) -> tuple[float, FieldView, int] | None:
    low, high = bands.area_candidate
    best: tuple[float, FieldView, int] | None = None
    for view in views:
        number = extract_number(view.value)
        if number is None or not (low <= number <= high):
            continue
        priority = area_priority(view.subject, view.column_index)
        if priority < 0:
            # price / floor columns are never area
            continue
        if best is None or priority > best[2]:
            best = (number, view, priority)
    return best


def normalize_record(
    raw: RawRecord,
    position: int,
    *,
    strategy: DefaultStrategy,
    bands: PlausibilityBands | None = None,
    office_prefix: str = OFFICE_PREFIX,
    stats: DetectionStats | None = None,
    rules: dict[str, tuple[FieldRule, ...]] | None = None,
) -> ApartmentRecord:
    """Normalise one raw record (``position`` feeds the default strategy)."""
    bands = bands or PlausibilityBands()
    rules = rules or (_DEFAULT_RULES if bands == PlausibilityBands() else _build_rules(bands))
    stats = stats if stats is not None else DetectionStats()
    views = _views(raw)

    office = is_office_space(raw.id, office_prefix)

    status: ApartmentStatus | None = None
    status_value: str | None = None
    found = _first_match(views, rules["status"])
    if found:
        status, view, _ = found
        status_value = view.value

    bedrooms: int | None = None
    if not office:
        found = _first_match(views, rules["bedrooms"])
        if found:
            bedrooms = int(found[0])

    floor: int | None = None
    found = _first_match(views, rules["floor"])
    if found:
        floor = int(found[0])

    area: float | None = None
    method: str | None = None
    found = _first_match(views, rules["area"])
    if found:
        area, view, rule = found
        if rule.name == "keyword":
            method = f'keyword "{view.keyword}" from "{view.subject}"'
        else:
            method = f'subject "{view.subject}"'
        stats.area_by_keyword += 1
    if area is None:
        by_pattern = _area_by_pattern(views, bands)
        if by_pattern:
            area, view = by_pattern
            method = f'subject pattern "{view.subject}"'
            stats.area_by_subject += 1
    if area is None:
        candidate = _area_by_candidates(views, bands)
        if candidate:
            area, view, priority = candidate
            method = f'pattern analysis "{view.subject}" (priority {priority})'
            stats.area_by_pattern += 1

    # defaults
    if bedrooms is None and not office:
        bedrooms = default_bedrooms(raw.id)
        stats.bedrooms_by_default += 1
        logger.debug("%s: bedrooms default %d", raw.id, bedrooms)

    if floor is None:
        if office:
            floor = OFFICE_FLOOR
        else:
            floor = floor_from_id(raw.id)
            if floor is None:
                floor = strategy.floor(position)
            stats.floors_by_default += 1
            logger.debug("%s: floor default %d", raw.id, floor)

    if area is None:
        area = default_area(bedrooms, office)
        method = "default for office space" if office else f"default for {bedrooms} bedrooms"
        stats.area_by_default += 1

    if status is None:
        status = strategy.status(position)
        status_value = status.code
        stats.status_by_default += 1
        logger.debug("%s: status default %s", raw.id, status.value)

    stats.total += 1
    return ApartmentRecord(
        id=raw.id,
        row_index=raw.row_index,
        is_office_space=office,
        bedrooms=bedrooms,
        floor=floor,
        area=area,
        status=status,
        status_value=status_value,
        raw_fields=raw.fields,
        area_detection_method=method,
    )


def normalize_records(
    raw_records: Sequence[RawRecord],
    *,
    strategy: DefaultStrategy | None = None,
    bands: PlausibilityBands | None = None,
    office_prefix: str = OFFICE_PREFIX,
    progress: ProgressTracker | None = None,
) -> tuple[list[ApartmentRecord], DetectionStats]:
    """Normalise all raw records in one pass.

    Rows repeating an already seen id are dropped (first row wins) so ids
    stay unique across the set.
    """
    strategy = strategy or CyclingDefaults()
    bands = bands or PlausibilityBands()
    rules = _DEFAULT_RULES if bands == PlausibilityBands() else _build_rules(bands)
    stats = DetectionStats()
    records: list[ApartmentRecord] = []
    seen: set[str] = set()
    for position, raw in enumerate(raw_records):
        if raw.id in seen:
            logger.warning("duplicate apartment id %r at row %d ignored", raw.id, raw.row_index + 1)
            if progress is not None:
                progress.advance()
            continue
        seen.add(raw.id)
        records.append(
            normalize_record(
                raw,
                position,
                strategy=strategy,
                bands=bands,
                office_prefix=office_prefix,
                stats=stats,
                rules=rules,
            )
        )
        if progress is not None:
            progress.advance()

    if stats.total:
        logger.info(
            "area detection: keyword=%d (%d%%) subject=%d (%d%%) pattern=%d (%d%%) default=%d (%d%%)",
            stats.area_by_keyword, stats.percentage(stats.area_by_keyword),
            stats.area_by_subject, stats.percentage(stats.area_by_subject),
            stats.area_by_pattern, stats.percentage(stats.area_by_pattern),
            stats.area_by_default, stats.percentage(stats.area_by_default),
        )
    return records, stats
