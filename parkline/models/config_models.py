from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the apartment data service.

These are produced by parkline.config.loader after JSON-schema validation;
every field has the default the published sheet and the site use.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database (Supabase Postgres) connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class SheetLayout:
    """Fixed row positions of the published sheet (0-based, blank lines skipped)."""
    legend_rows: tuple[int, ...] = (1, 2, 3)
    subject_sq_row: int = 2
    subject_en_row: int = 3
    filter_keyword_row: int = 7
    visibility_row: int = 8
    subject_row: int = 9  # canonical (mk)
    data_start_row: int = 10


@dataclass(frozen=True)
class PlausibilityBands:
    """Accepted numeric ranges during heuristic field extraction.

    ``*_exclusive`` bounds are open, the candidate band is closed.
    """
    bedrooms: tuple[float, float] = (0, 10)     # (low, high]
    floor: tuple[float, float] = (0, 50)        # (low, high]
    area: tuple[float, float] = (15, 500)       # (low, high)
    area_candidate: tuple[float, float] = (20, 300)  # [low, high]


@dataclass(frozen=True)
class DefaultsConfig:
    """Placeholder strategy for undetectable floor / status values."""
    strategy: str = "cycle"  # cycle | random
    seed: int | None = None


@dataclass(frozen=True)
class SiteConfig:
    """Root configuration object."""
    sheet_url: str
    local_csv: str | None = None
    svg_paths: dict[str, str] = field(default_factory=dict)
    fetch_timeout_seconds: float = 30.0
    office_prefix: str = "ДП"
    layout: SheetLayout = field(default_factory=SheetLayout)
    bands: PlausibilityBands = field(default_factory=PlausibilityBands)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
