"""Domain models for the ParkLine Residences apartment data service.

This package contains the domain model classes used throughout the
application: sheet/apartment models, load results, filter criteria,
configuration and CRM/analytics rows.
"""

from .apartment import (
    ApartmentRecord,
    ApartmentStatus,
    ColumnSchema,
    RawField,
    RawRecord,
    StatusLegend,
    SubjectLabels,
)
from .config_models import DatabaseConfig, DefaultsConfig, PlausibilityBands, SheetLayout, SiteConfig
from .filter_criteria import FilterBounds, FilterCriteria
from .load_result import DetectionStats, LoadResult, LoadSource, RecordSet

__all__ = [
    # Sheet / apartment models
    "ApartmentRecord",
    "ApartmentStatus",
    "ColumnSchema",
    "RawField",
    "RawRecord",
    "StatusLegend",
    "SubjectLabels",
    # Configuration models
    "DatabaseConfig",
    "DefaultsConfig",
    "PlausibilityBands",
    "SheetLayout",
    "SiteConfig",
    # Query / load models
    "FilterBounds",
    "FilterCriteria",
    "DetectionStats",
    "LoadResult",
    "LoadSource",
    "RecordSet",
]
