from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from pathlib import Path

import httpx

from parkline.logging.error_log import ErrorLogBuffer
from parkline.models.apartment import ApartmentRecord, StatusLegend
from parkline.models.config_models import SiteConfig
from parkline.models.error_record import ErrorRecord
from parkline.models.filter_criteria import FilterBounds, FilterCriteria
from parkline.models.load_result import LoadResult, LoadSource, RecordSet
from parkline.sheets.anchors import MissingAnchorError, ParseError
from parkline.sheets.parser import parse_sheet

from .analytics import InventorySummary, summarize_inventory
from .defaults import DefaultStrategy, strategy_from_config
from .fetcher import FetchError, fetch_sheet_csv
from .normalizer import normalize_records
from .progress import ProgressTracker
from .query import derive_filter_bounds, filter_apartments
from .sample_data import build_sample_record_set

"""Apartment repository.

Owns the currently published RecordSet. A load builds the complete new set
off to the side (fetch -> parse -> normalise) and publishes it with one
reference assignment, so readers see either the old or the new set, never a
mix. Any fetch or parse failure publishes the synthetic sample set instead.
"""

__all__ = ["ApartmentRepository", "RepositoryNotLoadedError"]

logger = logging.getLogger(__name__)


class RepositoryNotLoadedError(RuntimeError):
    pass


class ApartmentRepository:
    def __init__(
        self,
        config: SiteConfig,
        error_log: ErrorLogBuffer | None = None,
        *,
        strategy: DefaultStrategy | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._error_log = error_log if error_log is not None else ErrorLogBuffer()
        self._strategy = strategy or strategy_from_config(config.defaults)
        self._client = client
        self._current: RecordSet | None = None

    # -- publishing -------------------------------------------------------

    @property
    def error_log(self) -> ErrorLogBuffer:
        return self._error_log

    @property
    def is_loaded(self) -> bool:
        return self._current is not None

    @property
    def snapshot(self) -> RecordSet:
        """The published record set; hold on to it for a consistent view."""
        current = self._current
        if current is None:
            raise RepositoryNotLoadedError("no record set loaded yet; call reload() first")
        return current

    def _publish(self, record_set: RecordSet) -> RecordSet:
        self._current = record_set
        return record_set

    def build_record_set(self, text: str, source: LoadSource = LoadSource.SHEET) -> RecordSet:
        """Parse and normalise ``text`` without publishing it.

        Raises ParseError (MissingAnchorError) when the anchors are missing.
        """
        parsed = parse_sheet(text, self._config.layout)
        with ProgressTracker(len(parsed.raw_records)) as progress:
            records, stats = normalize_records(
                parsed.raw_records,
                strategy=self._strategy,
                bands=self._config.bands,
                office_prefix=self._config.office_prefix,
                progress=progress,
            )
        return RecordSet(
            records=tuple(records),
            schema=parsed.schema,
            legend=parsed.legend,
            source=source,
            stats=stats,
            loaded_at=datetime.now(UTC),
        )

    def load_text(self, text: str, source: LoadSource = LoadSource.SHEET) -> RecordSet:
        """Build from CSV text and publish (no fallback; errors propagate)."""
        return self._publish(self.build_record_set(text, source))

    def load_sample(self) -> RecordSet:
        return self._publish(build_sample_record_set())

    async def _read_source(self, url: str | None) -> tuple[str, str, LoadSource]:
        if url is None and self._config.local_csv:
            path = Path(self._config.local_csv)
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise FetchError(self._config.local_csv, f"cannot read local CSV: {e}") from e
            logger.info("loading sheet from local file %s", path)
            return text, self._config.local_csv, LoadSource.LOCAL_FILE
        target = url or self._config.sheet_url
        logger.info("fetching sheet CSV from %s", target)
        text = await fetch_sheet_csv(target, self._config.fetch_timeout_seconds, client=self._client)
        return text, target, LoadSource.SHEET

    async def reload(self, url: str | None = None) -> LoadResult:
        """Load the sheet (or ``url``) and publish the result.

        Never raises for fetch or parse problems: those are logged, recorded
        in the error log and answered with the sample set.
        """
        start = time.perf_counter()
        origin = url or self._config.local_csv or self._config.sheet_url
        try:
            text, origin, source = await self._read_source(url)
            record_set = self.build_record_set(text, source)
        except FetchError as e:
            return self._fall_back(origin, "FETCH_ERROR", str(e), start)
        except MissingAnchorError as e:
            return self._fall_back(origin, "MISSING_ANCHOR", str(e), start)
        except ParseError as e:
            return self._fall_back(origin, "PARSE_ERROR", str(e), start)

        self._publish(record_set)
        elapsed = time.perf_counter() - start
        logger.info("loaded %d apartments from %s in %.2fs", len(record_set), source.value, elapsed)
        return LoadResult(record_set=record_set, elapsed_seconds=elapsed)

    def _fall_back(self, origin: str, error_type: str, message: str, start: float) -> LoadResult:
        logger.error("sheet load failed (%s): %s; falling back to sample data", error_type, message)
        self._error_log.append(ErrorRecord.create(origin, -1, error_type, message))
        record_set = self.load_sample()
        return LoadResult(
            record_set=record_set,
            elapsed_seconds=time.perf_counter() - start,
            error=message,
        )

    # -- read side --------------------------------------------------------

    @property
    def records(self) -> tuple[ApartmentRecord, ...]:
        return self.snapshot.records

    @property
    def legend(self) -> StatusLegend:
        return self.snapshot.legend

    def get(self, apartment_id: str) -> ApartmentRecord | None:
        return self.snapshot.by_id.get(apartment_id)

    def filter(self, criteria: FilterCriteria) -> list[ApartmentRecord]:
        return filter_apartments(self.snapshot.records, criteria)

    def bounds(self) -> FilterBounds:
        return derive_filter_bounds(self.snapshot.records)

    def analytics(self) -> InventorySummary:
        return summarize_inventory(self.snapshot.records)
