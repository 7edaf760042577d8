from __future__ import annotations

import argparse
import asyncio
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any
from xml.etree.ElementTree import ParseError as XmlParseError

import psycopg2
from dotenv import load_dotenv

from parkline.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from parkline.db.crm_store import CrmStore, StoreError, fetch_events
from parkline.logging.error_log import ErrorLogBuffer
from parkline.logging.init import log_summary, setup_logging
from parkline.models.apartment import ApartmentStatus
from parkline.models.config_models import SiteConfig
from parkline.models.filter_criteria import FilterCriteria
from parkline.services.analytics import summarize_events
from parkline.services.fetcher import FetchError, fetch_overlay_svg
from parkline.services.overlays import extract_overlay_ids, match_overlay
from parkline.services.query import default_criteria
from parkline.services.repository import ApartmentRepository
from parkline.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env and the site config
- Load the apartment sheet (falls back to sample data on failure)
- Optional: inspect schema / rows, filter, check overlay joins, CRM report
- Log the SUMMARY line and exit with 0 (sheet loaded), 2 (sample data) or
  1 (fatal: config error)
"""

EXIT_SUCCESS = 0
EXIT_FELL_BACK = 2
EXIT_FATAL = 1


@contextmanager
def _db_connection(cfg: SiteConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Context manager providing a psycopg2 cursor.

    Resolution order: DATABASE_URL / PGDSN, then PG* variables, then the
    ``database`` section of the config.
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the process env)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _int_set(text: str) -> frozenset[int]:
    try:
        return frozenset(int(t) for t in text.split(",") if t.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected comma separated integers, got {text!r}") from e


def _range(text: str) -> tuple[float, float]:
    low, sep, high = text.partition("-")
    try:
        if not sep:
            raise ValueError
        return float(low), float(high)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected MIN-MAX, got {text!r}") from e


def _status_set(text: str) -> frozenset[ApartmentStatus]:
    try:
        return frozenset(ApartmentStatus.parse(t) for t in text.split(",") if t.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="parkline", description="ParkLine Residences apartment data service")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Site config YAML")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print column schema, legend and first rows")
    p.add_argument("--bedrooms", type=_int_set, help="Bedroom counts, e.g. 2,3 (empty selects none)")
    p.add_argument("--floors", type=_range, help="Floor range MIN-MAX")
    p.add_argument("--area", type=_range, help="Area range MIN-MAX (m²)")
    p.add_argument("--status", type=_status_set, help="Statuses, e.g. available,sold")
    p.add_argument("--check-overlays", action="store_true", help="Check record ids against the SVG overlays")
    p.add_argument("--crm-report", action="store_true", help="Print lead pipeline and visitor analytics")
    return p.parse_args(argv)


def _inspect_data(repo: ApartmentRepository, rows: int = 3) -> None:
    snapshot = repo.snapshot
    print(f"SOURCE: {snapshot.source.value} apartments={len(snapshot)}")
    for column in snapshot.schema:
        flag = "visible" if column.is_visible else "hidden"
        print(
            f"  COLUMN {column.column_letter}: {column.subject!r} "
            f"keyword={column.filter_keyword!r} {flag}"
        )
    for token, text in snapshot.legend.entries.items():
        print(f"  LEGEND {token} = {text}")
    for record in snapshot.records[:rows]:
        print(
            f"  ROW {record.id}: office={record.is_office_space} bedrooms={record.bedrooms} "
            f"floor={record.floor} area={record.area} status={record.status.value} "
            f"area_method={record.area_detection_method}"
        )


def _wants_filter(args: argparse.Namespace) -> bool:
    return any(v is not None for v in (args.bedrooms, args.floors, args.area, args.status))


def _run_filter(repo: ApartmentRepository, args: argparse.Namespace) -> None:
    base = default_criteria(repo.bounds())
    floors = (int(args.floors[0]), int(args.floors[1])) if args.floors else base.floors
    criteria = FilterCriteria(
        bedrooms=args.bedrooms if args.bedrooms is not None else base.bedrooms,
        floors=floors,
        area=args.area or base.area,
        status=args.status or frozenset(),
    )
    matches = repo.filter(criteria)
    print(f"MATCHES {len(matches)}: {' '.join(r.id for r in matches)}")


async def _read_overlay(location: str, timeout: float) -> str:
    if location.startswith(("http://", "https://")):
        return await fetch_overlay_svg(location, timeout)
    return Path(location).read_text(encoding="utf-8")


def _check_overlays(repo: ApartmentRepository, cfg: SiteConfig, logger) -> None:
    if not cfg.svg_paths:
        logger.warning("no svg_paths configured; overlay check skipped")
        return
    for view, location in sorted(cfg.svg_paths.items()):
        try:
            svg = asyncio.run(_read_overlay(location, cfg.fetch_timeout_seconds))
            ids = extract_overlay_ids(svg)
        except (FetchError, OSError, UnicodeDecodeError, XmlParseError) as e:
            logger.error(f"overlay {view}: {e}")
            continue
        join = match_overlay(repo.records, ids)
        print(
            f"OVERLAY {view}: shapes={len(ids)} matched={len(join.matched)} "
            f"records_without_shape={len(join.records_without_shape)} "
            f"shapes_without_record={len(join.shapes_without_record)}"
        )
        if join.shapes_without_record:
            print(f"  unknown shapes: {' '.join(join.shapes_without_record)}")


def _crm_report(cfg: SiteConfig, logger) -> None:
    try:
        with _db_connection(cfg) as cur:
            counts = CrmStore(cur).pipeline_counts()
            events = fetch_events(cur)
    except (psycopg2.Error, StoreError) as e:
        logger.error(f"crm report: {e}")
        return
    print("PIPELINE " + " ".join(f"{s.value}={n}" for s, n in counts.items()))
    summary = summarize_events(events)
    print(
        f"EVENTS total={summary.total_events} visitors={summary.unique_visitors} "
        f"apartment_clicks={summary.apartment_clicks} interested={summary.interested_clicks}"
    )
    for item in summary.top_apartments:
        print(f"  TOP {item.apartment_id}: clicks={item.count} status={item.status}")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # an explicit [] must not fall back to sys.argv (pytest flags)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        logger = setup_logging(debug=True)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    error_log = ErrorLogBuffer()
    repo = ApartmentRepository(cfg, error_log)
    result = asyncio.run(repo.reload())
    written = error_log.flush()
    if written is not None:
        logger.info(f"error log written: {written}")

    if args.inspect_data:
        _inspect_data(repo)
    if _wants_filter(args):
        _run_filter(repo, args)
    if args.check_overlays:
        _check_overlays(repo, cfg, logger)
    if args.crm_report:
        _crm_report(cfg, logger)

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])

    return EXIT_FELL_BACK if result.fell_back else EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
