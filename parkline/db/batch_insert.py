from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2.extras import execute_values

"""DB batch insert.

Batched INSERT through psycopg2.extras.execute_values; used for the
analytics event buffer and for seeding CRM tables. Table and column names
are trusted identifiers from code, never user input.
"""

__all__ = ["BatchInsertError", "BatchMetrics", "InsertResult", "batch_insert"]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single batch insert."""
    batch_size: int  # rows in this batch
    elapsed_seconds: float  # time spent in execute_values
    start_time: float
    end_time: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_values: list[tuple[Any, ...]] | None = None


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: bool = False,
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table name
    columns: inserted columns, in row order
    rows: row sequences
    returning: append ``RETURNING *`` and fetch the inserted rows
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the statement ran. Not
        invoked when ``rows`` is empty (the function returns early).
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    cols_sql = ",".join(f'"{c}"' for c in columns)
    base_sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    if returning:
        base_sql += " RETURNING *"

    start_time = time.time()
    try:
        execute_values(cursor, base_sql, rows_list, page_size=page_size)
    except psycopg2.Error as e:
        raise BatchInsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    returned = None
    if returning:
        try:
            returned = cursor.fetchall()
        except psycopg2.Error as e:
            raise BatchInsertError(f"failed fetching RETURNING rows: {e}") from e

    return InsertResult(inserted_rows=len(rows_list), returned_values=returned)
