from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for load-failure logging.

Every failed load attempt (fetch error, missing anchor, ...) is recorded as a
JSON Lines entry before the service falls back to sample data. row=-1 is the
sentinel for document-level errors where no sheet row applies.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Sheet URL or local CSV path being loaded
        row: Sheet row (0-based, blank lines skipped). -1 when not row specific
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str  # ISO8601 UTC
    source: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # no extra keys beyond the dataclass fields
        return json.dumps(asdict(self), ensure_ascii=False)
