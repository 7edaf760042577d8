from __future__ import annotations

import json

from parkline.models.error_record import ErrorRecord

"""Unit tests for the ErrorRecord model."""


def test_error_record_row_minus_one_support():
    """row=-1 marks errors that concern the whole document."""
    rec = ErrorRecord.create(
        source="https://example.test/sheet.csv",
        row=-1,
        error_type="MISSING_ANCHOR",
        message="anchor 'ID' not found in any row"
    )

    assert rec.row == -1
    assert rec.source == "https://example.test/sheet.csv"
    assert rec.error_type == "MISSING_ANCHOR"

    data = json.loads(rec.to_json_line())
    assert data["row"] == -1
    assert data["error_type"] == "MISSING_ANCHOR"
    assert "timestamp" in data and data["timestamp"].endswith("Z")
    assert set(data.keys()) == {"timestamp", "source", "row", "error_type", "message"}


def test_error_record_positive_row_number():
    rec = ErrorRecord.create(
        source="./data/apartments.csv",
        row=42,
        error_type="PARSE_ERROR",
        message="unterminated quoted field"
    )

    assert rec.row == 42
    data = json.loads(rec.to_json_line())
    assert data["row"] == 42


def test_error_record_zero_row():
    rec = ErrorRecord.create(
        source="./data/apartments.csv",
        row=0,
        error_type="PARSE_ERROR",
        message="empty header row"
    )

    assert rec.row == 0
    assert json.loads(rec.to_json_line())["row"] == 0
