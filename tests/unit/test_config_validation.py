from __future__ import annotations

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from parkline.config.loader import ConfigError, _validate_config_schema

"""Unit tests for config validation error cases."""


def test_validate_config_schema_missing_schema_file():
    """ConfigError when the schema file does not exist."""
    with patch("parkline.config.loader.SCHEMA_PATH", Path("/nonexistent/schema.json")):
        with pytest.raises(ConfigError) as e:
            _validate_config_schema({})
        assert "config schema not found" in str(e.value)


def test_validate_config_schema_invalid_json_schema():
    """ConfigError when the schema file contains invalid JSON."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        f.write("{ invalid json }")
        f.flush()
        temp_path = Path(f.name)

    try:
        with patch("parkline.config.loader.SCHEMA_PATH", temp_path):
            with pytest.raises(ConfigError) as e:
                _validate_config_schema({})
            assert "invalid schema file" in str(e.value)
    finally:
        temp_path.unlink()


def test_validate_config_schema_missing_required_keys():
    with pytest.raises(ConfigError) as e:
        _validate_config_schema({})
    assert "config validation failed" in str(e.value)
    assert "required property" in str(e.value)


def test_validate_config_schema_wrong_type():
    with pytest.raises(ConfigError) as e:
        _validate_config_schema({"sheet_url": 123})
    assert "config validation failed" in str(e.value)


def test_validate_config_schema_empty_sheet_url():
    with pytest.raises(ConfigError):
        _validate_config_schema({"sheet_url": ""})


def test_validate_config_schema_non_positive_timeout():
    with pytest.raises(ConfigError):
        _validate_config_schema({"sheet_url": "x", "fetch_timeout_seconds": 0})


def test_validate_config_schema_unknown_strategy():
    with pytest.raises(ConfigError):
        _validate_config_schema({"sheet_url": "x", "defaults": {"strategy": "alphabetical"}})


def test_validate_config_schema_svg_paths_must_be_strings():
    with pytest.raises(ConfigError):
        _validate_config_schema({"sheet_url": "x", "svg_paths": {"view1": 1}})


def test_validate_config_schema_layout_additional_properties():
    with pytest.raises(ConfigError):
        _validate_config_schema({"sheet_url": "x", "layout": {"price_row": 4}})


def test_validate_config_schema_invalid_database_config():
    with pytest.raises(ConfigError) as e:
        _validate_config_schema({"sheet_url": "x", "database": {"port": "not_an_integer"}})
    assert "config validation failed" in str(e.value)


def test_validate_config_schema_database_additional_properties():
    with pytest.raises(ConfigError):
        _validate_config_schema({"sheet_url": "x", "database": {"host": "localhost", "extra_db_field": 1}})


def test_validate_config_schema_valid_config():
    valid_config = {
        "sheet_url": "https://docs.google.com/spreadsheets/d/e/TEST/pub?output=csv",
        "local_csv": None,
        "svg_paths": {"view1": "svg/view1.svg", "view2": "svg/view2.svg"},
        "fetch_timeout_seconds": 12.5,
        "office_prefix": "ДП",
        "defaults": {"strategy": "random", "seed": 7},
        "layout": {"legend_rows": [1, 2, 3], "data_start_row": 10},
        "database": {
            "host": "localhost",
            "port": 5432,
            "user": "appuser",
            "password": "secret",
            "database": "appdb",
        },
    }
    _validate_config_schema(valid_config)


def test_validate_config_schema_minimal_valid_config():
    _validate_config_schema({"sheet_url": "x"})
