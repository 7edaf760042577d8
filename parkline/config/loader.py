from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from parkline.models.config_models import (
    DatabaseConfig,
    DefaultsConfig,
    SheetLayout,
    SiteConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML site config (default ``config/site.yml``)
- Validate it against ``config_schema.json`` shipped next to this module
- Apply defaults and the PARKLINE_SHEET_URL environment override
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/site.yml")
SHEET_URL_ENV = "PARKLINE_SHEET_URL"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config fails validation (missing keys, wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _build_layout(raw: dict[str, Any]) -> SheetLayout:
    if not raw:
        return SheetLayout()
    values = dict(raw)
    if "legend_rows" in values:
        values["legend_rows"] = tuple(values["legend_rows"])
    return SheetLayout(**values)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> SiteConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    defaults_raw = data.get("defaults") or {}
    defaults = DefaultsConfig(
        strategy=defaults_raw.get("strategy", "cycle"),
        seed=defaults_raw.get("seed"),
    )
    sheet_url = os.getenv(SHEET_URL_ENV) or data["sheet_url"]
    return SiteConfig(
        sheet_url=sheet_url,
        local_csv=data.get("local_csv"),
        svg_paths=dict(data.get("svg_paths") or {}),
        fetch_timeout_seconds=float(data.get("fetch_timeout_seconds", 30.0)),
        office_prefix=data.get("office_prefix", "ДП"),
        layout=_build_layout(data.get("layout") or {}),
        defaults=defaults,
        database=db,
    )
