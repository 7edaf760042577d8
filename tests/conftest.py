# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path

import pytest

from parkline.logging.init import LOGGER_NAME, reset_logging

# Published-sheet export: anchors in row 1, legend right of anchor2,
# sq / en subjects in rows 3-4, keywords row 8, checkboxes row 9,
# mk subjects row 10, apartments from row 11.
SHEET_CSV = "\r\n".join([
    ",anchor1,,,,,,,,anchor2,,",
    ",,,,,,,,,,1,Слободен",
    ",,Banesa,Tipi,Dhoma gjumi,Kati,Sipërfaqja neto,Çmimi,Statusi,,2,Резервиран",
    ",,Apartment,Type,Bedrooms,Floor,Net area,Price,Status,,3,Продаден",
    "notes,,,,,,,,,,,",
    ",,,,,,,,,,,",
    ",,,,,,,,,,,",
    ",,ID,TYPE,BEDROOMS,FLOORS,AREA,PRICE,STATUS,,,",
    ",,☑,☑,☑,☑,☑,☐,☑,,,",
    ",,Стан,Тип,Спални,Спрат,Нето површина,Цена,Статус,,,",
    ',,1.1,Стан,2,1,"72,5 m²","€125,000",1,,,',
    ',,1.2,Стан,3,1,"95,0 m²","€160,000",2,,,',
    ',,2.1,Стан,1,2,"48,3 m²","€90,000",3,,,',
    ',,ДП1,Деловен простор,,0,120 m²,"€200,000",1,,,',
    ",,,,,,,,,,,",
    ",,3.4,Стан,,,,,,,,",
]) + "\r\n"


@pytest.fixture(autouse=True)
def _isolate_logging():
    yield
    reset_logging()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("PARKLINE_SHEET_URL", raising=False)
        yield p


@pytest.fixture()
def sheet_csv() -> str:
    return SHEET_CSV


@pytest.fixture()
def sheet_csv_file(temp_workdir: Path, sheet_csv: str) -> Path:
    f = temp_workdir / "data" / "apartments.csv"
    f.write_text(sheet_csv, encoding="utf-8")
    return f


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sheet_url: "https://docs.google.com/spreadsheets/d/e/TEST/pub?output=csv"
local_csv: ./data/apartments.csv
svg_paths:
  view1: ./data/view1.svg
fetch_timeout_seconds: 5
defaults:
  strategy: cycle
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "site.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
