from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from parkline.services.overlays import extract_overlay_ids, match_overlay
from parkline.services.sample_data import build_sample_records

SVG = """<svg xmlns="http://www.w3.org/2000/svg">
  <g data-name="Layer 1">
    <path data-name="1.1" d="M0 0"/>
    <path data-name="1.2" d="M0 0"/>
    <g data-name="floor-2">
      <polygon data-name="2.1" points="0,0 1,1"/>
    </g>
    <path data-name="1.1" d="M1 1"/>
    <path d="M2 2"/>
  </g>
</svg>"""


def test_extract_overlay_ids_skips_layers_and_duplicates():
    assert extract_overlay_ids(SVG) == ["1.1", "1.2", "floor-2", "2.1"]


def test_extract_overlay_ids_malformed():
    with pytest.raises(ET.ParseError):
        extract_overlay_ids("<svg><path></svg>")


def test_match_overlay_exact_join():
    records = [r for r in build_sample_records() if r.id in ("1.1", "1.2", "3.3")]
    join = match_overlay(records, ["1.1", "1.2 ", "2.1"])
    assert join.matched == ("1.1",)
    assert join.records_without_shape == ("1.2", "3.3")
    assert join.shapes_without_record == ("1.2 ", "2.1")
    assert join.is_complete is False


def test_match_overlay_complete():
    records = [r for r in build_sample_records() if r.id in ("1.1", "1.2")]
    assert match_overlay(records, ["1.2", "1.1"]).is_complete
