"""Shared pytest fixtures for the imagery index test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from imagery_index.core.config import IndexConfig
from tests.helpers import LOME_RING, TOGO_CW_RING, demo_source, polygon_feature, write_json

# ---------------------------------------------------------------------------
# Project tree fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def feature_collection() -> dict[str, Any]:
    """Canonical collection holding togo.geojson and lome.geojson (CCW rings)."""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "id": "lome.geojson",
                "properties": {"name": "Lomé"},
                "geometry": {"type": "Polygon", "coordinates": [LOME_RING]},
            },
            {
                "type": "Feature",
                "id": "togo.geojson",
                "properties": {"name": "Togo"},
                "geometry": {"type": "Polygon", "coordinates": [list(reversed(TOGO_CW_RING))]},
            },
        ],
    }


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """A small project tree: two regions and three sources."""
    write_json(
        tmp_path,
        "features/TG/Togo.geojson",
        {"type": "FeatureCollection", "features": [polygon_feature(TOGO_CW_RING, id="x", name="Togo")]},
    )
    write_json(tmp_path, "features/TG/lome.geojson", polygon_feature(LOME_RING, name="Lomé"))
    write_json(
        tmp_path,
        "sources/world/demo.json",
        demo_source("demo", ["001"], description="Worldwide demo layer"),
    )
    write_json(
        tmp_path,
        "sources/TG/togo-2020.json",
        demo_source(
            "togo-2020",
            ["togo.geojson"],
            country_code="tg",
            start_date="2020",
            end_date="2020",
            available_projections=["EPSG:4326", "EPSG:3857", "EPSG:3857"],
            icon="togo.png",
            best=True,
        ),
    )
    write_json(
        tmp_path,
        "sources/TG/togo-rural.json",
        {
            **demo_source("togo-rural", ["Togo.geojson"], max_zoom=18),
            "locationSet": {"include": ["Togo.geojson"], "exclude": ["lome.geojson"]},
        },
    )
    return tmp_path


@pytest.fixture()
def config(project: Path) -> IndexConfig:
    """Configuration rooted at the sample project."""
    return IndexConfig(root=project)
