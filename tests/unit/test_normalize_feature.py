"""Tests for region normalization.

Covers:
- Single-feature FeatureCollection unwrapping
- Ring winding (outer counter-clockwise, inner clockwise), area preserved
- Coordinate rounding, whole numbers as integers
- Id derived from the file name, ``properties.id`` dropped
- Geometry type and coordinates checks
- Idempotence of normalize + format
"""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest
from shapely.geometry import Polygon

from imagery_index.stages.normalize_feature import (
    FeatureGeometryError,
    feature_id_from_path,
    normalize_feature,
    rewind_polygon,
    round_coordinates,
    unwrap_single_feature,
)
from imagery_index.utils.json_format import format_json
from tests.helpers import TOGO_CW_RING, polygon_feature

CW_SQUARE = [[0, 0], [0, 1], [1, 1], [1, 0], [0, 0]]
CCW_HOLE = [[0.25, 0.25], [0.75, 0.25], [0.75, 0.75], [0.25, 0.75], [0.25, 0.25]]


class TestFeatureId:
    def test_lowercased_basename(self) -> None:
        assert feature_id_from_path("features/TG/Togo.geojson") == "togo.geojson"


class TestUnwrap:
    def test_single_feature_collection(self) -> None:
        inner = polygon_feature(CW_SQUARE)
        assert unwrap_single_feature({"type": "FeatureCollection", "features": [inner]}) is inner

    def test_multi_feature_collection_untouched(self) -> None:
        collection = {"type": "FeatureCollection", "features": [{}, {}]}
        assert unwrap_single_feature(collection) is collection


class TestTogoScenario:
    """A single-feature FeatureCollection named Togo.geojson."""

    @pytest.fixture()
    def raw(self) -> dict[str, Any]:
        ring = [[x + 0.123456, y + 0.987654] for x, y in TOGO_CW_RING]
        feature = polygon_feature(ring, id="stale-id", name="Togo")
        return {"type": "FeatureCollection", "features": [feature]}

    def test_bare_feature_with_file_id(self, raw: dict[str, Any]) -> None:
        result = normalize_feature(raw, "features/TG/Togo.geojson")
        assert result["type"] == "Feature"
        assert result["id"] == "togo.geojson"
        assert list(result) == ["type", "id", "properties", "geometry"]

    def test_properties_id_dropped(self, raw: dict[str, Any]) -> None:
        result = normalize_feature(raw, "features/TG/Togo.geojson")
        assert result["properties"] == {"name": "Togo"}

    def test_coordinates_rounded(self, raw: dict[str, Any]) -> None:
        result = normalize_feature(raw, "features/TG/Togo.geojson")
        for x, y in result["geometry"]["coordinates"][0]:
            assert round(x, 4) == x
            assert round(y, 4) == y

    def test_input_not_mutated(self, raw: dict[str, Any]) -> None:
        before = copy.deepcopy(raw)
        normalize_feature(raw, "features/TG/Togo.geojson")
        assert raw == before


class TestWinding:
    def test_clockwise_outer_ring_rewound(self) -> None:
        result = normalize_feature(polygon_feature(CW_SQUARE), "square.geojson")
        ring = result["geometry"]["coordinates"][0]
        assert Polygon(ring).exterior.is_ccw
        assert ring == [[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]

    def test_area_unchanged(self) -> None:
        before = Polygon(TOGO_CW_RING).area
        result = normalize_feature(polygon_feature(TOGO_CW_RING), "togo.geojson")
        after = Polygon(result["geometry"]["coordinates"][0]).area
        assert after == pytest.approx(before)

    def test_hole_wound_clockwise(self) -> None:
        rings = rewind_polygon([CW_SQUARE, CCW_HOLE])
        polygon = Polygon(rings[0], rings[1:])
        assert polygon.exterior.is_ccw
        assert not polygon.interiors[0].is_ccw

    def test_unclosed_ring_closed(self) -> None:
        rings = rewind_polygon([[[0, 0], [1, 0], [1, 1], [0, 1]]])
        assert rings[0][0] == rings[0][-1]

    def test_multipolygon(self) -> None:
        feature = {
            "type": "Feature",
            "properties": {},
            "geometry": {"type": "MultiPolygon", "coordinates": [[CW_SQUARE], [TOGO_CW_RING]]},
        }
        result = normalize_feature(feature, "multi.geojson")
        for polygon in result["geometry"]["coordinates"]:
            assert Polygon(polygon[0]).exterior.is_ccw

    def test_bad_ring(self) -> None:
        with pytest.raises(FeatureGeometryError) as exc_info:
            rewind_polygon([[[0, 0], [1, 1]]], "bad.geojson")
        assert exc_info.value.code == "FEATURE_RING_INVALID"
        assert exc_info.value.path == "bad.geojson"


class TestRounding:
    def test_precision(self) -> None:
        assert round_coordinates([1.23456789, [2.5, 3.00001]], 4) == [1.2346, [2.5, 3]]

    def test_whole_numbers_become_int(self) -> None:
        result = round_coordinates([5.0, -0.00001], 4)
        assert result == [5, 0]
        assert all(isinstance(v, int) for v in result)

    def test_custom_precision(self) -> None:
        result = normalize_feature(polygon_feature(TOGO_CW_RING), "togo.geojson", precision=0)
        assert result["geometry"]["coordinates"][0][0] == [0, 6]


class TestGeometryChecks:
    def test_point_rejected(self) -> None:
        feature = {"type": "Feature", "properties": {}, "geometry": {"type": "Point", "coordinates": [0, 0]}}
        with pytest.raises(FeatureGeometryError) as exc_info:
            normalize_feature(feature, "features/point.geojson")
        err = exc_info.value
        assert err.message == 'Feature type must be "Polygon" or "MultiPolygon"'
        assert err.path == "features/point.geojson"

    def test_missing_geometry_rejected(self) -> None:
        with pytest.raises(FeatureGeometryError, match="Polygon"):
            normalize_feature({"type": "Feature", "properties": {}}, "a.geojson")

    def test_missing_coordinates_rejected(self) -> None:
        feature = {"type": "Feature", "properties": {}, "geometry": {"type": "Polygon"}}
        with pytest.raises(FeatureGeometryError) as exc_info:
            normalize_feature(feature, "a.geojson")
        assert exc_info.value.message == "Feature missing coordinates"
        assert exc_info.value.code == "FEATURE_MISSING_COORDINATES"

    def test_multi_feature_collection_rejected(self) -> None:
        collection = {
            "type": "FeatureCollection",
            "features": [polygon_feature(CW_SQUARE), polygon_feature(CW_SQUARE)],
        }
        with pytest.raises(FeatureGeometryError):
            normalize_feature(collection, "two.geojson")

    def test_non_object_rejected(self) -> None:
        with pytest.raises(FeatureGeometryError, match="JSON object"):
            normalize_feature([1, 2], "list.geojson")

    def test_missing_properties_become_empty(self) -> None:
        feature = {"type": "Feature", "geometry": {"type": "Polygon", "coordinates": [CW_SQUARE]}}
        assert normalize_feature(feature, "a.geojson")["properties"] == {}

    @pytest.mark.parametrize("properties", ["oops", [1, 2], 7])
    def test_non_object_properties_passed_through(self, properties: Any) -> None:
        feature = {
            "type": "Feature",
            "properties": properties,
            "geometry": {"type": "Polygon", "coordinates": [CW_SQUARE]},
        }
        assert normalize_feature(feature, "a.geojson")["properties"] == properties


class TestIdempotence:
    def test_second_pass_is_byte_identical(self) -> None:
        raw = {"type": "FeatureCollection", "features": [polygon_feature(TOGO_CW_RING, name="Togo")]}
        first = format_json(normalize_feature(raw, "togo.geojson"), max_length=100) + "\n"
        second = format_json(normalize_feature(json.loads(first), "togo.geojson"), max_length=100) + "\n"
        assert first == second
