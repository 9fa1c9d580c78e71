"""Tests for the legacy GeoJSON / JSON / XML exports."""

from __future__ import annotations

from typing import Any

import pytest
from lxml import etree

from imagery_index.stages.export_legacy import (
    date_text,
    legacy_imagery_geojson,
    legacy_imagery_json,
    legacy_imagery_xml,
    ring_bounds,
)
from imagery_index.stages.resolve_location import LocationSetResolver
from tests.helpers import LOME_RING, demo_source

CDN = "https://cdn.jsdelivr.net/gh/ideditor/imagery-index@main/dist/images/"


@pytest.fixture()
def resolver(feature_collection: dict[str, Any]) -> LocationSetResolver:
    return LocationSetResolver(feature_collection)


@pytest.fixture()
def sources() -> dict[str, dict[str, Any]]:
    return {
        "demo": {"id": "demo", "type": "tms", "locationSet": {"include": ["001"]}, "i18n": True},
        "lome-2019": demo_source(
            "lome-2019",
            include=["lome.geojson"],
            category="photo",
            min_zoom=2,
            max_zoom=19,
            license_url="https://example.com/license",
            best=True,
            start_date="2019",
            end_date="2021",
            overlay=True,
            icon="lome.png",
            country_code="TG",
            available_projections=["EPSG:3857", "EPSG:4326"],
            attribution={"required": True, "url": "https://example.com", "text": "© Lomé"},
        ),
    }


def _parse(xml: str) -> Any:
    return etree.fromstring(xml.encode("utf-8"))


class TestLegacyGeojson:
    def test_meta_block(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        result = legacy_imagery_geojson(sources, resolver, generated="2026-10-19 08:00:00")
        assert result["type"] == "FeatureCollection"
        assert result["meta"] == {"generated": "2026-10-19 08:00:00", "version": "1.0"}

    def test_worldwide_source_has_null_geometry(
        self, sources: dict[str, Any], resolver: LocationSetResolver
    ) -> None:
        demo = legacy_imagery_geojson(sources, resolver)["features"][0]
        assert demo["id"] == "demo"
        assert demo["geometry"] is None
        assert demo["properties"] == {"id": "demo", "type": "tms", "i18n": True}

    def test_lowercase_world_alias_keeps_geometry(self, resolver: LocationSetResolver) -> None:
        source = demo_source("lower", include=["q2"])
        feature = legacy_imagery_geojson({"lower": source}, resolver)["features"][0]
        assert feature["geometry"]["type"] == "Polygon"

    def test_regional_source(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        feature = legacy_imagery_geojson(sources, resolver)["features"][1]
        assert list(feature) == ["type", "id", "properties", "geometry"]
        assert feature["id"] == "lome-2019"
        assert "locationSet" not in feature["properties"]
        assert feature["properties"]["icon"] == CDN + "lome.png"
        assert feature["geometry"]["coordinates"] == [LOME_RING]

    def test_sources_and_resolver_untouched(
        self, sources: dict[str, Any], resolver: LocationSetResolver
    ) -> None:
        legacy_imagery_geojson(sources, resolver)["features"][1]["geometry"]["coordinates"].clear()
        assert sources["lome-2019"]["icon"] == "lome.png"
        assert "locationSet" in sources["lome-2019"]
        resolved = resolver.resolve_location_set({"include": ["lome.geojson"]})
        assert resolved.geometry["coordinates"] == [LOME_RING]


class TestLegacyJson:
    def test_worldwide_entry(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        entry = legacy_imagery_json(sources, resolver)[0]
        assert entry == {"id": "demo", "type": "tms", "extent": {}}

    def test_regional_entry(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        entry = legacy_imagery_json(sources, resolver)[1]
        assert list(entry) == [
            "id",
            "type",
            "name",
            "url",
            "license_url",
            "best",
            "start_date",
            "end_date",
            "overlay",
            "icon",
            "country_code",
            "available_projections",
            "attribution",
            "extent",
        ]
        assert entry["icon"] == CDN + "lome.png"
        assert entry["attribution"] == {"required": True, "url": "https://example.com", "text": "© Lomé"}
        assert entry["extent"] == {"max_zoom": 19, "min_zoom": 2, "polygon": [LOME_RING]}

    def test_outer_rings_only(self, resolver: LocationSetResolver) -> None:
        source = demo_source("rural", include=["togo.geojson"], icon="https://example.com/i.png")
        source["locationSet"]["exclude"] = [[0.8, 8.5, 5]]
        entry = legacy_imagery_json({"rural": source}, resolver)[0]

        assert entry["icon"] == "https://example.com/i.png"
        assert len(entry["extent"]["polygon"]) == 1

    def test_integer_coordinates_kept(self) -> None:
        collection = {
            "type": "FeatureCollection",
            "features": [
                {
                    "type": "Feature",
                    "id": "box.geojson",
                    "properties": {},
                    "geometry": {
                        "type": "Polygon",
                        "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]],
                    },
                }
            ],
        }
        entry = legacy_imagery_json(
            {"box": demo_source("box", include=["box.geojson"])},
            LocationSetResolver(collection),
        )[0]
        assert entry["extent"]["polygon"][0][1] == [1, 0]
        assert isinstance(entry["extent"]["polygon"][0][1][0], int)


class TestLegacyXml:
    def test_document_shape(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        xml = legacy_imagery_xml(sources, resolver)
        assert xml.startswith("<?xml version='1.0' encoding='UTF-8'?>")
        root = _parse(xml)
        assert root.tag == "imagery"
        assert len(root.findall("entry")) == 2

    def test_worldwide_entry_has_no_bounds(
        self, sources: dict[str, Any], resolver: LocationSetResolver
    ) -> None:
        demo = _parse(legacy_imagery_xml(sources, resolver)).findall("entry")[0]
        assert [child.tag for child in demo] == ["id", "type"]

    def test_entry_elements(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        entry = _parse(legacy_imagery_xml(sources, resolver)).findall("entry")[1]

        assert entry.get("overlay") == "true"
        assert entry.get("eli-best") == "true"
        assert [child.tag for child in entry] == [
            "name",
            "id",
            "category",
            "type",
            "url",
            "max-zoom",
            "min-zoom",
            "permission-ref",
            "icon",
            "country_code",
            "date",
            "attribution-url",
            "attribution-text",
            "projections",
            "bounds",
        ]
        assert entry.findtext("max-zoom") == "19"
        assert entry.findtext("country_code") == "TG"
        assert entry.findtext("icon") == CDN + "lome.png"
        assert entry.findtext("date") == "2019;2021"
        assert [code.text for code in entry.find("projections")] == ["EPSG:3857", "EPSG:4326"]

    def test_bounds_and_shape(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        bounds = _parse(legacy_imagery_xml(sources, resolver)).find("entry[2]/bounds")

        assert bounds.get("min-lat") == "6.1"
        assert bounds.get("min-lon") == "1.1"
        assert bounds.get("max-lat") == "6.3"
        assert bounds.get("max-lon") == "1.35"

        points = bounds.findall("shape/point")
        assert len(points) == len(LOME_RING)
        assert (points[1].get("lat"), points[1].get("lon")) == ("6.1", "1.35")

    def test_minified(self, sources: dict[str, Any], resolver: LocationSetResolver) -> None:
        pretty = legacy_imagery_xml(sources, resolver, pretty=True)
        minified = legacy_imagery_xml(sources, resolver, pretty=False)
        assert "\n  <entry" in pretty
        assert "\n  <entry" not in minified
        assert etree.tostring(_parse(pretty)) != b""
        assert len(minified) < len(pretty)


class TestXmlHelpers:
    @pytest.mark.parametrize(
        ("start", "end", "expected"),
        [("2020", "2020", "2020"), ("2019", "2021", "2019;2021"), ("2019", None, "2019;-")],
    )
    def test_date_text(self, start: str, end: str | None, expected: str) -> None:
        assert date_text(start, end) == expected

    def test_ring_bounds(self) -> None:
        rings = [[[1, 2], [3, -4], [-5, 6]], [[10, 0]]]
        assert ring_bounds(rings) == (-4, -5, 6, 10)
