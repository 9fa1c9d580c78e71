"""Legacy exports: editor-layer-index style views of the sources map.

Older editors read imagery lists that predate ``locationSet``. Each
exporter is a pure projection of the canonical sources map and the
location-set resolver:

- ``legacy_imagery_geojson``: one feature per source, geometry
  duplicated per source, ``null`` geometry for worldwide sources.
- ``legacy_imagery_json``: flat records with coverage in
  ``extent.polygon`` (outer rings only).
- ``legacy_imagery_xml``: JOSM ``<imagery>`` document with
  ``<bounds>`` and ``<shape>`` elements.

Bare icon filenames are rewritten to absolute CDN URLs in every format.

References:
- https://josm.openstreetmap.de/wiki/Maps#Documentation (XML format)
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

from imagery_index.core.constants import DEFAULT_ICON_CDN_BASE, WORLD_ID
from imagery_index.models.legacy import (
    LegacyAttribution,
    LegacyExtent,
    LegacyImageryEntry,
    LegacyMeta,
)
from imagery_index.stages.normalize_source import is_worldwide
from imagery_index.utils.helpers import date_string, icon_url
from imagery_index.utils.json_format import js_number

if TYPE_CHECKING:
    from imagery_index.models.resolved import ResolvedFeature
    from imagery_index.stages.resolve_location import LocationSetResolver

logger = logging.getLogger("imagery_index.stages.export_legacy")


# ---------------------------------------------------------------------------
# imagery.geojson
# ---------------------------------------------------------------------------


def legacy_imagery_geojson(
    sources: dict[str, dict[str, Any]],
    resolver: LocationSetResolver,
    *,
    generated: str | None = None,
    icon_base: str = DEFAULT_ICON_CDN_BASE,
) -> dict[str, Any]:
    """Build the legacy ``imagery.geojson`` document.

    Args:
        sources: Canonical sources map.
        resolver: Resolver built from the canonical feature collection.
        generated: ``meta.generated`` timestamp; defaults to now (UTC).
        icon_base: CDN prefix for bare icon filenames.
    """
    features = []
    for source in sources.values():
        resolved = resolver.resolve_location_set(source["locationSet"])

        properties = copy.deepcopy(source)
        location_set = properties.pop("locationSet")
        if properties.get("icon"):
            properties["icon"] = icon_url(properties["icon"], icon_base)

        geometry = None
        if not is_worldwide(location_set.get("include")):
            geometry = copy.deepcopy(resolved.geometry)

        features.append(
            {
                "type": "Feature",
                "id": source["id"],
                "properties": properties,
                "geometry": geometry,
            }
        )

    meta = LegacyMeta(generated=generated or date_string())
    logger.info("Legacy GeoJSON built | features=%d", len(features))
    return {"type": "FeatureCollection", "meta": meta.model_dump(), "features": features}


# ---------------------------------------------------------------------------
# imagery.json
# ---------------------------------------------------------------------------


def legacy_extent(source: dict[str, Any], resolved: ResolvedFeature) -> LegacyExtent:
    """Zoom limits plus outer rings; worldwide sources carry no polygon."""
    polygon = None
    if resolved.id != WORLD_ID:
        polygon = resolved.outer_rings() or None
    return LegacyExtent(
        max_zoom=source.get("max_zoom") or None,
        min_zoom=source.get("min_zoom") or None,
        polygon=polygon,
    )


def legacy_entry(
    source: dict[str, Any],
    resolved: ResolvedFeature,
    *,
    icon_base: str = DEFAULT_ICON_CDN_BASE,
) -> LegacyImageryEntry:
    """Project one canonical source onto a legacy ``imagery.json`` entry."""
    fields = {
        name: source[name]
        for name in LegacyImageryEntry.model_fields
        if name not in ("icon", "attribution", "extent") and source.get(name)
    }
    if source.get("icon"):
        fields["icon"] = icon_url(source["icon"], icon_base)
    if isinstance(source.get("attribution"), dict):
        attribution = {key: value for key, value in source["attribution"].items() if value}
        fields["attribution"] = LegacyAttribution(**attribution)
    return LegacyImageryEntry(**fields, extent=legacy_extent(source, resolved))


def legacy_imagery_json(
    sources: dict[str, dict[str, Any]],
    resolver: LocationSetResolver,
    *,
    icon_base: str = DEFAULT_ICON_CDN_BASE,
) -> list[dict[str, Any]]:
    """Build the legacy ``imagery.json`` array."""
    entries = [
        legacy_entry(
            source,
            resolver.resolve_location_set(source["locationSet"]),
            icon_base=icon_base,
        ).to_dict()
        for source in sources.values()
    ]
    logger.info("Legacy JSON built | entries=%d", len(entries))
    return entries


# ---------------------------------------------------------------------------
# imagery.xml
# ---------------------------------------------------------------------------


def date_text(start_date: str, end_date: str | None) -> str:
    """JOSM ``<date>``: a single date when start equals end, else ``start;end`` (``-`` if open)."""
    if end_date and end_date == start_date:
        return start_date
    return f"{start_date};{end_date or '-'}"


def ring_bounds(rings: list[list[list[float]]]) -> tuple[float, float, float, float]:
    """Bounding box ``(min_lat, min_lon, max_lat, max_lon)`` of a set of rings."""
    lons = [point[0] for ring in rings for point in ring]
    lats = [point[1] for ring in rings for point in ring]
    return min(lats), min(lons), max(lats), max(lons)


def legacy_imagery_xml(
    sources: dict[str, dict[str, Any]],
    resolver: LocationSetResolver,
    *,
    pretty: bool = True,
    icon_base: str = DEFAULT_ICON_CDN_BASE,
) -> str:
    """Build the legacy ``imagery.xml`` document.

    Args:
        sources: Canonical sources map.
        resolver: Resolver built from the canonical feature collection.
        pretty: Indent the document (``imagery.xml``) or not
            (``imagery.min.xml``).
        icon_base: CDN prefix for bare icon filenames.

    Returns:
        The serialised document, including the XML declaration.
    """
    from lxml import etree  # type: ignore[attr-defined]

    imagery = etree.Element("imagery")
    for source in sources.values():
        entry = etree.SubElement(imagery, "entry")
        if source.get("overlay"):
            entry.set("overlay", "true")
        if source.get("best"):
            entry.set("eli-best", "true")

        _text_element(entry, "name", source.get("name"))
        _text_element(entry, "id", source.get("id"))
        _text_element(entry, "category", source.get("category"))
        _text_element(entry, "type", source.get("type"))
        _text_element(entry, "description", source.get("description"))
        _text_element(entry, "url", source.get("url"))
        _text_element(entry, "max-zoom", source.get("max_zoom"))
        _text_element(entry, "min-zoom", source.get("min_zoom"))
        _text_element(entry, "permission-ref", source.get("license_url"))
        if source.get("icon"):
            _text_element(entry, "icon", icon_url(source["icon"], icon_base))
        _text_element(entry, "country_code", source.get("country_code"))

        if source.get("start_date"):
            _text_element(entry, "date", date_text(source["start_date"], source.get("end_date")))

        attribution = source.get("attribution") or {}
        _text_element(entry, "attribution-url", attribution.get("url"))
        _text_element(entry, "attribution-text", attribution.get("text"))

        if source.get("available_projections"):
            projections = etree.SubElement(entry, "projections")
            for code in source["available_projections"]:
                _text_element(projections, "code", code)

        resolved = resolver.resolve_location_set(source["locationSet"])
        rings = resolved.outer_rings()
        if rings and resolved.id != WORLD_ID:
            _bounds_element(entry, rings)

    logger.info("Legacy XML built | entries=%d | pretty=%s", len(imagery), pretty)
    return etree.tostring(
        imagery,
        xml_declaration=True,
        encoding="UTF-8",
        pretty_print=pretty,
    ).decode("utf-8")


def _text_element(parent: Any, tag: str, value: Any) -> None:
    from lxml import etree  # type: ignore[attr-defined]

    if not value:
        return
    element = etree.SubElement(parent, tag)
    element.text = value if isinstance(value, str) else js_number(value)


def _bounds_element(entry: Any, rings: list[list[list[float]]]) -> None:
    from lxml import etree  # type: ignore[attr-defined]

    min_lat, min_lon, max_lat, max_lon = ring_bounds(rings)
    bounds = etree.SubElement(entry, "bounds")
    bounds.set("min-lat", js_number(min_lat))
    bounds.set("min-lon", js_number(min_lon))
    bounds.set("max-lat", js_number(max_lat))
    bounds.set("max-lon", js_number(max_lon))
    for ring in rings:
        shape = etree.SubElement(bounds, "shape")
        for lon, lat, *_rest in ring:
            point = etree.SubElement(shape, "point")
            point.set("lat", js_number(lat))
            point.set("lon", js_number(lon))
