"""Canonical record contracts for stage boundaries.

Every canonical record shape is defined here as a ``TypedDict``. This
module is the single source of truth for field names shared by the
normalizers, the aggregator and the exporters.

Design notes:
- ``TypedDict`` is used rather than a dataclass because records are
  read from and written back to JSON files verbatim; no conversion.
- Optional source fields use ``total=False`` since the normalizer only
  copies fields that are present.
"""

from __future__ import annotations

from typing import Any, TypedDict

# ---------------------------------------------------------------------------
# GeoJSON
# ---------------------------------------------------------------------------


class Geometry(TypedDict):
    """GeoJSON ``Polygon`` or ``MultiPolygon`` geometry."""

    type: str
    coordinates: list[Any]


class FeatureRecord(TypedDict):
    """Canonical region record as persisted under ``features/``."""

    type: str
    id: str
    properties: dict[str, Any]
    geometry: Geometry


class FeatureCollection(TypedDict):
    type: str
    features: list[Any]


# ---------------------------------------------------------------------------
# Imagery sources
# ---------------------------------------------------------------------------


class LocationSet(TypedDict, total=False):
    """Include / exclude region references.

    A reference is a feature id (``"togo.geojson"``), a worldwide alias
    (``"001"``, ``"Q2"``) or a point ``[lon, lat]`` / ``[lon, lat, radius_km]``.
    """

    include: list[Any]
    exclude: list[Any]


class Attribution(TypedDict, total=False):
    required: bool
    url: str
    text: str
    html: str


class SourceRecord(TypedDict, total=False):
    """Canonical imagery source record as persisted under ``sources/``."""

    id: str
    type: str
    locationSet: LocationSet
    country_code: str
    name: str
    description: str
    url: str
    category: str
    min_zoom: int
    max_zoom: int
    permission_osm: str
    license: str
    license_url: str
    privacy_policy_url: str
    best: bool
    start_date: str
    end_date: str
    overlay: bool
    icon: str
    i18n: bool
    available_projections: list[str]
    attribution: Attribution
    no_tile_header: dict[str, list[str]]


class TranslationStrings(TypedDict, total=False):
    """Translatable strings of one ``i18n`` source."""

    name: str
    description: str
    attribution: dict[str, str]
