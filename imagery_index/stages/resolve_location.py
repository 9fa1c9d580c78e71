"""Location-set resolution: turn ``{include, exclude}`` into geometry.

A location set names the regions a source covers. The resolver builds
the union of every included location minus the union of every excluded
one and reports its geodesic area.

Supported location references:
- ``"<name>.geojson"``: a region loaded from ``features/`` (case-insensitive)
- ``"001"``, ``"Q2"``, ``"world"``: the whole world (canonical id ``Q2``)
- ``[lon, lat]`` or ``[lon, lat, radius_km]``: a geodesic circle

Results are memoized: the cache key is the sorted canonical include ids
plus the sorted canonical exclude ids, so ``["001"]`` and ``["Q2"]``
share one entry. The build resolves each source once and the dist step
resolves it once per export, so everything after the first lookup of a
location set is a cache hit. Resolved features are immutable values.

Engineering notes:
- Union / difference via ``shapely.ops.unary_union``
- Areas via ``pyproj.Geod`` on the WGS 84 ellipsoid, in km²
- Invalid region geometry is repaired with ``make_valid()`` before use
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, NamedTuple

from imagery_index.core.constants import (
    CUSTOM_FEATURE_SUFFIX,
    DEFAULT_COORDINATE_PRECISION,
    DEFAULT_POINT_RADIUS_KM,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    WORLD_ALIASES,
    WORLD_ID,
)
from imagery_index.core.exceptions import InvariantError
from imagery_index.models.resolved import ResolvedFeature
from imagery_index.stages.normalize_feature import round_coordinates
from imagery_index.utils.json_format import js_number

if TYPE_CHECKING:
    from pyproj import Geod
    from shapely.geometry.base import BaseGeometry

logger = logging.getLogger("imagery_index.stages.resolve_location")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CIRCLE_EDGES = 64
SQ_METRES_PER_SQ_KM = 1_000_000.0
AREA_DECIMALS = 2

WORLD_COORDINATES = [
    [
        [MIN_LONGITUDE, MIN_LATITUDE],
        [MAX_LONGITUDE, MIN_LATITUDE],
        [MAX_LONGITUDE, MAX_LATITUDE],
        [MIN_LONGITUDE, MAX_LATITUDE],
        [MIN_LONGITUDE, MIN_LATITUDE],
    ]
]
WORLD_BOUNDS = (MIN_LONGITUDE, MIN_LATITUDE, MAX_LONGITUDE, MAX_LATITUDE)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class LocationSetError(InvariantError):
    """Raised when a location set is malformed or names an unknown location."""

    default_stage = "resolve_location"
    default_code = "LOCATION_SET_INVALID"


class DegenerateLocationError(InvariantError):
    """Raised when a location set resolves to no coordinates or zero area."""

    default_stage = "resolve_location"
    default_code = "LOCATION_SET_DEGENERATE"


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class CacheInfo(NamedTuple):
    hits: int
    misses: int
    size: int


@dataclass(frozen=True, slots=True)
class _Location:
    """A single resolved location reference."""

    id: str
    shape: BaseGeometry
    geometry: dict[str, Any]
    properties: dict[str, Any] = field(default_factory=dict)


class LocationSetResolver:
    """Resolve location sets against a collection of named regions.

    Args:
        feature_collection: Canonical regions (``dist/featureCollection.json``
            shape). Each feature's ``id`` becomes a valid location reference.
        default_radius_km: Radius of point locations given as ``[lon, lat]``.
        precision: Decimal digits kept on computed union geometry.
    """

    def __init__(
        self,
        feature_collection: dict[str, Any] | None = None,
        *,
        default_radius_km: float = DEFAULT_POINT_RADIUS_KM,
        precision: int = DEFAULT_COORDINATE_PRECISION,
    ) -> None:
        from pyproj import Geod

        self._geod: Geod = Geod(ellps="WGS84")
        self._default_radius_km = default_radius_km
        self._precision = precision
        self._features: dict[str, dict[str, Any]] = {}
        for feature in (feature_collection or {}).get("features", []):
            feature_id = str(feature.get("id", "")).lower()
            if feature_id.endswith(CUSTOM_FEATURE_SUFFIX):
                self._features[feature_id] = feature
        self._locations: dict[str, _Location] = {}
        self._cache: dict[tuple[tuple[str, ...], tuple[str, ...]], ResolvedFeature] = {}
        self._hits = 0
        self._misses = 0

    # -- single references --------------------------------------------------

    def location_id(self, ref: Any) -> str | None:
        """Canonical id of a location reference, or ``None`` if it is invalid."""
        if isinstance(ref, str):
            lowered = ref.lower()
            if lowered in WORLD_ALIASES:
                return WORLD_ID
            if lowered in self._features:
                return lowered
            return None
        point = _parse_point(ref)
        if point is None:
            return None
        return "[" + ",".join(js_number(value) for value in ref) + "]"

    def validate_location(self, ref: Any) -> bool:
        """Whether *ref* names a location this resolver can materialize."""
        return self.location_id(ref) is not None

    def validate_location_set(self, location_set: Any) -> None:
        """Check the shape of a location set and every reference in it.

        Raises:
            LocationSetError: If ``include`` is missing or empty, a list
                has the wrong type, or any reference is unresolvable.
        """
        if not isinstance(location_set, dict):
            msg = "locationSet must be an object"
            raise LocationSetError(msg)

        include = location_set.get("include")
        if not isinstance(include, list) or not include:
            msg = "locationSet.include must be a non-empty list"
            raise LocationSetError(msg)

        exclude = location_set.get("exclude", [])
        if not isinstance(exclude, list):
            msg = "locationSet.exclude must be a list"
            raise LocationSetError(msg)

        for key, refs in (("include", include), ("exclude", exclude)):
            for ref in refs:
                if not self.validate_location(ref):
                    msg = f"locationSet.{key} contains unresolvable location {ref!r}"
                    raise LocationSetError(msg, code="LOCATION_UNRESOLVABLE")

    def resolve_location(self, ref: Any) -> _Location:
        """Materialize a single reference (memoized per canonical id).

        Raises:
            LocationSetError: If *ref* is not a valid location.
        """
        location_id = self.location_id(ref)
        if location_id is None:
            msg = f"Unresolvable location {ref!r}"
            raise LocationSetError(msg, code="LOCATION_UNRESOLVABLE")

        cached = self._locations.get(location_id)
        if cached is not None:
            return cached

        if location_id == WORLD_ID:
            geometry: dict[str, Any] = {"type": "Polygon", "coordinates": WORLD_COORDINATES}
            properties: dict[str, Any] = {"nameEn": "World"}
        elif location_id in self._features:
            feature = self._features[location_id]
            geometry = feature["geometry"]
            properties = dict(feature.get("properties") or {})
        else:
            geometry = self._circle(ref)
            properties = {}

        location = _Location(
            id=location_id,
            shape=_polygonal_shape(geometry, location_id),
            geometry=geometry,
            properties=properties,
        )
        self._locations[location_id] = location
        return location

    # -- location sets ------------------------------------------------------

    def resolve_location_set(self, location_set: dict[str, Any]) -> ResolvedFeature:
        """Resolve a location set to its (memoized) feature.

        Raises:
            LocationSetError: If the location set is invalid.
        """
        self.validate_location_set(location_set)
        includes = [self.resolve_location(ref) for ref in location_set["include"]]
        excludes = [self.resolve_location(ref) for ref in location_set.get("exclude", [])]

        include_ids = tuple(sorted({loc.id for loc in includes}))
        exclude_ids = tuple(sorted({loc.id for loc in excludes}))
        key = (include_ids, exclude_ids)

        cached = self._cache.get(key)
        if cached is not None:
            self._hits += 1
            return cached
        self._misses += 1

        resolved = self._resolve(includes, excludes, include_ids, exclude_ids)
        self._cache[key] = resolved
        logger.debug(
            "Location set resolved | id=%s | area=%.2f km2",
            resolved.id,
            resolved.area_km2,
        )
        return resolved

    def cache_info(self) -> CacheInfo:
        """Location-set cache statistics."""
        return CacheInfo(hits=self._hits, misses=self._misses, size=len(self._cache))

    def _resolve(
        self,
        includes: list[_Location],
        excludes: list[_Location],
        include_ids: tuple[str, ...],
        exclude_ids: tuple[str, ...],
    ) -> ResolvedFeature:
        from shapely.geometry import mapping
        from shapely.ops import unary_union

        if len(include_ids) == 1 and not exclude_ids:
            location = includes[0]
            return ResolvedFeature(
                id=location.id,
                geometry=location.geometry,
                area_km2=self.area_km2(location.shape),
                properties=dict(location.properties),
            )

        resolved_id = "+[" + ",".join(include_ids) + "]"
        if exclude_ids:
            resolved_id += "-[" + ",".join(exclude_ids) + "]"

        shape = unary_union([loc.shape for loc in includes])
        if excludes:
            shape = shape.difference(unary_union([loc.shape for loc in excludes]))
        shape = _keep_polygons(shape)

        if shape.is_empty:
            geometry: dict[str, Any] = {"type": "Polygon", "coordinates": []}
        else:
            shape = _oriented(shape)
            mapped = mapping(shape)
            geometry = {
                "type": mapped["type"],
                "coordinates": round_coordinates(mapped["coordinates"], self._precision),
            }

        return ResolvedFeature(
            id=resolved_id,
            geometry=geometry,
            area_km2=self.area_km2(shape),
            properties={},
        )

    # -- geometry helpers ---------------------------------------------------

    def area_km2(self, shape: BaseGeometry) -> float:
        """Geodesic area of a polygonal shape in km², rounded to 2 places.

        A shape spanning the full world bounds is measured through its
        complement, because the world rectangle's two edge meridians
        coincide on the ellipsoid.
        """
        if shape.is_empty:
            return 0.0
        if tuple(shape.bounds) == WORLD_BOUNDS:
            from shapely.geometry import shape as to_shape

            world = to_shape({"type": "Polygon", "coordinates": WORLD_COORDINATES})
            hole = _keep_polygons(world.difference(shape))
            area_m2 = self.ellipsoid_area_m2() - self._geodesic_area_m2(hole)
        else:
            area_m2 = self._geodesic_area_m2(shape)
        return round(max(area_m2, 0.0) / SQ_METRES_PER_SQ_KM, AREA_DECIMALS)

    def ellipsoid_area_m2(self) -> float:
        """Surface area of the WGS 84 ellipsoid in m²."""
        a = self._geod.a
        es = self._geod.es
        e = math.sqrt(es)
        return 2 * math.pi * a * a * (1 + (1 - es) / e * math.atanh(e))

    def _geodesic_area_m2(self, shape: BaseGeometry) -> float:
        if shape.is_empty:
            return 0.0
        area_m2, _perimeter = self._geod.geometry_area_perimeter(_oriented(shape))
        return abs(area_m2)

    def _circle(self, ref: list[float]) -> dict[str, Any]:
        lon, lat, radius_km = _parse_point(ref)  # type: ignore[misc]
        radius_m = (radius_km or self._default_radius_km) * 1000.0
        azimuths = [360.0 * i / CIRCLE_EDGES for i in range(CIRCLE_EDGES)]
        lons, lats, _back = self._geod.fwd(
            [lon] * CIRCLE_EDGES,
            [lat] * CIRCLE_EDGES,
            azimuths,
            [radius_m] * CIRCLE_EDGES,
        )
        ring = [[float(x), float(y)] for x, y in zip(lons, lats, strict=True)]
        ring.append(list(ring[0]))
        ring.reverse()  # azimuth order is clockwise; outer rings wind counter-clockwise
        return {"type": "Polygon", "coordinates": round_coordinates([ring], self._precision)}


def check_non_degenerate(resolved: ResolvedFeature, *, path: str = "") -> None:
    """Require a resolved feature to have coordinates and a positive area.

    Raises:
        DegenerateLocationError: If coordinates are empty or area is zero.
    """
    if resolved.coordinate_count == 0 or not resolved.area_km2:
        msg = f"locationSet {resolved.id} resolves to an empty feature."
        raise DegenerateLocationError(msg, path=path)


# ---------------------------------------------------------------------------
# Module helpers
# ---------------------------------------------------------------------------


def _parse_point(ref: Any) -> tuple[float, float, float | None] | None:
    """Parse ``[lon, lat]`` / ``[lon, lat, radius_km]``; ``None`` if invalid."""
    if not isinstance(ref, list | tuple) or len(ref) not in (2, 3):
        return None
    if any(isinstance(v, bool) or not isinstance(v, int | float) for v in ref):
        return None
    lon, lat = float(ref[0]), float(ref[1])
    if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE and MIN_LATITUDE <= lat <= MAX_LATITUDE):
        return None
    radius = float(ref[2]) if len(ref) == 3 else None
    if radius is not None and radius <= 0:
        return None
    return lon, lat, radius


def _polygonal_shape(geometry: dict[str, Any], location_id: str) -> BaseGeometry:
    from shapely.geometry import shape
    from shapely.validation import make_valid

    try:
        geom = shape(geometry)
    except Exception as exc:
        msg = f"Cannot build geometry for location {location_id}: {exc}"
        raise LocationSetError(msg, code="LOCATION_GEOMETRY_INVALID") from exc

    if not geom.is_valid:
        logger.warning("Invalid geometry for location %s, attempting make_valid()", location_id)
        geom = _keep_polygons(make_valid(geom))
    return geom


def _keep_polygons(geom: BaseGeometry) -> BaseGeometry:
    """Drop points and lines left over from overlay operations."""
    from shapely.geometry import MultiPolygon
    from shapely.ops import unary_union

    if geom.geom_type in ("Polygon", "MultiPolygon"):
        return geom
    parts = [g for g in getattr(geom, "geoms", []) if g.geom_type in ("Polygon", "MultiPolygon")]
    if not parts:
        return MultiPolygon()
    return unary_union(parts)


def _oriented(geom: BaseGeometry) -> BaseGeometry:
    """Exterior rings counter-clockwise, holes clockwise."""
    from shapely.geometry import MultiPolygon
    from shapely.geometry.polygon import orient

    if geom.geom_type == "Polygon":
        return orient(geom, sign=1.0)
    if geom.geom_type == "MultiPolygon":
        return MultiPolygon([orient(p, sign=1.0) for p in geom.geoms])
    return geom
