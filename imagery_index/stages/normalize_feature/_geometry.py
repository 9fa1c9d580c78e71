"""Ring winding and coordinate precision for region geometry.

Responsibilities:
- Rewind rings to the RFC 7946 convention (outer counter-clockwise,
  inner clockwise) using shapely's ``orient``
- Round coordinates to a fixed number of decimals

References:
- RFC 7946 section 3.1.6 (polygon ring winding order)
"""

from __future__ import annotations

from typing import Any

from imagery_index.stages.normalize_feature._validation import FeatureGeometryError

# shapely orient(): +1 makes exterior rings counter-clockwise, holes clockwise
_CCW_SIGN = 1.0


def rewind_geometry(geometry: dict[str, Any], path: str = "") -> dict[str, Any]:
    """Return a copy of a Polygon / MultiPolygon geometry with fixed winding.

    Other geometry types are returned as a shallow copy, unchanged.

    Raises:
        FeatureGeometryError: If a ring cannot be built (too few points,
            non-numeric coordinates).
    """
    geometry_type = geometry.get("type")
    coordinates = geometry.get("coordinates")
    if not coordinates:
        return dict(geometry)
    if geometry_type == "Polygon":
        return {**geometry, "coordinates": rewind_polygon(coordinates, path)}
    if geometry_type == "MultiPolygon":
        return {
            **geometry,
            "coordinates": [rewind_polygon(polygon, path) for polygon in coordinates],
        }
    return dict(geometry)


def rewind_polygon(rings: list[Any], path: str = "") -> list[list[list[float]]]:
    """Orient one polygon's rings: outer counter-clockwise, inner clockwise.

    Unclosed rings come back closed.
    """
    from shapely.errors import GEOSException
    from shapely.geometry import Polygon
    from shapely.geometry.polygon import orient

    if not rings:
        return []

    try:
        polygon = Polygon(rings[0], rings[1:])
    except (GEOSException, TypeError, ValueError) as exc:
        msg = f"Cannot build polygon ring: {exc}"
        raise FeatureGeometryError(msg, path=path, code="FEATURE_RING_INVALID") from exc

    oriented = orient(polygon, sign=_CCW_SIGN)
    return [
        _ring_to_lists(oriented.exterior.coords),
        *(_ring_to_lists(ring.coords) for ring in oriented.interiors),
    ]


def _ring_to_lists(coords: Any) -> list[list[float]]:
    return [list(position) for position in coords]


def round_coordinates(value: Any, precision: int) -> Any:
    """Round every number in a nested coordinate array.

    Whole numbers are returned as ``int`` so they serialise without a
    trailing ``.0`` (``5`` rather than ``5.0``).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        rounded = round(float(value), precision)
        return int(rounded) if rounded.is_integer() else rounded
    if isinstance(value, list | tuple):
        return [round_coordinates(item, precision) for item in value]
    return value
