"""Validation helpers for region normalization.

Responsibilities:
- Polygon / MultiPolygon geometry type check
- Coordinates presence check
"""

from __future__ import annotations

from typing import Any

from imagery_index.core.exceptions import InvariantError

POLYGONAL_TYPES = frozenset({"Polygon", "MultiPolygon"})


class FeatureGeometryError(InvariantError):
    """Raised when a region's geometry cannot be used as a coverage area."""

    default_stage = "normalize_feature"
    default_code = "FEATURE_GEOMETRY_INVALID"


def validate_feature_object(feature: Any, path: str) -> dict[str, Any]:
    """Ensure the (unwrapped) record is a JSON object.

    Raises:
        FeatureGeometryError: If *feature* is not a mapping.
    """
    if not isinstance(feature, dict):
        msg = f"Feature must be a JSON object, got {type(feature).__name__}"
        raise FeatureGeometryError(msg, path=path)
    return feature


def validate_polygonal(geometry: Any, path: str) -> dict[str, Any]:
    """Check that *geometry* is a Polygon or MultiPolygon with coordinates.

    Returns:
        The geometry mapping, for chaining.

    Raises:
        FeatureGeometryError: If the type is anything else (including a
            missing geometry) or ``coordinates`` is absent.
    """
    if not isinstance(geometry, dict) or geometry.get("type") not in POLYGONAL_TYPES:
        msg = 'Feature type must be "Polygon" or "MultiPolygon"'
        raise FeatureGeometryError(msg, path=path, code="FEATURE_GEOMETRY_TYPE")

    if not geometry.get("coordinates"):
        msg = "Feature missing coordinates"
        raise FeatureGeometryError(msg, path=path, code="FEATURE_MISSING_COORDINATES")

    return geometry
