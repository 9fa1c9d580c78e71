"""Region normalization stage.

Turns a parsed ``features/**/*.geojson`` file into its canonical form:

1. Unwrap a ``FeatureCollection`` holding exactly one ``Feature``
   (geojson.io likes to make these); other collections fall through and
   fail the geometry check.
2. Rewind rings (outer counter-clockwise, inner clockwise).
3. Round coordinates to ``precision`` decimals.
4. Derive ``id`` from the lowercased file name, overriding any id.
5. Reject anything but ``Polygon`` / ``MultiPolygon`` with coordinates.
6. Drop ``properties.id`` so it cannot conflict with the derived id.
7. Emit keys in canonical order ``type, id, properties, geometry``.

The stage is split into focused helpers:
- **_geometry**: winding order and coordinate rounding
- **_validation**: geometry type / coordinates checks
"""

from __future__ import annotations

import copy
import logging
from pathlib import PurePath
from typing import Any

from imagery_index.core.constants import DEFAULT_COORDINATE_PRECISION
from imagery_index.stages.normalize_feature._geometry import (
    rewind_geometry,
    rewind_polygon,
    round_coordinates,
)
from imagery_index.stages.normalize_feature._validation import (
    POLYGONAL_TYPES,
    FeatureGeometryError,
    validate_feature_object,
    validate_polygonal,
)

logger = logging.getLogger("imagery_index.stages.normalize_feature")

__all__ = [
    "POLYGONAL_TYPES",
    "FeatureGeometryError",
    "feature_id_from_path",
    "normalize_feature",
    "rewind_geometry",
    "rewind_polygon",
    "round_coordinates",
    "unwrap_single_feature",
]


def feature_id_from_path(path: str | PurePath) -> str:
    """Derive a region id from its file name (``features/TG/Togo.geojson`` → ``togo.geojson``)."""
    return PurePath(path).name.lower()


def unwrap_single_feature(record: Any) -> Any:
    """Return the inner feature of a one-feature ``FeatureCollection``, else *record*."""
    if isinstance(record, dict) and record.get("type") == "FeatureCollection":
        features = record.get("features")
        if isinstance(features, list) and len(features) == 1:
            return features[0]
    return record


def normalize_feature(
    raw: Any,
    path: str | PurePath,
    *,
    precision: int = DEFAULT_COORDINATE_PRECISION,
) -> dict[str, Any]:
    """Normalize a parsed region record into canonical form.

    Args:
        raw: Parsed JSON of the region file. Not mutated.
        path: File the record was read from; its name becomes the id.
        precision: Decimal digits kept on coordinates.

    Returns:
        A new ``{type, id, properties, geometry}`` mapping.

    Raises:
        FeatureGeometryError: If the geometry is not a Polygon /
            MultiPolygon, lacks coordinates or has unbuildable rings.
    """
    display_path = PurePath(path).as_posix()
    feature = validate_feature_object(unwrap_single_feature(copy.deepcopy(raw)), display_path)
    geometry = validate_polygonal(feature.get("geometry"), display_path)

    rewound = rewind_geometry(geometry, display_path)
    coordinates = round_coordinates(rewound["coordinates"], precision)

    properties = feature.get("properties")
    if properties is None:
        properties = {}
    elif isinstance(properties, dict):
        properties = dict(properties)
        properties.pop("id", None)

    canonical: dict[str, Any] = {}
    if feature.get("type"):
        canonical["type"] = feature["type"]
    canonical["id"] = feature_id_from_path(path)
    canonical["properties"] = properties
    canonical["geometry"] = {"type": geometry["type"], "coordinates": coordinates}

    logger.debug("Feature normalized | id=%s | file=%s", canonical["id"], display_path)
    return canonical
