"""Data model for a resolved location set.

A ResolvedFeature is the union of a source's included regions minus
its excluded regions. It is produced on demand by the location-set
resolver, shared between every source with the same location set, and
never mutated: consumers that need a modified feature take a copy via
``to_feature()``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class ResolvedFeature:
    """Concrete geometry for a location set.

    Attributes:
        id: Resolved id. A single include without excludes keeps the
            location's own id (``"togo.geojson"``, ``"Q2"``); otherwise
            ``"+[a,b]-[c]"``.
        geometry: GeoJSON ``Polygon`` / ``MultiPolygon`` mapping, or
            ``None`` when the set resolves to nothing.
        area_km2: Geodesic area in square kilometres, rounded to 2 places.
        properties: Properties carried over from the source region.
    """

    id: str
    geometry: dict[str, Any] | None = None
    area_km2: float = 0.0
    properties: dict[str, Any] = field(default_factory=dict)

    def to_feature(self) -> dict[str, Any]:
        """Return an independent GeoJSON Feature copy.

        ``properties`` always carries ``id`` and ``area``.
        """
        properties = copy.deepcopy(self.properties)
        properties["id"] = self.id
        properties["area"] = self.area_km2
        return {
            "type": "Feature",
            "id": self.id,
            "properties": properties,
            "geometry": copy.deepcopy(self.geometry),
        }

    @property
    def coordinate_count(self) -> int:
        """Number of top-level coordinate entries (rings or polygons)."""
        if not self.geometry:
            return 0
        return len(self.geometry.get("coordinates") or [])

    def outer_rings(self) -> list[list[list[float]]]:
        """Copies of the outer ring of every polygon, holes excluded."""
        if not self.geometry:
            return []
        coords = self.geometry.get("coordinates") or []
        if self.geometry.get("type") == "Polygon":
            return [copy.deepcopy(coords[0])] if coords else []
        if self.geometry.get("type") == "MultiPolygon":
            return [copy.deepcopy(polygon[0]) for polygon in coords if polygon]
        return []
