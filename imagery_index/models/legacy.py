"""Pydantic models for the legacy ``imagery.json`` / ``imagery.geojson`` exports.

The legacy JSON format predates ``locationSet``: each entry carries its
coverage as an ``extent`` with zoom limits and the outer rings of the
resolved geometry. Field order here is the published key order; unset
fields are omitted on dump.

References:
- editor-layer-index ``imagery.json`` (the format older editors read)
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from imagery_index.core.constants import LEGACY_FORMAT_VERSION


class LegacyAttribution(BaseModel):
    required: bool | None = None
    url: str | None = None
    text: str | None = None
    html: str | None = None


class LegacyExtent(BaseModel):
    """Coverage of a legacy entry.

    Attributes:
        max_zoom: Maximum zoom level of the source.
        min_zoom: Minimum zoom level of the source.
        polygon: Outer rings of the resolved geometry; absent for
            worldwide sources.
    """

    max_zoom: int | None = None
    min_zoom: int | None = None
    polygon: list[list[list[int | float]]] | None = None


class LegacyImageryEntry(BaseModel):
    """One source in ``dist/legacy/imagery.json``."""

    id: str | None = None
    type: str | None = None
    name: str | None = None
    description: str | None = None
    url: str | None = None
    license_url: str | None = None
    privacy_policy_url: str | None = None
    best: bool | None = None
    start_date: str | None = None
    end_date: str | None = None
    overlay: bool | None = None
    icon: str | None = None
    country_code: str | None = None
    available_projections: list[str] | None = None
    attribution: LegacyAttribution | None = None
    extent: LegacyExtent = Field(default_factory=LegacyExtent)

    def to_dict(self) -> dict[str, Any]:
        """Serialise with unset fields omitted (``extent`` is always kept)."""
        return self.model_dump(exclude_none=True)


class LegacyMeta(BaseModel):
    """``meta`` block of ``dist/legacy/imagery.geojson``."""

    generated: str
    version: str = LEGACY_FORMAT_VERSION
