"""Imagery source normalization stage.

Projects a raw ``sources/**/*.json`` record onto its canonical shape.
The canonical field order is a data table (``SOURCE_FIELDS``): each
entry names a field, when it is copied, and how its value is
transformed. Fields not in the table are dropped silently.

Rules carried by the table:
- ``locationSet``: ``include`` copied as-is, ``exclude`` only when present.
- ``i18n`` is forced ``true`` when ``include`` names the whole world.
- ``available_projections`` is deduplicated and sorted by EPSG number.
- ``country_code`` is upper-cased.
- ``attribution`` keeps only ``required``, ``url``, ``text``, ``html``.
- ``no_tile_header`` gets sorted keys and sorted values.

Optional fields are copied only when truthy, so defaults such as
``min_zoom: 0`` or ``best: false`` never reach the canonical file.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from imagery_index.core.constants import WORLDWIDE_IDS
from imagery_index.utils.helpers import sort_object

logger = logging.getLogger("imagery_index.stages.normalize_source")

_EPSG_RE = re.compile(r"^EPSG:(\d+)")

ATTRIBUTION_FIELDS = ("required", "url", "text", "html")


# ---------------------------------------------------------------------------
# Presence policies
# ---------------------------------------------------------------------------


def _truthy(value: Any) -> bool:
    return bool(value)


def _not_none(value: Any) -> bool:
    return value is not None


def _always(value: Any) -> bool:
    return True


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def is_worldwide(refs: Any) -> bool:
    """Whether a list of location refs names the whole world (``001`` or ``Q2``)."""
    if not isinstance(refs, list):
        return False
    return any(isinstance(ref, str) and ref in WORLDWIDE_IDS for ref in refs)


def normalize_location_set(value: Any) -> Any:
    """Keep ``include`` and, when present, ``exclude``; drop anything else."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        return value
    location_set: dict[str, Any] = {}
    if "include" in value:
        location_set["include"] = value["include"]
    if value.get("exclude") is not None:
        location_set["exclude"] = value["exclude"]
    return location_set


def projection_sort_key(code: Any) -> tuple[int, int, str]:
    """Sort key for projection codes.

    ``EPSG:<digits>`` codes sort first by number; every other code
    (``CRS:84``, ``ESRI:102100``) sorts after them, lexicographically.
    """
    text = str(code)
    match = _EPSG_RE.match(text)
    if match:
        return (0, int(match.group(1)), text)
    return (1, 0, text)


def normalize_projections(value: Any) -> Any:
    """Deduplicate (first occurrence wins) and sort projection codes.

    Anything but a list of strings is returned as is for the schema to reject.
    """
    if not isinstance(value, list) or not all(isinstance(code, str) for code in value):
        return value
    unique = list(dict.fromkeys(value))
    return sorted(unique, key=projection_sort_key)


def normalize_attribution(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    return {key: value[key] for key in ATTRIBUTION_FIELDS if value.get(key)}


def normalize_no_tile_header(value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    return sort_object(value)


def _upper(value: Any) -> Any:
    return value.upper() if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Field table
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One canonical source field.

    Attributes:
        name: Field name, identical in raw and canonical records.
        transform: Applied to the raw value before copying.
        present: Decides whether the raw value is copied at all.
    """

    name: str
    transform: Callable[[Any], Any] | None = None
    present: Callable[[Any], bool] = _truthy

    def project(self, raw: dict[str, Any], out: dict[str, Any]) -> None:
        value = raw.get(self.name)
        if not self.present(value):
            return
        out[self.name] = self.transform(value) if self.transform else value


SOURCE_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", present=_not_none),
    FieldSpec("type", present=_not_none),
    FieldSpec("locationSet", normalize_location_set, present=_always),
    FieldSpec("country_code", _upper),
    FieldSpec("name"),
    FieldSpec("description"),
    FieldSpec("url"),
    FieldSpec("category"),
    FieldSpec("min_zoom"),
    FieldSpec("max_zoom"),
    FieldSpec("permission_osm"),
    FieldSpec("license"),
    FieldSpec("license_url"),
    FieldSpec("privacy_policy_url"),
    FieldSpec("best"),
    FieldSpec("start_date"),
    FieldSpec("end_date"),
    FieldSpec("overlay"),
    FieldSpec("icon"),
    FieldSpec("i18n"),
    FieldSpec("available_projections", normalize_projections),
    FieldSpec("attribution", normalize_attribution),
    FieldSpec("no_tile_header", normalize_no_tile_header),
)
"""Canonical source fields, in output order."""

SOURCE_FIELD_NAMES: tuple[str, ...] = tuple(field.name for field in SOURCE_FIELDS)


def normalize_source(raw: dict[str, Any]) -> dict[str, Any]:
    """Project a raw source record onto the canonical field table.

    Args:
        raw: Parsed JSON of a source file. Not mutated.

    Returns:
        A new mapping holding only recognised fields, in canonical order.
    """
    values = dict(raw)
    location_set = values.get("locationSet")
    if isinstance(location_set, dict) and is_worldwide(location_set.get("include")):
        values["i18n"] = True

    canonical: dict[str, Any] = {}
    for field in SOURCE_FIELDS:
        field.project(values, canonical)

    dropped = sorted(set(raw) - set(SOURCE_FIELD_NAMES))
    if dropped:
        logger.debug("Source fields dropped | id=%s | fields=%s", raw.get("id"), dropped)
    return canonical
