"""Cross-reference aggregation of normalized sources.

Two derived tables are built from the canonical sources map:

- **combined**: one GeoJSON feature per distinct resolved location set,
  carrying every source that covers exactly that area under
  ``properties.sources``.
- **translation strings**: the user-facing text of ``i18n`` sources,
  keyed by source id, published as ``i18n/en.yaml``.

Both are pure functions; inputs are never mutated.
"""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any

from imagery_index.models.contracts import FeatureCollection, SourceRecord, TranslationStrings
from imagery_index.utils.helpers import sort_object

if TYPE_CHECKING:
    from imagery_index.stages.resolve_location import LocationSetResolver

logger = logging.getLogger("imagery_index.stages.aggregate")


def combine_sources(
    sources: dict[str, SourceRecord],
    resolver: LocationSetResolver,
) -> FeatureCollection:
    """Group sources by the id of their resolved location set.

    Args:
        sources: Canonical sources map (``source id → record``).
        resolver: Resolver built from the canonical feature collection.

    Returns:
        A ``FeatureCollection`` with one feature per resolved id, sorted
        by that id. Each feature holds its own geometry copy and a
        ``properties.sources`` map of deep-copied records sorted by
        source id.
    """
    groups: dict[str, dict[str, Any]] = {}
    members: dict[str, dict[str, dict[str, Any]]] = {}

    for source_id, source in sources.items():
        resolved = resolver.resolve_location_set(source["locationSet"])
        if resolved.id not in groups:
            groups[resolved.id] = resolved.to_feature()
            members[resolved.id] = {}
        members[resolved.id][source_id] = copy.deepcopy(source)

    features = []
    for resolved_id in sorted(groups):
        feature = groups[resolved_id]
        group = members[resolved_id]
        feature["properties"]["sources"] = {key: group[key] for key in sorted(group)}
        features.append(feature)

    logger.info("Sources combined | sources=%d | features=%d", len(sources), len(features))
    return FeatureCollection(type="FeatureCollection", features=features)


def translation_strings(source: SourceRecord) -> TranslationStrings:
    """User-facing strings of one source (``name``, ``description``, ``attribution.text``)."""
    strings: TranslationStrings = {}
    if source.get("name"):
        strings["name"] = source["name"]
    if source.get("description"):
        strings["description"] = source["description"]
    attribution = source.get("attribution") or {}
    if attribution.get("text"):
        strings["attribution"] = {"text": attribution["text"]}
    return strings


def build_translation_strings(sources: dict[str, SourceRecord]) -> dict[str, Any]:
    """Translation-string table for every ``i18n`` source, keys sorted."""
    table = {
        source_id: translation_strings(source)
        for source_id, source in sources.items()
        if source.get("i18n")
    }
    return sort_object(table)
