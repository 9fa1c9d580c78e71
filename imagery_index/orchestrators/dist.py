"""Dist orchestrator: derive secondary artifacts from the build output.

Reads ``dist/featureCollection.json`` and ``dist/sources.json`` (written
by ``build``) and publishes:

- minified copies of both
- ``combined.json`` / ``combined.min.json``
- ``legacy/imagery.geojson``, ``legacy/imagery.json``, ``legacy/imagery.xml``
  and their minified variants

Every target is removed first. The resolver is built once and shared by
all exporters, so each location set is resolved a single time.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING, Any, TextIO, TypedDict

from imagery_index.core import constants as c
from imagery_index.stages.aggregate import combine_sources
from imagery_index.stages.export_legacy import (
    legacy_imagery_geojson,
    legacy_imagery_json,
    legacy_imagery_xml,
)
from imagery_index.stages.load_records import load_record
from imagery_index.stages.resolve_location import LocationSetResolver
from imagery_index.stages.rewrite import remove_artifacts, write_artifact
from imagery_index.utils.json_format import compact_json, format_json

if TYPE_CHECKING:
    from pathlib import Path

    from imagery_index.core.config import IndexConfig

logger = logging.getLogger("imagery_index.orchestrators.dist")

DIST_ARTIFACTS: tuple[str, ...] = (
    c.COMBINED_FILE,
    c.COMBINED_MIN_FILE,
    c.LEGACY_GEOJSON_FILE,
    c.LEGACY_GEOJSON_MIN_FILE,
    c.LEGACY_JSON_FILE,
    c.LEGACY_JSON_MIN_FILE,
    c.LEGACY_XML_FILE,
    c.LEGACY_XML_MIN_FILE,
    c.FEATURE_COLLECTION_MIN_FILE,
    c.SOURCES_MIN_FILE,
)


class DistResult(TypedDict):
    """Summary of a completed dist run."""

    source_count: int
    combined_count: int
    artifacts: list[str]


def run_dist(
    config: IndexConfig,
    *,
    generated: str | None = None,
    out: TextIO | None = None,
) -> DistResult:
    """Publish every dist artifact.

    Args:
        config: Build configuration (root, dist directory, icon CDN base).
        generated: Timestamp for the legacy GeoJSON ``meta`` block;
            defaults to now (UTC).
        out: Stream receiving progress output (default ``sys.stdout``).

    Raises:
        RecordParseError: If the build output is missing or malformed.
        LocationSetError: If a published source no longer resolves.
        OutputWriteError: If an artifact cannot be written.
    """
    out = out or sys.stdout
    dist = config.dist_path
    started = time.monotonic()

    logger.info("Dist started | dist=%s", dist)
    out.write("Building dist...\n")

    feature_collection: dict[str, Any] = load_record(dist / c.FEATURE_COLLECTION_FILE).data
    sources: dict[str, dict[str, Any]] = load_record(dist / c.SOURCES_FILE).data
    resolver = LocationSetResolver(
        feature_collection,
        default_radius_km=config.default_point_radius_km,
        precision=config.coordinate_precision,
    )

    remove_artifacts(dist / name for name in DIST_ARTIFACTS)
    written: list[Path] = []

    def publish(name: str, text: str) -> None:
        written.append(write_artifact(dist / name, text))

    publish(c.FEATURE_COLLECTION_MIN_FILE, compact_json(feature_collection))
    publish(c.SOURCES_MIN_FILE, compact_json(sources))

    out.write(f"{c.COMBINED_FILE} ")
    combined = combine_sources(sources, resolver)
    publish(c.COMBINED_FILE, format_json(combined))
    publish(c.COMBINED_MIN_FILE, compact_json(combined))
    out.write("✓\n")

    out.write(f"{c.LEGACY_GEOJSON_FILE} ")
    legacy_geojson = legacy_imagery_geojson(
        sources, resolver, generated=generated, icon_base=config.icon_cdn_base
    )
    publish(c.LEGACY_GEOJSON_FILE, format_json(legacy_geojson))
    publish(c.LEGACY_GEOJSON_MIN_FILE, compact_json(legacy_geojson))
    out.write("✓\n")

    out.write(f"{c.LEGACY_JSON_FILE} ")
    legacy_json = legacy_imagery_json(sources, resolver, icon_base=config.icon_cdn_base)
    publish(c.LEGACY_JSON_FILE, format_json(legacy_json))
    publish(c.LEGACY_JSON_MIN_FILE, compact_json(legacy_json))
    out.write("✓\n")

    out.write(f"{c.LEGACY_XML_FILE} ")
    publish(
        c.LEGACY_XML_FILE,
        legacy_imagery_xml(sources, resolver, pretty=True, icon_base=config.icon_cdn_base),
    )
    publish(
        c.LEGACY_XML_MIN_FILE,
        legacy_imagery_xml(sources, resolver, pretty=False, icon_base=config.icon_cdn_base),
    )
    out.write("✓\n")

    elapsed = time.monotonic() - started
    cache = resolver.cache_info()
    logger.info(
        "Dist finished | sources=%d | combined=%d | cache_hits=%d | cache_misses=%d | elapsed=%.2fs",
        len(sources),
        len(combined["features"]),
        cache.hits,
        cache.misses,
        elapsed,
    )
    out.write(f"dist built in {elapsed:.2f}s\n")

    return DistResult(
        source_count=len(sources),
        combined_count=len(combined["features"]),
        artifacts=[path.as_posix() for path in written],
    )
