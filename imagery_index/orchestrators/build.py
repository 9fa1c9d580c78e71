"""Build orchestrator: validate, canonicalize and publish the catalog.

Runs the record pipeline over every input file, in two phases:

1. **Features**: load → normalize → schema-validate → rewrite → dedupe.
   Collected features are sorted by id into the canonical collection.
2. **Sources**: load → normalize → schema-validate → resolve location
   set → non-degenerate check → rewrite → dedupe.

Publishing happens only after both phases pass: ``featureCollection.json``,
``sources.json`` and ``i18n/en.yaml``. The three artifacts are removed
before the run, so a failed build never leaves stale copies behind.
Input records may already have been rewritten when a later record fails;
rewriting is idempotent, so the next run converges.

Console output: one ``✓`` per accepted file followed by the file count.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING, Any, TextIO, TypedDict

import yaml

from imagery_index.core.constants import FEATURE_COLLECTION_FILE, SOURCES_FILE
from imagery_index.core.exceptions import DuplicateIdError
from imagery_index.stages.aggregate import build_translation_strings
from imagery_index.stages.load_records import load_records
from imagery_index.stages.normalize_feature import normalize_feature
from imagery_index.stages.normalize_source import normalize_source
from imagery_index.stages.resolve_location import (
    LocationSetError,
    LocationSetResolver,
    check_non_degenerate,
)
from imagery_index.stages.rewrite import remove_artifacts, rewrite_file, write_artifact
from imagery_index.stages.validate_schema import SchemaValidator
from imagery_index.utils.helpers import sort_object
from imagery_index.utils.json_format import format_json

if TYPE_CHECKING:
    from imagery_index.core.config import IndexConfig

logger = logging.getLogger("imagery_index.orchestrators.build")

CHECK_MARK = "✓"


class BuildResult(TypedDict):
    """Summary of a completed build."""

    feature_count: int
    source_count: int
    translated_count: int
    rewritten_count: int
    artifacts: list[str]


# ---------------------------------------------------------------------------
# Phase 1: features
# ---------------------------------------------------------------------------


def collect_features(
    config: IndexConfig,
    validator: SchemaValidator,
    out: TextIO,
) -> tuple[list[dict[str, Any]], int]:
    """Canonicalize every region file.

    Returns:
        Features sorted by id, and the number of files rewritten.

    Raises:
        RecordParseError: A file is not valid JSON.
        FeatureGeometryError: A region is not a usable polygon.
        SchemaValidationError: A canonical region violates the schema.
        DuplicateIdError: Two files derive the same id.
    """
    features: dict[str, dict[str, Any]] = {}
    files: dict[str, str] = {}
    rewritten = 0
    out.write("Features: ")

    for record in load_records(config.features_glob, config.root):
        path = record.display_path
        feature = normalize_feature(record.data, record.path, precision=config.coordinate_precision)
        validator.validate(feature, "feature", path=path)
        if rewrite_file(record.path, feature, record.text, max_length=config.source_max_length):
            rewritten += 1

        feature_id = feature["id"]
        if feature_id in files:
            raise DuplicateIdError("feature", feature_id, files[feature_id], path)
        features[feature_id] = feature
        files[feature_id] = path
        out.write(CHECK_MARK)

    out.write(f" {len(files)}\n")
    logger.info("Features collected | count=%d | rewritten=%d", len(features), rewritten)
    return [features[key] for key in sorted(features)], rewritten


# ---------------------------------------------------------------------------
# Phase 2: sources
# ---------------------------------------------------------------------------


def collect_sources(
    config: IndexConfig,
    validator: SchemaValidator,
    resolver: LocationSetResolver,
    out: TextIO,
) -> tuple[dict[str, dict[str, Any]], int]:
    """Canonicalize every source file and check its location set.

    Returns:
        Sources keyed by id (file order), and the number of files rewritten.

    Raises:
        RecordParseError: A file is not valid JSON.
        SchemaValidationError: A canonical source violates the schema.
        LocationSetError: A location set names an unknown location.
        DegenerateLocationError: A location set resolves to nothing.
        DuplicateIdError: Two files declare the same id.
    """
    sources: dict[str, dict[str, Any]] = {}
    files: dict[str, str] = {}
    rewritten = 0
    out.write("Sources: ")

    for record in load_records(config.sources_glob, config.root):
        path = record.display_path
        if not isinstance(record.data, dict):
            validator.validate(record.data, "source", path=path)

        source = normalize_source(record.data)
        validator.validate(source, "source", path=path)

        try:
            resolved = resolver.resolve_location_set(source["locationSet"])
        except LocationSetError as exc:
            exc.path = exc.path or path
            raise
        check_non_degenerate(resolved, path=path)

        if rewrite_file(record.path, source, record.text, max_length=config.source_max_length):
            rewritten += 1

        source_id = source["id"]
        if source_id in files:
            raise DuplicateIdError("source", source_id, files[source_id], path)
        sources[source_id] = source
        files[source_id] = path
        logger.debug("Source accepted | id=%s | location=%s | file=%s", source_id, resolved.id, path)
        out.write(CHECK_MARK)

    out.write(f" {len(files)}\n")
    logger.info("Sources collected | count=%d | rewritten=%d", len(sources), rewritten)
    return sources, rewritten


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def translation_yaml(tstrings: dict[str, Any]) -> str:
    """Serialise the translation table as ``{en: {imagery: ...}}`` YAML, unwrapped lines."""
    return yaml.safe_dump(
        {"en": {"imagery": tstrings}},
        allow_unicode=True,
        default_flow_style=False,
        sort_keys=True,
        width=float("inf"),
    )


def run_build(
    config: IndexConfig,
    *,
    validator: SchemaValidator | None = None,
    out: TextIO | None = None,
) -> BuildResult:
    """Run the full build.

    Args:
        config: Build configuration (root, globs, formatting).
        validator: Schema validator; one is built from the bundled
            schemas when omitted.
        out: Stream receiving progress output (default ``sys.stdout``).

    Returns:
        Counts and the paths of the published artifacts.

    Raises:
        CatalogError: On the first invalid record. Nothing is published.
    """
    out = out or sys.stdout
    validator = validator or SchemaValidator()
    started = time.monotonic()

    feature_collection_path = config.dist_path / FEATURE_COLLECTION_FILE
    sources_path = config.dist_path / SOURCES_FILE
    i18n_path = config.i18n_path

    logger.info("Build started | root=%s", config.root)
    out.write("Building data...\n")
    remove_artifacts([feature_collection_path, sources_path, i18n_path])

    features, features_rewritten = collect_features(config, validator, out)
    feature_collection = {"type": "FeatureCollection", "features": features}

    resolver = LocationSetResolver(
        feature_collection,
        default_radius_km=config.default_point_radius_km,
        precision=config.coordinate_precision,
    )
    sources, sources_rewritten = collect_sources(config, validator, resolver, out)
    tstrings = build_translation_strings(sources)

    write_artifact(
        feature_collection_path,
        format_json(feature_collection, max_length=config.dist_max_length) + "\n",
    )
    write_artifact(
        sources_path,
        format_json(sort_object(sources), max_length=config.dist_max_length) + "\n",
    )
    write_artifact(i18n_path, translation_yaml(tstrings))

    elapsed = time.monotonic() - started
    cache = resolver.cache_info()
    logger.info(
        "Build finished | features=%d | sources=%d | cache_hits=%d | elapsed=%.2fs",
        len(features),
        len(sources),
        cache.hits,
        elapsed,
    )
    out.write(f"data built in {elapsed:.2f}s\n")

    return BuildResult(
        feature_count=len(features),
        source_count=len(sources),
        translated_count=len(tstrings),
        rewritten_count=features_rewritten + sources_rewritten,
        artifacts=[
            feature_collection_path.as_posix(),
            sources_path.as_posix(),
            i18n_path.as_posix(),
        ],
    )
