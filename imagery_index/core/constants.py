"""Shared pipeline constants: single source of truth.

Centralises input globs, artifact paths, worldwide region ids and the
icon CDN base that were previously duplicated between the build and
dist steps.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Input layout
# ---------------------------------------------------------------------------

DEFAULT_FEATURES_GLOB: str = "features/**/*.geojson"
"""Region definitions, one GeoJSON feature per file."""

DEFAULT_SOURCES_GLOB: str = "sources/**/*.json"
"""Imagery source definitions, one JSON record per file."""

# ---------------------------------------------------------------------------
# Published artifacts (relative to the dist directory)
# ---------------------------------------------------------------------------

DEFAULT_DIST_DIR: str = "dist"
DEFAULT_I18N_FILE: str = "i18n/en.yaml"

FEATURE_COLLECTION_FILE = "featureCollection.json"
FEATURE_COLLECTION_MIN_FILE = "featureCollection.min.json"
SOURCES_FILE = "sources.json"
SOURCES_MIN_FILE = "sources.min.json"
COMBINED_FILE = "combined.json"
COMBINED_MIN_FILE = "combined.min.json"
LEGACY_GEOJSON_FILE = "legacy/imagery.geojson"
LEGACY_GEOJSON_MIN_FILE = "legacy/imagery.min.geojson"
LEGACY_JSON_FILE = "legacy/imagery.json"
LEGACY_JSON_MIN_FILE = "legacy/imagery.min.json"
LEGACY_XML_FILE = "legacy/imagery.xml"
LEGACY_XML_MIN_FILE = "legacy/imagery.min.xml"

# ---------------------------------------------------------------------------
# Regions
# ---------------------------------------------------------------------------

WORLD_ID: str = "Q2"
"""Canonical id of the whole-world region (Wikidata item for Earth)."""

WORLDWIDE_IDS: frozenset[str] = frozenset({"001", "Q2"})
"""Exact include refs that force ``i18n`` on a source (UN M49 world, Wikidata Earth)."""

WORLD_ALIASES: frozenset[str] = frozenset({"001", "q2", "world"})
"""Lowercased refs the resolver accepts for the whole-world region."""

CUSTOM_FEATURE_SUFFIX: str = ".geojson"

# WGS 84 coordinate bounds
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0
MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0

# ---------------------------------------------------------------------------
# Formatting and export
# ---------------------------------------------------------------------------

DEFAULT_COORDINATE_PRECISION = 4
DEFAULT_SOURCE_MAX_LENGTH = 100
DEFAULT_DIST_MAX_LENGTH = 99999
DEFAULT_POINT_RADIUS_KM = 25.0

DEFAULT_ICON_CDN_BASE: str = "https://cdn.jsdelivr.net/gh/ideditor/imagery-index@main/dist/images/"
"""Prefix for bare icon filenames in the legacy exports."""

LEGACY_FORMAT_VERSION = "1.0"
