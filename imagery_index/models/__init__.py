"""Data models and record contracts.

Defines the data structures used throughout the pipeline:
- FeatureRecord / SourceRecord: canonical on-disk record shapes
- ResolvedFeature: immutable geometry for a resolved location set
- LegacyImageryEntry: one entry of the legacy ``imagery.json`` export
"""

from imagery_index.models.contracts import (
    FeatureCollection,
    FeatureRecord,
    LocationSet,
    SourceRecord,
    TranslationStrings,
)
from imagery_index.models.legacy import LegacyExtent, LegacyImageryEntry, LegacyMeta
from imagery_index.models.resolved import ResolvedFeature

__all__ = [
    "FeatureCollection",
    "FeatureRecord",
    "LegacyExtent",
    "LegacyImageryEntry",
    "LegacyMeta",
    "LocationSet",
    "ResolvedFeature",
    "SourceRecord",
    "TranslationStrings",
]
