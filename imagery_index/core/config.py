"""Build configuration loaded from environment variables.

All configuration values have defaults matching the repository layout
the catalog has always used (``features/``, ``sources/``, ``dist/``).

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range, so bad configuration is caught before any file
    is touched.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from imagery_index.core.constants import (
    DEFAULT_COORDINATE_PRECISION,
    DEFAULT_DIST_DIR,
    DEFAULT_DIST_MAX_LENGTH,
    DEFAULT_FEATURES_GLOB,
    DEFAULT_I18N_FILE,
    DEFAULT_ICON_CDN_BASE,
    DEFAULT_POINT_RADIUS_KM,
    DEFAULT_SOURCE_MAX_LENGTH,
    DEFAULT_SOURCES_GLOB,
)
from imagery_index.core.exceptions import ValidationError

MAX_COORDINATE_PRECISION = 10


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class IndexConfig:
    """Immutable build configuration.

    Loaded once by the CLI and threaded through the orchestrators.

    Attributes:
        root: Project root that globs and artifact paths are relative to.
        features_glob: Glob matching region GeoJSON files.
        sources_glob: Glob matching imagery source JSON files.
        dist_dir: Directory receiving published artifacts.
        i18n_file: YAML file receiving translation strings.
        icon_cdn_base: URL prefix for bare icon filenames in legacy exports.
        coordinate_precision: Decimal digits kept on feature coordinates.
        source_max_length: Line width for rewritten input records.
        dist_max_length: Line width for published pretty artifacts.
        default_point_radius_km: Radius of point locations without one.
    """

    root: Path = Path(".")
    features_glob: str = DEFAULT_FEATURES_GLOB
    sources_glob: str = DEFAULT_SOURCES_GLOB
    dist_dir: str = DEFAULT_DIST_DIR
    i18n_file: str = DEFAULT_I18N_FILE
    icon_cdn_base: str = DEFAULT_ICON_CDN_BASE
    coordinate_precision: int = DEFAULT_COORDINATE_PRECISION
    source_max_length: int = DEFAULT_SOURCE_MAX_LENGTH
    dist_max_length: int = DEFAULT_DIST_MAX_LENGTH
    default_point_radius_km: float = DEFAULT_POINT_RADIUS_KM

    @property
    def dist_path(self) -> Path:
        return self.root / self.dist_dir

    @property
    def i18n_path(self) -> Path:
        return self.root / self.i18n_file

    def with_root(self, root: Path | str) -> IndexConfig:
        """Return a copy rooted at *root* (used by the ``--root`` CLI flag)."""
        return replace(self, root=Path(root))

    @classmethod
    def from_env(cls) -> IndexConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range, a
                required string value is empty or a numeric value cannot
                be parsed (e.g. ``IMAGERY_INDEX_PRECISION=abc``).
        """
        config = cls(
            root=Path(os.getenv("IMAGERY_INDEX_ROOT", ".")),
            features_glob=os.getenv("IMAGERY_INDEX_FEATURES_GLOB", DEFAULT_FEATURES_GLOB),
            sources_glob=os.getenv("IMAGERY_INDEX_SOURCES_GLOB", DEFAULT_SOURCES_GLOB),
            dist_dir=os.getenv("IMAGERY_INDEX_DIST_DIR", DEFAULT_DIST_DIR),
            i18n_file=os.getenv("IMAGERY_INDEX_I18N_FILE", DEFAULT_I18N_FILE),
            icon_cdn_base=os.getenv("IMAGERY_INDEX_ICON_CDN_BASE", DEFAULT_ICON_CDN_BASE),
            coordinate_precision=_env_number(
                "IMAGERY_INDEX_PRECISION", DEFAULT_COORDINATE_PRECISION, int
            ),
            source_max_length=_env_number(
                "IMAGERY_INDEX_SOURCE_MAX_LENGTH", DEFAULT_SOURCE_MAX_LENGTH, int
            ),
            dist_max_length=_env_number(
                "IMAGERY_INDEX_DIST_MAX_LENGTH", DEFAULT_DIST_MAX_LENGTH, int
            ),
            default_point_radius_km=_env_number(
                "IMAGERY_INDEX_POINT_RADIUS_KM", DEFAULT_POINT_RADIUS_KM, float
            ),
        )
        validate_config(config)
        return config


def _env_number(key: str, default: int | float, parse: Callable[[str], Any]) -> Any:
    """Parse a numeric environment variable, falling back to *default*."""
    raw = os.getenv(key)
    if raw is None:
        return default
    try:
        return parse(raw)
    except ValueError as exc:
        raise ConfigValidationError(key, raw, "must be a number") from exc


def validate_config(config: IndexConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    for key, value in (
        ("IMAGERY_INDEX_FEATURES_GLOB", config.features_glob),
        ("IMAGERY_INDEX_SOURCES_GLOB", config.sources_glob),
        ("IMAGERY_INDEX_DIST_DIR", config.dist_dir),
        ("IMAGERY_INDEX_I18N_FILE", config.i18n_file),
    ):
        if not value:
            raise ConfigValidationError(key, value, "must not be empty")

    if not 0 <= config.coordinate_precision <= MAX_COORDINATE_PRECISION:
        raise ConfigValidationError(
            "IMAGERY_INDEX_PRECISION",
            config.coordinate_precision,
            f"must be between 0 and {MAX_COORDINATE_PRECISION} (decimal digits)",
        )

    if config.source_max_length <= 0:
        raise ConfigValidationError(
            "IMAGERY_INDEX_SOURCE_MAX_LENGTH",
            config.source_max_length,
            "must be > 0 (characters)",
        )

    if config.dist_max_length <= 0:
        raise ConfigValidationError(
            "IMAGERY_INDEX_DIST_MAX_LENGTH",
            config.dist_max_length,
            "must be > 0 (characters)",
        )

    if config.default_point_radius_km <= 0:
        raise ConfigValidationError(
            "IMAGERY_INDEX_POINT_RADIUS_KM",
            config.default_point_radius_km,
            "must be > 0 (kilometres)",
        )

    if not config.icon_cdn_base.lower().startswith(("http://", "https://")):
        raise ConfigValidationError(
            "IMAGERY_INDEX_ICON_CDN_BASE",
            config.icon_cdn_base,
            "must be an http(s) URL",
        )
