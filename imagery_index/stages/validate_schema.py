"""Schema validation for region and source records.

``SchemaValidator`` is constructed explicitly (by the build orchestrator)
from the three bundled schemas and handed to whoever needs it; there is
no module-level singleton. The GeoJSON schema is registered under its
schemastore URI so the feature schema can ``$ref`` into it.

Any violation is fatal: ``validate()`` raises ``SchemaValidationError``
listing every violation's property path and message.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from importlib import resources
from typing import TYPE_CHECKING, Any

from jsonschema import Draft7Validator
from referencing import Registry, Resource

from imagery_index.core.exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from jsonschema.exceptions import ValidationError as JsonSchemaError

logger = logging.getLogger("imagery_index.stages.validate_schema")

GEOJSON_SCHEMA_URI = "http://json.schemastore.org/geojson.json"

SCHEMA_FILES: dict[str, str] = {
    "geojson": "geojson.json",
    "feature": "feature.json",
    "source": "source.json",
}


@dataclass(frozen=True, slots=True)
class Violation:
    """A single schema violation.

    Attributes:
        path: Property path, e.g. ``"instance.locationSet.include"``.
        message: Validator message for that property.
    """

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path} {self.message}"


class SchemaValidationError(ValidationError):
    """Raised when a record violates its schema."""

    default_stage = "validate_schema"
    default_code = "SCHEMA_VALIDATION_FAILED"

    def __init__(self, violations: list[Violation], *, path: str = "") -> None:
        self.violations = list(violations)
        super().__init__("Schema validation", path=path)

    def details(self) -> list[str]:
        return [str(v) for v in self.violations]


def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled schema by name (``"geojson"``, ``"feature"``, ``"source"``)."""
    try:
        filename = SCHEMA_FILES[name]
    except KeyError:
        msg = f"Unknown schema {name!r}; expected one of {sorted(SCHEMA_FILES)}"
        raise ValueError(msg) from None
    text = resources.files("imagery_index.schema").joinpath(filename).read_text("utf-8")
    return json.loads(text)


class SchemaValidator:
    """Validates records against the bundled schemas.

    Stateless once constructed; safe to share across every record of a run.
    """

    def __init__(self, schemas: dict[str, dict[str, Any]] | None = None) -> None:
        if schemas is None:
            schemas = {name: load_schema(name) for name in SCHEMA_FILES}
        registry = Registry().with_resource(
            GEOJSON_SCHEMA_URI, Resource.from_contents(schemas["geojson"])
        )
        self._validators = {
            name: Draft7Validator(schema, registry=registry) for name, schema in schemas.items()
        }

    def violations(self, record: Any, schema_name: str) -> list[Violation]:
        """Return every violation of *record* against *schema_name* (empty when valid)."""
        try:
            validator = self._validators[schema_name]
        except KeyError:
            msg = f"Unknown schema {schema_name!r}"
            raise ValueError(msg) from None
        return _to_violations(validator.iter_errors(record))

    def validate(self, record: Any, schema_name: str, *, path: str = "") -> None:
        """Validate *record*, raising on the first file with any violation.

        Raises:
            SchemaValidationError: If the violation list is non-empty.
        """
        found = self.violations(record, schema_name)
        if found:
            logger.debug(
                "Schema violations | schema=%s | file=%s | count=%d",
                schema_name,
                path,
                len(found),
            )
            raise SchemaValidationError(found, path=path)


def _to_violations(errors: Iterable[JsonSchemaError]) -> list[Violation]:
    ordered = sorted(errors, key=lambda e: [str(part) for part in e.absolute_path])
    return [Violation(path=format_path(e.absolute_path), message=e.message) for e in ordered]


def format_path(parts: Iterable[str | int]) -> str:
    """Render a jsonschema path deque as ``instance.a.b[0]``."""
    rendered = "instance"
    for part in parts:
        rendered += f"[{part}]" if isinstance(part, int) else f".{part}"
    return rendered
