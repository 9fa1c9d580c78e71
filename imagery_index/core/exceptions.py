"""Unified build exception taxonomy.

Provides a shared base exception hierarchy for every pipeline stage.
Every domain exception inherits from ``CatalogError`` and carries
structured context fields (stage, code, offending file) so the CLI can
report any failure the same way.

Taxonomy categories
-------------------
- ``ParseError``      : malformed JSON in an input file.
- ``ValidationError`` : record or configuration violates its schema.
- ``InvariantError``  : semantic violation (bad geometry, duplicate id,
  unresolvable or degenerate location set).
- ``OutputError``     : an artifact or rewritten record cannot be written.

There is no recoverable category: every ``CatalogError`` aborts the run.
Every exception exposes ``to_error_dict()`` for a stable structured payload.
"""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for all catalog build errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"load_records"``, ``"normalize_source"``).
        code: Machine-readable error code (e.g. ``"RECORD_PARSE_FAILED"``).
        path: File the error refers to (empty when not file-scoped).
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        path: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.path = str(path)
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ParseError):
            return "parse"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, InvariantError):
            return "invariant"
        if isinstance(self, OutputError):
            return "output"
        return "unknown"

    def details(self) -> list[str]:
        """Extra report lines printed below the message (none by default)."""
        return []

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "path": self.path,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ParseError(CatalogError):
    """An input file could not be read or parsed."""


class ValidationError(CatalogError):
    """A record or configuration value violates its contract."""


class InvariantError(CatalogError):
    """A structurally valid record breaks a semantic rule of the catalog."""


class OutputError(CatalogError):
    """A file could not be written."""


# ---------------------------------------------------------------------------
# Concrete errors shared across stages
# ---------------------------------------------------------------------------


class DuplicateIdError(InvariantError):
    """Two input files claim the same id.

    Attributes:
        record_id: The contested id.
        first_path: File that claimed the id first (and keeps it).
    """

    default_code = "DUPLICATE_ID"

    def __init__(self, kind: str, record_id: str, first_path: str, path: str) -> None:
        self.kind = kind
        self.record_id = record_id
        self.first_path = str(first_path)
        super().__init__(f"Duplicate {kind} id: {record_id}", path=path)

    def details(self) -> list[str]:
        return [self.first_path, self.path]
