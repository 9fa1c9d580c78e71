"""Idempotent rewriting of records and publishing of artifacts.

- ``rewrite_file``: write a canonical record back to its source file,
  but only when the formatted text differs from what is on disk, so a
  rebuild of an already canonical tree touches nothing.
- ``write_artifact``: write a published file, creating parent directories.
- ``remove_artifacts``: delete stale artifacts before a run.

Every ``OSError`` is surfaced as ``OutputWriteError`` with the path.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from imagery_index.core.constants import DEFAULT_SOURCE_MAX_LENGTH
from imagery_index.core.exceptions import OutputError
from imagery_index.utils.json_format import format_json

logger = logging.getLogger("imagery_index.stages.rewrite")


class OutputWriteError(OutputError):
    """Raised when a record or artifact cannot be written or removed."""

    default_stage = "rewrite"
    default_code = "OUTPUT_WRITE_FAILED"


def canonical_text(obj: Any, *, max_length: int = DEFAULT_SOURCE_MAX_LENGTH) -> str:
    """Formatted file contents for *obj* (compact-pretty JSON plus newline)."""
    return format_json(obj, max_length=max_length) + "\n"


def rewrite_file(
    path: Path | str,
    obj: Any,
    original_text: str,
    *,
    max_length: int = DEFAULT_SOURCE_MAX_LENGTH,
) -> bool:
    """Write *obj* to *path* if its canonical text differs from *original_text*.

    Returns:
        ``True`` when the file was rewritten.

    Raises:
        OutputWriteError: If the file cannot be written.
    """
    pretty = canonical_text(obj, max_length=max_length)
    if pretty == original_text:
        return False

    path = Path(path)
    try:
        path.write_text(pretty, encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot rewrite file: {exc}"
        raise OutputWriteError(msg, path=path.as_posix()) from exc

    logger.info("File rewritten | file=%s", path.as_posix())
    return True


def write_artifact(path: Path | str, text: str) -> Path:
    """Write a published artifact, creating parent directories.

    Raises:
        OutputWriteError: If the directory or file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot write artifact: {exc}"
        raise OutputWriteError(msg, path=path.as_posix()) from exc

    logger.debug("Artifact written | file=%s | bytes=%d", path.as_posix(), len(text.encode()))
    return path


def remove_artifacts(paths: Iterable[Path | str]) -> None:
    """Delete each artifact that exists; missing files are ignored.

    Raises:
        OutputWriteError: If an existing file cannot be removed.
    """
    for item in paths:
        path = Path(item)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            msg = f"Cannot remove artifact: {exc}"
            raise OutputWriteError(msg, path=path.as_posix()) from exc
