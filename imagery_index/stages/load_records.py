"""Record loader: glob and parse per-entity JSON / GeoJSON files.

Malformed input is an authoring error, not a transient fault: the first
file that cannot be read or parsed raises ``RecordParseError`` carrying
the file path and the parser message. There are no retries.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from imagery_index.core.exceptions import ParseError

logger = logging.getLogger("imagery_index.stages.load_records")


class RecordParseError(ParseError):
    """Raised when an input file is unreadable or not valid JSON."""

    default_stage = "load_records"
    default_code = "RECORD_PARSE_FAILED"


@dataclass(frozen=True, slots=True)
class LoadedRecord:
    """A parsed input file.

    Attributes:
        path: Location of the file on disk.
        text: Raw file contents, used to detect whether a rewrite is needed.
        data: Parsed JSON value.
    """

    path: Path
    text: str
    data: Any

    @property
    def display_path(self) -> str:
        return self.path.as_posix()


def find_files(pattern: str, root: Path | str = ".") -> list[Path]:
    """Return files under *root* matching the recursive glob *pattern*, sorted."""
    root = Path(root)
    return sorted(path for path in root.glob(pattern) if path.is_file())


def load_record(path: Path | str) -> LoadedRecord:
    """Read and parse a single JSON file.

    Raises:
        RecordParseError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read file: {exc}"
        raise RecordParseError(msg, path=path.as_posix()) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecordParseError(str(exc), path=path.as_posix()) from exc

    return LoadedRecord(path=path, text=text, data=data)


def load_records(pattern: str, root: Path | str = ".") -> list[LoadedRecord]:
    """Load every file matching *pattern* under *root*, in sorted path order.

    Raises:
        RecordParseError: On the first unreadable or malformed file.
    """
    paths = find_files(pattern, root)
    logger.debug("Loading records | pattern=%s | files=%d", pattern, len(paths))
    return [load_record(path) for path in paths]
