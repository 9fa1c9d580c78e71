"""Stats orchestrator: report the size of every input file.

Prints one table per input kind (regions, sources) sorted by size,
largest first, followed by totals::

    Size     File
    -------  -------------
    12.3 KB  togo.geojson

    Totals:
    -------
    Features:  12.3 KB in 1 files.
    Sources:   1.02 KB in 2 files.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO, TypedDict

from imagery_index.stages.load_records import find_files

if TYPE_CHECKING:
    from pathlib import Path

    from imagery_index.core.config import IndexConfig

logger = logging.getLogger("imagery_index.orchestrators.stats")

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
KIBI = 1024


@dataclass(frozen=True, slots=True)
class FileSize:
    name: str
    size: int


class StatsResult(TypedDict):
    """Totals for each input kind (bytes and file counts)."""

    feature_bytes: int
    feature_files: int
    source_bytes: int
    source_files: int


def format_size(size: int) -> str:
    """Human-readable size with binary units (``1536`` → ``"1.5 KB"``)."""
    value = float(size)
    unit = SIZE_UNITS[0]
    for unit in SIZE_UNITS:
        if abs(value) < KIBI or unit == SIZE_UNITS[-1]:
            break
        value /= KIBI
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {unit}"


def collect_sizes(pattern: str, root: Path | str) -> list[FileSize]:
    """Sizes of files matching *pattern*, largest first (ties by name)."""
    sizes = [FileSize(path.name, path.stat().st_size) for path in find_files(pattern, root)]
    return sorted(sizes, key=lambda item: (-item.size, item.name))


def format_table(rows: list[FileSize]) -> str:
    """Two-column ``Size | File`` table, sizes right-aligned."""
    cells = [(format_size(row.size), row.name) for row in rows]
    size_width = max([len("Size"), *(len(size) for size, _ in cells)])
    file_width = max([len("File"), *(len(name) for _, name in cells)])
    lines = [
        f"{'Size'.ljust(size_width)}  File",
        f"{'-' * size_width}  {'-' * file_width}",
    ]
    lines.extend(f"{size.rjust(size_width)}  {name}" for size, name in cells)
    return "\n".join(lines) + "\n"


def run_stats(config: IndexConfig, *, out: TextIO | None = None) -> StatsResult:
    """Print size tables and totals for region and source files."""
    out = out or sys.stdout

    features = collect_sizes(config.features_glob, config.root)
    out.write(format_table(features) + "\n")
    sources = collect_sizes(config.sources_glob, config.root)
    out.write(format_table(sources) + "\n")

    feature_bytes = sum(item.size for item in features)
    source_bytes = sum(item.size for item in sources)
    out.write("Totals:\n-------\n")
    out.write(f"Features:  {format_size(feature_bytes)} in {len(features)} files.\n")
    out.write(f"Sources:   {format_size(source_bytes)} in {len(sources)} files.\n")

    logger.info(
        "Stats collected | features=%d | feature_bytes=%d | sources=%d | source_bytes=%d",
        len(features),
        feature_bytes,
        len(sources),
        source_bytes,
    )
    return StatsResult(
        feature_bytes=feature_bytes,
        feature_files=len(features),
        source_bytes=source_bytes,
        source_files=len(sources),
    )
