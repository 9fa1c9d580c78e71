"""Test helpers: reference geometry and project-tree writers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Reference geometry
# ---------------------------------------------------------------------------

# Roughly Togo's bounding box, wound clockwise (as hand-drawn files often are)
TOGO_CW_RING = [
    [-0.15, 6.1],
    [-0.15, 11.14],
    [1.81, 11.14],
    [1.81, 6.1],
    [-0.15, 6.1],
]

# A box over Lomé, inside the Togo box
LOME_RING = [
    [1.1, 6.1],
    [1.35, 6.1],
    [1.35, 6.3],
    [1.1, 6.3],
    [1.1, 6.1],
]


def write_json(root: Path, relative: str, obj: Any, *, text: str | None = None) -> Path:
    """Write *obj* (or raw *text*) to ``root / relative``, creating directories."""
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text if text is not None else json.dumps(obj), encoding="utf-8")
    return path


def polygon_feature(ring: list[list[float]], **properties: Any) -> dict[str, Any]:
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def demo_source(source_id: str = "demo", include: list[Any] | None = None, **extra: Any) -> dict[str, Any]:
    source = {
        "id": source_id,
        "type": "tms",
        "locationSet": {"include": include if include is not None else ["001"]},
        "name": f"{source_id} imagery",
        "url": "https://tiles.example.com/{zoom}/{x}/{y}.png",
    }
    source.update(extra)
    return source
