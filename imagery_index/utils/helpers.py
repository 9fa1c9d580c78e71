"""Shared helper functions used by the build and dist orchestrators.

Centralises logic that both the build step (sorted artifacts) and the
legacy exporters (icon URLs, generation timestamps) need.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any

from imagery_index.core.constants import DEFAULT_ICON_CDN_BASE

_ABSOLUTE_URL_RE = re.compile(r"^https?", re.IGNORECASE)


def sort_object(obj: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *obj* with sorted keys and sorted list values.

    Useful for file diffing: map-shaped artifacts come out in the same
    order no matter which order their files were read in.
    """
    return {
        key: sorted(obj[key], key=str) if isinstance(obj[key], list) else obj[key]
        for key in sorted(obj)
    }


def icon_url(icon: str, base: str = DEFAULT_ICON_CDN_BASE) -> str:
    """Rewrite a bare icon filename into an absolute CDN URL.

    Args:
        icon: Icon filename (``"bing.png"``) or an absolute ``http(s)`` URL.
        base: CDN prefix for bare filenames.

    Returns:
        The icon unchanged if it is already an absolute URL, otherwise
        ``base`` joined with the filename.
    """
    if _ABSOLUTE_URL_RE.match(icon):
        return icon
    return f"{base.rstrip('/')}/{icon}"


def date_string(now: datetime | None = None) -> str:
    """Generation timestamp for legacy exports (``"2026-10-19 12:00:00"``, UTC)."""
    moment = (now or datetime.now(UTC)).astimezone(UTC)
    return moment.strftime("%Y-%m-%d %H:%M:%S")
