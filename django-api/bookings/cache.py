"""Caching of expanded occurrence lists.

Entries are keyed by a per-template version token; dropping the token
orphans every cached window for that template at once.
"""

from collections.abc import Callable
from datetime import date
from typing import Any
from uuid import uuid4

from django.conf import settings
from django.core.cache import cache


def _version_key(template_id: str) -> str:
    return f"templates:{template_id}:version"


def _occurrences_key(template_id: str, window_start: date, window_end: date) -> str:
    version = cache.get(_version_key(template_id))
    if version is None:
        version = uuid4().hex
        cache.set(_version_key(template_id), version, None)
    return (
        f"templates:{template_id}:occurrences:{version}:"
        f"{window_start.isoformat()}:{window_end.isoformat()}"
    )


def get_cached_occurrences(
    template_id: str,
    window_start: date,
    window_end: date,
    builder: Callable[[], list[dict[str, Any]]],
) -> list[dict[str, Any]]:
    """Return serialized occurrences for a window, building them on a miss."""
    key = _occurrences_key(template_id, window_start, window_end)
    cached: list[dict[str, Any]] | None = cache.get(key)
    if cached is not None:
        return cached

    result = builder()
    cache.set(key, result, settings.BOOKINGS["OCCURRENCE_CACHE_TIMEOUT"])
    return result


def invalidate_template_cache(template_id: str) -> None:
    cache.delete(_version_key(template_id))
