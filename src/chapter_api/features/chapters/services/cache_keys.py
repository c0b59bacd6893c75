"""
Cache key naming for chapter reads.

Keys are relative to the CacheManager prefix. List keys spell out every
present filter in a fixed field order followed by the page and limit, so the
same query always maps to the same key and different queries never share one.
Filter values are percent-encoded so a ``:`` inside a value cannot be confused
with a separator.
"""
from typing import List
from urllib.parse import quote

from ..models.request import ChapterFilter

CHAPTERS_NAMESPACE = "chapters"
ENTITY_NAMESPACE = "entity"
ANALYTICS_KEY = "analytics:overview"
FILTERS_KEY = "filters:options"

# Patterns removed after any successful write
WRITE_INVALIDATION_PATTERNS = [f"{CHAPTERS_NAMESPACE}:*", f"{ENTITY_NAMESPACE}:*"]
AGGREGATE_INVALIDATION_PATTERNS = ["analytics:*", "filters:*"]


def _encode(value: str) -> str:
    return quote(value, safe="")


def list_key(filters: ChapterFilter, page: int, limit: int) -> str:
    """Key for one page of a filtered chapter listing."""
    parts: List[str] = [CHAPTERS_NAMESPACE]

    if filters.subject is not None:
        parts.append(f"subject:{_encode(filters.subject)}")
    if filters.class_name is not None:
        parts.append(f"class:{_encode(filters.class_name)}")
    if filters.unit is not None:
        parts.append(f"unit:{_encode(filters.unit)}")
    if filters.status is not None:
        parts.append(f"status:{_encode(filters.status)}")
    if filters.weak_chapters is not None:
        parts.append(f"weak:{'true' if filters.weak_chapters else 'false'}")

    parts.append(f"page:{page}")
    parts.append(f"limit:{limit}")
    return ":".join(parts)


def entity_key(chapter_id: str) -> str:
    """Key for a single chapter."""
    return f"{ENTITY_NAMESPACE}:{chapter_id}"
