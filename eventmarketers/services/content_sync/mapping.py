"""
ContentItem -> MobileProjection field mapping. Pure functions, no I/O.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from eventmarketers.core.errors import ValidationError
from eventmarketers.models.content_item import ContentItem
from eventmarketers.models.enums import ContentKind, coerce

PROJECTION_ID_PREFIX = {
    ContentKind.IMAGE: "tmpl_",
    ContentKind.VIDEO: "vid_",
}

_CATEGORY = {
    "BUSINESS": "business",
    "FESTIVAL": "festival",
    "GENERAL": "general",
}

_IMAGE_TYPE = {
    "BUSINESS": "business",
    "FESTIVAL": "festival",
    "GENERAL": "daily",
}

_VIDEO_TYPE = {
    "BUSINESS": "promotional",
    "FESTIVAL": "promotional",
    "GENERAL": "tutorial",
}


def content_kind(item: ContentItem) -> ContentKind:
    try:
        return coerce(ContentKind, item.kind)
    except ValueError:
        raise ValidationError(f"Unsupported content kind: {item.kind}") from None


def projection_id_for(item: ContentItem) -> str:
    return f"{PROJECTION_ID_PREFIX[content_kind(item)]}{item.id}"


def map_category(category: str | None) -> str:
    return _CATEGORY.get((category or "").upper(), "general")


def map_type(kind: ContentKind, category: str | None) -> str:
    if kind is ContentKind.VIDEO:
        return _VIDEO_TYPE.get((category or "").upper(), "tutorial")
    return _IMAGE_TYPE.get((category or "").upper(), "daily")


def build_projection_values(item: ContentItem, language: str, now: datetime) -> dict[str, Any]:
    """Column values for the projection row. Raises ValidationError on malformed display data."""
    kind = content_kind(item)
    title = (item.title or "").strip()
    if not title:
        raise ValidationError("Content item has no title")
    if not item.url:
        raise ValidationError("Content item has no media url")
    tags = item.tags if item.tags is not None else []
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise ValidationError("Content item tags must be a list of strings")

    values: dict[str, Any] = {
        "id": projection_id_for(item),
        "source_id": item.id,
        "kind": kind.value,
        "title": title,
        "description": item.description,
        "category": map_category(item.category),
        "type": map_type(kind, item.category),
        "language": language,
        "is_premium": False,
        "tags": list(tags),
        "downloads": item.downloads or 0,
        "likes": 0,
        "is_active": True,
        "mobile_sync_at": now,
        "created_at": now,
        "updated_at": now,
    }
    if kind is ContentKind.IMAGE:
        values["image_url"] = item.url
        values["file_url"] = item.url
    else:
        values["video_url"] = item.url
        values["thumbnail_url"] = item.thumbnail_url
        values["duration"] = item.duration
    return values
