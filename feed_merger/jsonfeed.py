"""JSON Feed 1.x import and export.

Import maps JSON Feed items onto :class:`NormalizedItem`; export writes the
merged feed back out as JSON Feed 1.1 using the mirror-image field mapping.
"""

from __future__ import annotations

import json
import uuid
from typing import Any, Optional

from feed_merger.errors import InvalidFeedError
from feed_merger.types import MergedFeed, NormalizedFeed, NormalizedItem, tagged, text_of

JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"
JSON_FEED_CONTENT_TYPE = "application/feed+json; charset=utf-8"


def is_json_content_type(content_type: str) -> bool:
    ct = (content_type or "").lower()
    return "application/feed+json" in ct or "application/json" in ct


def _str(value: Any) -> Optional[str]:
    # numbers and bools become text; lists, objects and null are dropped
    if value is None or isinstance(value, (dict, list)):
        return None
    return text_of(value) or None


def _author_name(item: dict[str, Any]) -> Optional[str]:
    author = item.get("author")
    if not author:
        # 1.1 moved to a list of authors
        authors = item.get("authors")
        author = authors[0] if isinstance(authors, list) and authors else None
    if isinstance(author, dict):
        return _str(author.get("name"))
    return None


def _item_from_json(item: dict[str, Any], feed_title: Optional[str], source_url: Optional[str]) -> NormalizedItem:
    published = _str(item.get("date_published"))
    guid = _str(item.get("id"))
    tags = item.get("tags")
    return NormalizedItem(
        title=_str(item.get("title")),
        link=_str(item.get("url")) or _str(item.get("external_url")),
        pub_date=published,
        iso_date=published,
        content=_str(item.get("content_html")),
        content_snippet=_str(item.get("content_text")) or _str(item.get("summary")),
        creator=_author_name(item),
        guid=guid,
        categories=[tagged(t) for t in tags if t is not None] if isinstance(tags, list) else [],
        source_feed_title=feed_title,
        source_feed_url=source_url,
    )


def normalize_json_feed(doc: Any, source_url: Optional[str]) -> NormalizedFeed:
    if not isinstance(doc, dict) or "jsonfeed.org" not in str(doc.get("version") or ""):
        raise InvalidFeedError("Invalid JSON Feed: missing or invalid version")
    items = doc.get("items") or []
    if not isinstance(items, list):
        raise InvalidFeedError("Invalid JSON Feed: items must be an array")

    title = _str(doc.get("title"))
    return NormalizedFeed(
        title=title,
        description=_str(doc.get("description")),
        link=_str(doc.get("home_page_url")),
        items=[_item_from_json(i, title, source_url) for i in items if isinstance(i, dict)],
    )


def parse_json_feed(text: str, source_url: Optional[str] = None) -> NormalizedFeed:
    """Decode a JSON Feed document. Raises InvalidFeedError for anything that is not one."""

    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidFeedError(f"Invalid JSON Feed: {exc}") from exc
    return normalize_json_feed(doc, source_url)


def _drop_none(d: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _item_to_json(item: NormalizedItem) -> dict[str, Any]:
    return _drop_none(
        {
            "id": text_of(item.guid) or text_of(item.link) or str(uuid.uuid4()),
            "url": item.link,
            "title": item.title,
            "content_html": item.content,
            "content_text": item.content_snippet,
            "date_published": item.iso_date or item.pub_date,
            "author": {"name": item.creator} if item.creator else None,
            "tags": [text_of(c) for c in item.categories] if item.categories else None,
        }
    )


def render_json_feed(merged: MergedFeed, request_url: Optional[str] = None) -> str:
    doc = _drop_none(
        {
            "version": JSON_FEED_VERSION,
            "title": merged.title,
            "description": merged.description,
            "home_page_url": merged.link,
            "feed_url": request_url,
            "items": [_item_to_json(i) for i in merged.items],
        }
    )
    return json.dumps(doc, indent=2, ensure_ascii=False)
