from __future__ import annotations

import logging
from typing import Any, Optional

import feedparser

from feed_merger.dates import struct_to_iso
from feed_merger.errors import NotAFeedError
from feed_merger.extract import html_to_text
from feed_merger.types import Attributed, Category, NormalizedFeed, NormalizedItem, Text

logger = logging.getLogger(__name__)


def _entry_content(e: Any) -> Optional[str]:
    # feedparser files content:encoded and Atom <content> under "content"
    for c in e.get("content") or []:
        value = c.get("value")
        if value:
            return value
    return e.get("summary") or None


def _entry_categories(e: Any) -> list[Category]:
    out: list[Category] = []
    for tag in e.get("tags") or []:
        term = tag.get("term")
        if term is None:
            continue
        scheme = tag.get("scheme")
        if scheme:
            out.append(Attributed(text=str(term), attributes={"domain": str(scheme)}))
        else:
            out.append(Text(str(term)))
    return out


def entry_to_item(e: Any, feed_title: Optional[str], source_url: Optional[str]) -> NormalizedItem:
    content = _entry_content(e)
    return NormalizedItem(
        title=e.get("title") or None,
        link=e.get("link") or None,
        pub_date=e.get("published") or e.get("updated") or None,
        iso_date=struct_to_iso(e.get("published_parsed") or e.get("updated_parsed")),
        content=content,
        content_snippet=html_to_text(e.get("summary") or content),
        creator=e.get("author") or None,
        guid=e.get("id") or None,
        categories=_entry_categories(e),
        source_feed_title=feed_title,
        source_feed_url=source_url,
    )


def parse_feed_document(
    document: bytes,
    source_url: Optional[str],
    content_type: str | None = None,
) -> NormalizedFeed:
    """Parse an RSS/Atom document and stamp every item with its source.

    Raises NotAFeedError when feedparser cannot recognize the document.
    """

    headers = {"content-type": content_type} if content_type else None
    # item HTML is passed through untouched; it is re-emitted inside CDATA
    parsed = feedparser.parse(document, response_headers=headers, sanitize_html=False, resolve_relative_uris=False)

    if not parsed.get("version") and not parsed.entries:
        if parsed.get("bozo"):
            logger.debug("feedparser rejected %s: %s", source_url, parsed.get("bozo_exception"))
        raise NotAFeedError("Feed not recognized as RSS 1 or 2.")

    meta = parsed.feed
    title = meta.get("title") or None
    return NormalizedFeed(
        title=title,
        description=meta.get("subtitle") or None,
        link=meta.get("link") or None,
        items=[entry_to_item(e, title, source_url) for e in parsed.entries],
    )


def parse_feed_xml(xml: str, source_url: str | None = None) -> NormalizedFeed:
    # bytes, so feedparser never treats the argument as a URL or path
    return parse_feed_document(xml.encode("utf-8"), source_url)
