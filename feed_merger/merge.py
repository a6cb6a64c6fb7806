from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from feed_merger.config import DEFAULT_MAX_ITEMS, DEFAULT_MERGED_TITLE
from feed_merger.dates import EPOCH, now_utc, parse_dt, to_http_date, to_iso
from feed_merger.render import escape_xml
from feed_merger.types import FeedFetchResult, MergedFeed, NormalizedItem

ERROR_GUID_PREFIX = "error-"


def failure_item(url: str, error: str, now: datetime | None = None) -> NormalizedItem:
    now = now or now_utc()
    millis = int(now.timestamp() * 1000)
    return NormalizedItem(
        title=f"⚠️ Failed to load feed: {url}",
        link=url,
        pub_date=to_http_date(now),
        iso_date=to_iso(now),
        content_snippet=f"Error: {error}",
        content=(
            "<p>Failed to load this feed:</p>"
            f"<p><code>{escape_xml(url)}</code></p>"
            f"<p>Error: {escape_xml(error)}</p>"
        ),
        guid=f"{ERROR_GUID_PREFIX}{url}-{millis}",
    )


def item_timestamp(item: NormalizedItem) -> datetime:
    # iso_date wins when present, even if pub_date would parse
    if item.iso_date:
        dt = parse_dt(item.iso_date)
    else:
        dt = parse_dt(item.pub_date)
    return dt or EPOCH


def sort_items(items: Sequence[NormalizedItem]) -> list[NormalizedItem]:
    """Newest first. ``sorted`` is stable with reverse=True, so ties keep input order."""

    return sorted(items, key=item_timestamp, reverse=True)


def merge_feeds(
    results: Sequence[FeedFetchResult],
    request_url: Optional[str] = None,
    *,
    title: str = DEFAULT_MERGED_TITLE,
    max_items: int = DEFAULT_MAX_ITEMS,
) -> MergedFeed:
    items: list[NormalizedItem] = []
    failures: list[FeedFetchResult] = []

    for r in results:
        if r.error:
            failures.append(r)
        elif r.feed is not None and r.feed.items:
            items.extend(r.feed.items)

    now = now_utc()
    error_items = [failure_item(f.url or "unknown", f.error or "", now) for f in failures]

    titles = [r.feed.title for r in results if r.feed is not None and r.feed.title]
    description = "Combined feed from " + ", ".join(titles)
    if failures:
        description += f" ({len(failures)} feed(s) failed to load)"

    return MergedFeed(
        title=title,
        description=description,
        link=request_url,
        items=(error_items + sort_items(items))[:max_items],
    )
