from __future__ import annotations

import logging
from typing import Optional, Sequence

from feed_merger.config import Config
from feed_merger.errors import NoSourcesError
from feed_merger.fetch import fetch_all
from feed_merger.http import HttpClient
from feed_merger.jsonfeed import JSON_FEED_CONTENT_TYPE, render_json_feed
from feed_merger.merge import merge_feeds
from feed_merger.render import RSS_CONTENT_TYPE, render_rss
from feed_merger.types import FeedFetchResult, MergedFeed, RenderedFeed

logger = logging.getLogger(__name__)

_RENDERERS = {
    "rss": (render_rss, RSS_CONTENT_TYPE),
    "json": (render_json_feed, JSON_FEED_CONTENT_TYPE),
    "jsonfeed": (render_json_feed, JSON_FEED_CONTENT_TYPE),
}


def normalize_format(fmt: str | None) -> str:
    f = (fmt or "rss").strip().lower()
    return f if f in _RENDERERS else "rss"


def render(merged: MergedFeed, fmt: str | None, request_url: Optional[str], cfg: Config) -> RenderedFeed:
    renderer, content_type = _RENDERERS[normalize_format(fmt)]
    return RenderedFeed(
        body=renderer(merged, request_url),
        content_type=content_type,
        cache_control=cfg.cache_control,
    )


def merge_results(results: Sequence[FeedFetchResult], request_url: Optional[str], cfg: Config) -> MergedFeed:
    return merge_feeds(results, request_url, title=cfg.merged_title, max_items=cfg.max_items)


async def run_merge(
    urls: Sequence[str],
    *,
    request_url: Optional[str] = None,
    fmt: str | None = "rss",
    cfg: Config | None = None,
    client: HttpClient | None = None,
) -> RenderedFeed:
    """Fetch every source, merge, and render in the requested format.

    Raises NoSourcesError before any network access when ``urls`` is empty.
    """

    cfg = cfg or Config(raw={})
    sources = [u.strip() for u in urls if u and u.strip()]
    if not sources:
        raise NoSourcesError("No RSS feed URLs provided")

    results = await fetch_all(sources, cfg.parser_settings(), client=client)

    failed = sum(1 for r in results if r.error)
    logger.info("Fetched %d feed(s), %d failed", len(results), failed)

    merged = merge_results(results, request_url, cfg)
    return render(merged, fmt, request_url, cfg)
