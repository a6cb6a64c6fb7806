from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urljoin

import aiohttp
from bs4 import BeautifulSoup

from feed_merger.errors import FeedMergerError
from feed_merger.http import HttpClient

logger = logging.getLogger(__name__)


FEED_MEDIA_TYPES = (
    "application/rss+xml",
    "application/atom+xml",
    "application/feed+json",
    "application/json",
)


@dataclass(frozen=True)
class DiscoveredFeed:
    url: str
    media_type: str
    title: str | None


def _is_html(content_type: str) -> bool:
    ct = (content_type or "").lower()
    return "text/html" in ct or "application/xhtml" in ct


def _resolve_href(page_url: str, href: str) -> str:
    # absolute, //host, /path and dir-relative hrefs all resolve the way browsers do
    return urljoin(page_url, href)


def _rel_values(tag) -> list[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return [r.lower() for r in rel]


def find_feed_links(page_url: str, html: str) -> list[DiscoveredFeed]:
    """All ``<link rel="alternate">`` tags that advertise a feed, in document order."""

    soup = BeautifulSoup(html or "", "lxml")

    found: list[DiscoveredFeed] = []
    for link in soup.find_all("link"):
        if "alternate" not in _rel_values(link):
            continue
        media_type = str(link.get("type") or "").strip().lower()
        href = str(link.get("href") or "").strip()
        if not media_type or not href:
            continue
        if not any(t in media_type for t in FEED_MEDIA_TYPES):
            continue
        found.append(DiscoveredFeed(url=_resolve_href(page_url, href), media_type=media_type, title=link.get("title")))
    return found


def find_feed_link(page_url: str, html: str) -> Optional[str]:
    links = find_feed_links(page_url, html)
    return links[0].url if links else None


async def discover_feed_url(client: HttpClient, url: str) -> Optional[str]:
    """Fetch ``url`` as a web page and return the first feed it advertises.

    Never raises for network or content problems; those mean "nothing found".
    """

    try:
        r = await client.get(url, accept=client.settings.accept_html)
    except asyncio.CancelledError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError, FeedMergerError) as exc:
        logger.debug("Discovery fetch failed for %s: %s", url, exc)
        return None

    if not _is_html(r.content_type):
        return None

    feed_url = find_feed_link(url, r.text())
    if feed_url:
        logger.info("Discovered feed %s from %s", feed_url, url)
    return feed_url
