from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

import aiohttp

from feed_merger.config import ParserSettings
from feed_merger.discover import discover_feed_url
from feed_merger.errors import FeedMergerError
from feed_merger.http import HttpClient
from feed_merger.jsonfeed import is_json_content_type, parse_json_feed
from feed_merger.rss import parse_feed_document
from feed_merger.types import FeedFetchResult, NormalizedFeed

logger = logging.getLogger(__name__)


def error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


async def try_json_feed(client: HttpClient, url: str) -> Optional[NormalizedFeed]:
    """Probe ``url`` for a JSON Feed. Anything else, including errors, yields None."""

    try:
        r = await client.get(url, accept=client.settings.accept_json)
    except asyncio.CancelledError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError, FeedMergerError) as exc:
        logger.debug("JSON probe failed for %s: %s", url, exc)
        return None

    if not is_json_content_type(r.content_type):
        return None
    try:
        return parse_json_feed(r.text(), url)
    except (FeedMergerError, TypeError, AttributeError) as exc:
        logger.debug("%s is JSON but not a JSON Feed: %s", url, exc)
        return None


async def resolve_no_discovery(client: HttpClient, url: str) -> NormalizedFeed:
    """JSON Feed first, then RSS/Atom. Raises on failure."""

    feed = await try_json_feed(client, url)
    if feed is not None:
        return feed

    r = await client.get(url, accept=client.settings.accept_feed)
    return parse_feed_document(r.body, url, content_type=r.content_type)


async def resolve(client: HttpClient, url: str) -> FeedFetchResult:
    """Fetch and normalize one source, falling back to one hop of HTML discovery.

    Always returns a result; failures come back as ``FeedFetchResult.error``.
    """

    try:
        try:
            feed = await resolve_no_discovery(client, url)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            discovered = await discover_feed_url(client, url)
            if not discovered:
                raise
            logger.info("Falling back to discovered feed %s for %s (%s)", discovered, url, error_message(exc))
            feed = await resolve_no_discovery(client, discovered)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.warning("Error fetching feed from %s: %s", url, error_message(exc))
        return FeedFetchResult(url=url, error=error_message(exc))

    return FeedFetchResult(url=url, feed=feed)


async def fetch_all(
    urls: Sequence[str],
    settings: ParserSettings,
    *,
    client: HttpClient | None = None,
) -> list[FeedFetchResult]:
    """Resolve every source concurrently; results keep the order of ``urls``."""

    if client is not None:
        return list(await asyncio.gather(*(resolve(client, u) for u in urls)))

    connector = aiohttp.TCPConnector(limit=settings.max_in_flight_requests)
    async with aiohttp.ClientSession(connector=connector) as session:
        http = HttpClient(session=session, settings=settings)
        return list(await asyncio.gather(*(resolve(http, u) for u in urls)))
