from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import aiohttp

from feed_merger.config import ParserSettings
from feed_merger.errors import FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    url: str
    status: int
    content_type: str
    body: bytes

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class HttpClient:
    def __init__(
        self,
        session: aiohttp.ClientSession,
        settings: ParserSettings,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._sem = semaphore or asyncio.Semaphore(settings.max_in_flight_requests)
        self._timeout = aiohttp.ClientTimeout(total=settings.timeout_seconds)

    @property
    def settings(self) -> ParserSettings:
        return self._settings

    async def get(self, url: str, accept: str) -> HttpResponse:
        """Fetch ``url`` once. Raises FetchError for 4xx/5xx, aiohttp errors propagate."""

        headers: dict[str, str] = {
            # some hosts answer 429 to requests without a user agent
            "User-Agent": self._settings.user_agent,
            "Accept": accept,
        }

        async with self._sem:
            async with self._session.get(url, headers=headers, timeout=self._timeout) as r:
                status = r.status
                if status >= 400:
                    logger.debug("GET %s -> %s", url, status)
                    raise FetchError(url, status)
                body = await r.read()
                content_type = r.headers.get("Content-Type", "")

        return HttpResponse(url=str(url), status=status, content_type=content_type.lower(), body=body)
