from __future__ import annotations

from typing import Any, Callable

import pytest

from feed_merger.config import ParserSettings
from feed_merger.errors import FetchError
from feed_merger.http import HttpResponse


class FakeClient:
    """Stands in for HttpClient; routes map a URL to a response, an exception,
    or a callable taking the Accept header."""

    def __init__(self, routes: dict[str, Any], settings: ParserSettings | None = None) -> None:
        self.routes = routes
        self.settings = settings or ParserSettings()
        self.calls: list[tuple[str, str]] = []

    async def get(self, url: str, accept: str) -> HttpResponse:
        self.calls.append((url, accept))
        route = self.routes.get(url)
        if route is None:
            raise FetchError(url, 404)
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            route = route(accept)
        return route

    def urls_called(self) -> list[str]:
        return [u for u, _ in self.calls]


def response(url: str, body: str, content_type: str, status: int = 200) -> HttpResponse:
    return HttpResponse(url=url, status=status, content_type=content_type, body=body.encode("utf-8"))


@pytest.fixture
def make_client() -> Callable[..., FakeClient]:
    return FakeClient


@pytest.fixture
def make_response() -> Callable[..., HttpResponse]:
    return response


FEED1_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Feed 1</title>
    <description>First feed</description>
    <link>http://example.com</link>
    <item>
      <title>Article 1 from Feed 1</title>
      <link>http://example.com/article1</link>
      <description>Content of article 1</description>
      <pubDate>Tue, 28 Oct 2025 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Article 2 from Feed 1</title>
      <link>http://example.com/article2</link>
      <description>Content of article 2</description>
      <pubDate>Mon, 27 Oct 2025 10:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

FEED2_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/">
  <channel>
    <title>Feed 2</title>
    <description>Second feed</description>
    <link>http://example2.com</link>
    <item>
      <title>Article 1 from Feed 2</title>
      <link>http://example2.com/article1</link>
      <description>Content of feed 2 article 1</description>
      <pubDate>Wed, 29 Oct 2025 15:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""


@pytest.fixture
def feed1_xml() -> str:
    return FEED1_XML


@pytest.fixture
def feed2_xml() -> str:
    return FEED2_XML
