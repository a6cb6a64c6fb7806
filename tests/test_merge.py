"""Tests for feed_merger.merge."""

import json
from datetime import datetime, timezone

from feed_merger.merge import failure_item, item_timestamp, merge_feeds, sort_items
from feed_merger.dates import EPOCH
from feed_merger.jsonfeed import parse_json_feed
from feed_merger.rss import parse_feed_xml
from feed_merger.types import FeedFetchResult, NormalizedFeed, NormalizedItem


def _ok(url: str, title: str | None, items: list[NormalizedItem]) -> FeedFetchResult:
    return FeedFetchResult(url=url, feed=NormalizedFeed(title=title, items=items))


def _item(guid: str, iso: str | None = None, pub: str | None = None) -> NormalizedItem:
    return NormalizedItem(title=guid, guid=guid, iso_date=iso, pub_date=pub, source_feed_title="F", source_feed_url="u")


class TestMergeFeeds:
    def test_orders_across_feeds_newest_first(self, feed1_xml, feed2_xml) -> None:
        r1 = FeedFetchResult(url="http://example.com/feed1", feed=parse_feed_xml(feed1_xml, "http://example.com/feed1"))
        r2 = FeedFetchResult(url="http://example2.com/feed2", feed=parse_feed_xml(feed2_xml, "http://example2.com/feed2"))

        merged = merge_feeds([r1, r2], "http://example.com/merged")

        assert [i.title for i in merged.items] == [
            "Article 1 from Feed 2",
            "Article 1 from Feed 1",
            "Article 2 from Feed 1",
        ]
        assert merged.items[0].source_feed_title == "Feed 2"
        assert merged.title == "Merged Feed"
        assert merged.link == "http://example.com/merged"
        assert merged.description == "Combined feed from Feed 1, Feed 2"

    def test_failure_goes_first(self) -> None:
        valid = _ok("http://example.com/valid", "Valid Feed", [_item("a", pub="Tue, 28 Oct 2025 10:00:00 GMT")])
        failed = FeedFetchResult(url="http://example.com/failed", error="Failed to fetch feed")

        merged = merge_feeds([valid, failed], "http://example.com/merged")

        assert len(merged.items) == 2
        err, real = merged.items
        assert str(err.guid).startswith("error-http://example.com/failed-")
        assert err.title == "⚠️ Failed to load feed: http://example.com/failed"
        assert err.link == "http://example.com/failed"
        assert err.source_feed_title is None
        assert real.guid == "a"
        assert merged.description == "Combined feed from Valid Feed (1 feed(s) failed to load)"

    def test_failures_keep_result_order(self) -> None:
        results = [
            FeedFetchResult(url="https://b/", error="x"),
            _ok("https://ok/", "Ok", [_item("newest", iso="2030-01-01T00:00:00Z")]),
            FeedFetchResult(url="https://a/", error="y"),
        ]
        items = merge_feeds(results).items
        assert [i.link for i in items[:2]] == ["https://b/", "https://a/"]
        assert items[2].guid == "newest"

    def test_ties_keep_input_order(self) -> None:
        same = "2025-10-28T10:00:00Z"
        r1 = _ok("u1", "A", [_item("a1", iso=same), _item("a2", iso=same)])
        r2 = _ok("u2", "B", [_item("b1", iso=same)])
        assert [i.guid for i in merge_feeds([r1, r2]).items] == ["a1", "a2", "b1"]

    def test_dateless_items_sink(self) -> None:
        r = _ok("u", "A", [_item("none"), _item("old", pub="Mon, 01 Jan 2001 00:00:00 GMT"), _item("garbage", pub="not a date")])
        assert [i.guid for i in merge_feeds([r]).items] == ["old", "none", "garbage"]

    def test_truncates_after_ordering(self) -> None:
        items = [_item(f"i{n}", iso=f"2025-01-01T00:{n % 60:02d}:{n // 60:02d}Z") for n in range(150)]
        failed = FeedFetchResult(url="https://down/", error="boom")
        merged = merge_feeds([_ok("u", "A", items), failed])

        assert len(merged.items) == 100
        assert str(merged.items[0].guid).startswith("error-")
        stamps = [item_timestamp(i) for i in merged.items[1:]]
        assert stamps == sorted(stamps, reverse=True)

    def test_max_items_is_configurable(self) -> None:
        r = _ok("u", "A", [_item(str(n)) for n in range(5)])
        assert len(merge_feeds([r], max_items=3).items) == 3

    def test_empty_feed_without_error(self) -> None:
        merged = merge_feeds([FeedFetchResult(url="u"), _ok("v", "Empty", [])])
        assert merged.items == []
        assert merged.description == "Combined feed from Empty"

    def test_json_feed_with_numeric_date(self) -> None:
        doc = {
            "version": "https://jsonfeed.org/version/1.1",
            "title": "Numbers",
            "items": [{"id": "1", "date_published": 1761739200}, {"id": "2", "date_published": "2025-10-29T08:00:00Z"}],
        }
        feed = parse_json_feed(json.dumps(doc), "https://n.example.com/feed.json")

        merged = merge_feeds([FeedFetchResult(url="https://n.example.com/feed.json", feed=feed)])

        assert [i.guid for i in merged.items] == ["2", "1"]


class TestFailureItem:
    def test_content_is_escaped(self) -> None:
        now = datetime(2025, 10, 29, 12, 0, 0, tzinfo=timezone.utc)
        item = failure_item("http://x/?a=1&b=2", "bad <xml>", now)

        assert item.content == (
            "<p>Failed to load this feed:</p>"
            "<p><code>http://x/?a=1&amp;b=2</code></p>"
            "<p>Error: bad &lt;xml&gt;</p>"
        )
        assert item.content_snippet == "Error: bad <xml>"
        assert item.guid == "error-http://x/?a=1&b=2-1761739200000"
        assert item.pub_date == "Wed, 29 Oct 2025 12:00:00 GMT"
        assert item.iso_date == "2025-10-29T12:00:00.000Z"


class TestSortHelpers:
    def test_iso_date_preferred_over_pub_date(self) -> None:
        item = _item("x", iso="2025-10-29T00:00:00Z", pub="Mon, 01 Jan 2001 00:00:00 GMT")
        assert item_timestamp(item) == datetime(2025, 10, 29, tzinfo=timezone.utc)

    def test_missing_dates_are_epoch(self) -> None:
        assert item_timestamp(_item("x")) == EPOCH

    def test_mixed_timezones(self) -> None:
        a = _item("a", pub="Wed, 29 Oct 2025 10:00:00 +0200")  # 08:00 UTC
        b = _item("b", pub="Wed, 29 Oct 2025 09:00:00 GMT")
        assert [i.guid for i in sort_items([a, b])] == ["b", "a"]
