"""RSS 2.0 output, assembled as strings.

Escaping rules:

* text outside CDATA is escaped for ``& < > " '``;
* CDATA payloads are written verbatim, except that ``]]>`` is split across
  two sections;
* ``<description>`` snippets additionally go through :func:`strip_control_chars`.

If the finished document is not well-formed XML, :func:`render_rss` logs a
warning and returns :func:`render_minimal_rss` instead.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from lxml import etree

from feed_merger.dates import now_utc, to_http_date
from feed_merger.types import MergedFeed, NormalizedItem, text_of

logger = logging.getLogger(__name__)

GENERATOR = "feed-merger"
DEFAULT_TITLE = "Merged Feed"
DEFAULT_DESCRIPTION = "Combined feed from multiple sources"
RSS_CONTENT_TYPE = "application/rss+xml; charset=utf-8"

_NON_PRINTABLE_RE = re.compile(r"[^\x20-\x7E\n\r\t]")
_UNSAFE_FALLBACK_RE = re.compile(r"[^A-Za-z0-9_ \t\n\r.,;:!?'\"()\[\]{}-]")

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def strip_control_chars(text: str) -> str:
    """Drop everything outside printable ASCII, keeping newlines and tabs."""

    return _NON_PRINTABLE_RE.sub("", text)


def escape_xml(value: Any) -> str:
    s = text_of(value)
    for raw, entity in _XML_ESCAPES:
        s = s.replace(raw, entity)
    return s


def wrap_cdata(value: Any) -> str:
    s = text_of(value).replace("]]>", "]]]]><![CDATA[>")
    return f"<![CDATA[{s}]]>"


def _render_item(item: NormalizedItem) -> str:
    lines = ["    <item>"]

    if item.title:
        lines.append(f"      <title>{escape_xml(item.title)}</title>")
    else:
        lines.append("      <title />")

    if item.link:
        lines.append(f"      <link>{escape_xml(item.link)}</link>")

    guid = text_of(item.guid) or text_of(item.link)
    lines.append(f"      <guid>{escape_xml(guid)}</guid>")

    pub_date = item.pub_date or item.iso_date
    if pub_date:
        lines.append(f"      <pubDate>{escape_xml(pub_date)}</pubDate>")

    if item.creator:
        lines.append(f"      <dc:creator>{wrap_cdata(item.creator)}</dc:creator>")

    if item.content:
        lines.append(f"      <content:encoded>{wrap_cdata(item.content)}</content:encoded>")
    elif item.content_snippet:
        lines.append(f"      <description>{escape_xml(strip_control_chars(text_of(item.content_snippet)))}</description>")

    for category in item.categories:
        lines.append(f"      <category>{escape_xml(category)}</category>")

    if item.source_feed_title and item.source_feed_url:
        lines.append(
            f'      <source url="{escape_xml(item.source_feed_url)}">{escape_xml(item.source_feed_title)}</source>'
        )

    lines.append("    </item>")
    return "\n".join(lines) + "\n"


def _is_well_formed(xml: str) -> bool:
    try:
        etree.fromstring(xml.encode("utf-8"))
    except (etree.XMLSyntaxError, ValueError):
        return False
    return True


def build_rss(merged: MergedFeed, request_url: Optional[str] = None) -> str:
    items = "".join(_render_item(i) for i in merged.items)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0" xmlns:content="http://purl.org/rss/1.0/modules/content/" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
        "  <channel>\n"
        f"    <title>{escape_xml(merged.title or DEFAULT_TITLE)}</title>\n"
        f"    <description>{escape_xml(merged.description or DEFAULT_DESCRIPTION)}</description>\n"
        f"    <link>{escape_xml(merged.link or request_url or '')}</link>\n"
        f"    <lastBuildDate>{to_http_date(now_utc())}</lastBuildDate>\n"
        f"    <generator>{GENERATOR}</generator>\n"
        f"{items}"
        "  </channel>\n"
        "</rss>"
    )


def _sanitize(value: Any) -> str:
    return _UNSAFE_FALLBACK_RE.sub("", text_of(value))


def render_minimal_rss(merged: MergedFeed, request_url: Optional[str] = None) -> str:
    """Bare channel with sanitized titles, links and snippets; everything else is omitted."""

    parts = []
    for item in merged.items:
        lines = ["    <item>", f"      <title>{escape_xml(_sanitize(item.title or 'Untitled'))}</title>"]
        if item.link:
            lines.append(f"      <link>{escape_xml(strip_control_chars(item.link))}</link>")
        if item.content_snippet:
            lines.append(f"      <description>{escape_xml(_sanitize(item.content_snippet))}</description>")
        lines.append("    </item>")
        parts.append("\n".join(lines) + "\n")

    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<rss version="2.0">\n'
        "  <channel>\n"
        f"    <title>{DEFAULT_TITLE}</title>\n"
        f"    <description>{DEFAULT_DESCRIPTION}</description>\n"
        f"    <link>{escape_xml(strip_control_chars(merged.link or request_url or ''))}</link>\n"
        f"{''.join(parts)}"
        "  </channel>\n"
        "</rss>"
    )


def render_rss(merged: MergedFeed, request_url: Optional[str] = None) -> str:
    xml = build_rss(merged, request_url)
    if _is_well_formed(xml):
        return xml
    logger.warning("Merged RSS is not well-formed XML, falling back to a minimal channel")
    return render_minimal_rss(merged, request_url)
