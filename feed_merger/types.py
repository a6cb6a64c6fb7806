from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Attributed:
    """An element that carried attributes next to its text, e.g. ``<guid isPermaLink="false">``."""

    text: str
    attributes: dict[str, str] = field(default_factory=dict)


TaggedText = Union[Text, Attributed]


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def tagged(value: Any) -> TaggedText:
    """Coerce an upstream guid/category value into the tagged form.

    Raw mappings follow the ``{"_": text, "$": {attrs}}`` shape that XML-to-object
    parsers produce for elements with attributes. Attributes may also sit beside
    ``_`` at the top level.
    """

    if isinstance(value, (Text, Attributed)):
        return value
    if value is None:
        return Text("")
    if isinstance(value, Mapping):
        inner = value.get("_")
        attrs = value.get("$")
        if not isinstance(attrs, Mapping):
            attrs = {k: v for k, v in value.items() if k not in {"_", "$"}}
        return Attributed(
            text="" if inner is None else _scalar(inner),
            attributes={str(k): _scalar(v) for k, v in attrs.items()},
        )
    return Text(_scalar(value))


def text_of(value: Any) -> str:
    t = tagged(value)
    if isinstance(t, Attributed):
        return t.text
    return t.value


Category = Union[str, Text, Attributed]


@dataclass(frozen=True)
class NormalizedItem:
    title: Optional[str] = None
    link: Optional[str] = None
    pub_date: Optional[str] = None
    iso_date: Optional[str] = None
    content: Optional[str] = None
    content_snippet: Optional[str] = None
    creator: Optional[str] = None
    guid: Union[str, TaggedText, None] = None
    categories: list[Category] = field(default_factory=list)

    # provenance, stamped by the normalizer
    source_feed_title: Optional[str] = None
    source_feed_url: Optional[str] = None


@dataclass(frozen=True)
class NormalizedFeed:
    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None
    items: list[NormalizedItem] = field(default_factory=list)


@dataclass(frozen=True)
class FeedFetchResult:
    url: str
    feed: Optional[NormalizedFeed] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class MergedFeed:
    title: str
    description: str
    link: Optional[str]
    items: list[NormalizedItem] = field(default_factory=list)


@dataclass(frozen=True)
class RenderedFeed:
    body: str
    content_type: str
    cache_control: str
