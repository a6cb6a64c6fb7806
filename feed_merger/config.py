from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


DEFAULT_USER_AGENT = "feed-merger (+https://github.com/feed-merger/feed-merger)"
DEFAULT_MERGED_TITLE = "Merged Feed"
DEFAULT_MAX_ITEMS = 100
DEFAULT_CACHE_CONTROL = "max-age=600, s-maxage=600"


@dataclass(frozen=True)
class ParserSettings:
    """Everything a fetch needs to know; built once per run and shared read-only."""

    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 20.0
    max_in_flight_requests: int = 8
    accept_json: str = "application/json, application/feed+json, */*"
    accept_feed: str = "application/rss+xml, application/atom+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.5"
    accept_html: str = "text/html, application/xhtml+xml, */*"


@dataclass(frozen=True)
class Config:
    raw: dict[str, Any]

    def _section(self, name: str) -> dict[str, Any]:
        if not isinstance(self.raw, dict):
            return {}
        section = self.raw.get(name)
        return section if isinstance(section, dict) else {}

    @property
    def merged_title(self) -> str:
        return str(self._section("merge").get("title") or DEFAULT_MERGED_TITLE)

    @property
    def max_items(self) -> int:
        return int(self._section("merge").get("max_items", DEFAULT_MAX_ITEMS))

    @property
    def cache_control(self) -> str:
        return str(self._section("output").get("cache_control") or DEFAULT_CACHE_CONTROL)

    def parser_settings(self) -> ParserSettings:
        http_cfg = self._section("http")
        return ParserSettings(
            user_agent=str(http_cfg.get("user_agent") or DEFAULT_USER_AGENT),
            timeout_seconds=float(http_cfg.get("timeout_seconds", 20)),
            max_in_flight_requests=int(http_cfg.get("max_in_flight_requests", 8)),
        )


def load_yaml(path: str | Path) -> dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


def load_config(path: str | Path | None = None) -> Config:
    if path is None:
        return Config(raw={})
    return Config(raw=load_yaml(path))
