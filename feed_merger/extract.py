from __future__ import annotations

from typing import Optional

from bs4 import BeautifulSoup


def html_to_text(html_fragment: str | None) -> Optional[str]:
    """Convert an HTML snippet (e.g., an RSS description) to plain text."""

    if not html_fragment:
        return None
    if "<" not in html_fragment and "&" not in html_fragment:
        return html_fragment.strip()
    soup = BeautifulSoup(html_fragment, "lxml")
    return soup.get_text(" ", strip=True)
