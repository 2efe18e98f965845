"""Page-preview extraction from fetched HTML."""

from __future__ import annotations

import re
from typing import Iterable

import structlog
from selectolax.parser import HTMLParser

from ..config import DEFAULT_PREVIEW_PROPERTIES

TITLE_WORDS = 10
DESCRIPTION_WORDS = 20
ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


def trim_words(text: str, limit: int, more: str = ELLIPSIS) -> str:
    """Keep the first ``limit`` words, appending ``more`` when something was cut."""

    words = [word for word in _WHITESPACE.split(text.strip()) if word]
    if len(words) > limit:
        return " ".join(words[:limit]) + more
    return " ".join(words)


class PreviewParser:
    """Extract an allow-listed set of Open Graph properties.

    ``og:site_name`` style names are reported as ``site-name``. When a page
    repeats a property the last tag wins. ``<title>`` and
    ``<meta name="description">`` stand in for missing ``og:title`` and
    ``og:description``.
    """

    def __init__(
        self,
        properties: Iterable[str] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        allowed = DEFAULT_PREVIEW_PROPERTIES if properties is None else properties
        self.properties = [prop.strip().lower().replace("_", "-") for prop in allowed]
        self.logger = logger or structlog.get_logger("linkwatch.parser")

    def parse(self, html: str) -> dict[str, str]:
        try:
            return self._parse(html)
        except Exception as exc:  # noqa: BLE001
            self.logger.warning("preview_parse_failed", error=str(exc))
            return {}

    def _parse(self, html: str) -> dict[str, str]:
        if not html:
            return {}
        tree = HTMLParser(html)
        preview: dict[str, str] = {}
        for node in tree.css("meta"):
            attributes = node.attributes
            prop = (attributes.get("property") or "").strip().lower()
            content = attributes.get("content")
            if not prop.startswith("og:") or content is None:
                continue
            name = prop[3:].replace("_", "-")
            if name not in self.properties:
                continue
            preview[name] = content.strip()

        if "title" in self.properties and not preview.get("title"):
            title_node = tree.css_first("title")
            title = title_node.text(strip=True) if title_node else ""
            if title:
                preview["title"] = title
        if "description" in self.properties and not preview.get("description"):
            for node in tree.css("meta"):
                if (node.attributes.get("name") or "").strip().lower() != "description":
                    continue
                description = (node.attributes.get("content") or "").strip()
                if description:
                    preview["description"] = description
                    break

        preview = {name: value for name, value in preview.items() if value}
        if "title" in preview:
            preview["title"] = trim_words(preview["title"], TITLE_WORDS)
        if "description" in preview:
            preview["description"] = trim_words(preview["description"], DESCRIPTION_WORDS)
        return preview


__all__ = ["DESCRIPTION_WORDS", "ELLIPSIS", "PreviewParser", "TITLE_WORDS", "trim_words"]
