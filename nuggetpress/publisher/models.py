"""Data models for the publisher module."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from markupsafe import Markup, escape


class PluginName(str, Enum):
    """Built-in capabilities that ``plugins:`` can switch on."""
    FEED = "feed"
    SEO = "seo"
    PAGINATE = "paginate"


@dataclass
class SEOMetaTags:
    """SEO metadata for one generated page."""
    title: str = ""
    description: str = ""  # 150-160 chars
    canonical_url: str = ""
    site_name: str = ""
    og_type: str = "website"
    og_image: str = ""
    published_time: str = ""
    twitter_card: str = "summary"
    json_ld: dict[str, Any] = field(default_factory=dict)

    def to_html_tags(self) -> Markup:
        """Generate HTML meta tags (escaped, deterministic order)."""
        tags = []
        if self.title:
            tags.append(f"<title>{escape(self.title)}</title>")
            tags.append(f'<meta property="og:title" content="{escape(self.title)}">')
        if self.description:
            tags.append(f'<meta name="description" content="{escape(self.description)}">')
            tags.append(f'<meta property="og:description" content="{escape(self.description)}">')
        if self.canonical_url:
            tags.append(f'<link rel="canonical" href="{escape(self.canonical_url)}">')
            tags.append(f'<meta property="og:url" content="{escape(self.canonical_url)}">')
        if self.site_name:
            tags.append(f'<meta property="og:site_name" content="{escape(self.site_name)}">')
        tags.append(f'<meta property="og:type" content="{escape(self.og_type)}">')
        if self.og_image:
            tags.append(f'<meta property="og:image" content="{escape(self.og_image)}">')
        if self.published_time:
            tags.append(
                f'<meta property="article:published_time" content="{escape(self.published_time)}">'
            )
        tags.append(f'<meta name="twitter:card" content="{escape(self.twitter_card)}">')
        if self.title:
            tags.append(f'<meta property="twitter:title" content="{escape(self.title)}">')
        if self.json_ld:
            payload = json.dumps(self.json_ld, sort_keys=True, ensure_ascii=False)
            payload = payload.replace("</", "<\\/")
            tags.append(f'<script type="application/ld+json">{payload}</script>')
        return Markup("\n".join(tags))


@dataclass(frozen=True)
class RenderedOutput:
    """One generated file: path relative to the output root plus bytes."""
    path: str
    content: bytes
    source: Optional[Path] = None

    @classmethod
    def from_text(cls, path: str, text: str, source: Optional[Path] = None) -> RenderedOutput:
        return cls(path=path, content=text.encode("utf-8"), source=source)


@dataclass
class BuildResult:
    """Summary of a completed build."""
    destination: Path
    post_count: int = 0
    page_count: int = 0  # standalone pages
    index_page_count: int = 0
    category_count: int = 0
    feed_entries: int = 0
    static_count: int = 0
    outputs: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.outputs) + self.static_count
