"""Data models for paginated indexes and category archives."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from nuggetpress.content_loader.models import Post


@dataclass(frozen=True)
class Page:
    """One index page: a fixed-size slice of date-ordered posts."""
    number: int  # 1-based
    total_pages: int
    total_posts: int
    per_page: int
    posts: tuple[Post, ...]
    url: str
    title: str
    previous_url: Optional[str] = None
    next_url: Optional[str] = None

    @property
    def previous_number(self) -> Optional[int]:
        return self.number - 1 if self.number > 1 else None

    @property
    def next_number(self) -> Optional[int]:
        return self.number + 1 if self.number < self.total_pages else None

    def to_template_context(self, post_contexts: list[dict[str, Any]]) -> dict[str, Any]:
        """Convert to the ``paginator`` mapping exposed to layouts."""
        return {
            "page": self.number,
            "per_page": self.per_page,
            "posts": post_contexts,
            "total_posts": self.total_posts,
            "total_pages": self.total_pages,
            "previous_page": self.previous_number,
            "previous_page_path": self.previous_url,
            "next_page": self.next_number,
            "next_page_path": self.next_url,
            "url": self.url,
        }


@dataclass(frozen=True)
class CategoryArchive:
    """All posts filed under one category, newest first."""
    name: str
    slug: str
    url: str
    posts: tuple[Post, ...]

    def to_template_context(self, post_contexts: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "name": self.name,
            "slug": self.slug,
            "url": self.url,
            "posts": post_contexts,
            "size": len(self.posts),
        }
