"""Data models for loaded site content."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from nuggetpress.common.config import SiteConfig


class Post(BaseModel):
    """A dated blog post parsed from ``_posts/``.

    Immutable once loaded; a content edit replaces the whole post on the
    next build.
    """
    model_config = ConfigDict(frozen=True)

    title: str
    date: date
    slug: str
    url: str
    body: str = ""
    layout: str | None = "post"
    categories: tuple[str, ...] = ()
    source_path: Path
    rel_path: str  # relative to the site source, POSIX separators
    render_with_liquid: bool = False
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def sort_key(self) -> tuple[date, str]:
        return (self.date, self.slug)

    def field_value(self, name: str) -> Any:
        """Return a sortable attribute or front-matter value by name."""
        if name in type(self).model_fields:
            return getattr(self, name)
        return self.extra.get(name)

    def to_template_context(self) -> dict[str, Any]:
        """Convert to the ``page``/``post`` mapping exposed to layouts."""
        context = dict(self.extra)
        context.update(
            title=self.title,
            date=self.date,
            slug=self.slug,
            url=self.url,
            layout=self.layout,
            categories=list(self.categories),
            path=self.rel_path,
            id=self.url,
        )
        return context


class SitePage(BaseModel):
    """A standalone page with front matter outside ``_posts/`` (e.g. about.md)."""
    model_config = ConfigDict(frozen=True)

    title: str
    url: str
    body: str = ""
    layout: str | None = "page"
    source_path: Path
    rel_path: str
    is_markdown: bool = True
    render_with_liquid: bool = False
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_home(self) -> bool:
        return self.url == "/"

    def to_template_context(self) -> dict[str, Any]:
        context = dict(self.extra)
        context.update(
            title=self.title,
            url=self.url,
            layout=self.layout,
            path=self.rel_path,
        )
        return context


class Site(BaseModel):
    """Everything the loader produces for one build."""
    model_config = ConfigDict(frozen=True)

    source_dir: Path
    config: SiteConfig
    posts: tuple[Post, ...] = ()
    pages: tuple[SitePage, ...] = ()
    static_files: tuple[str, ...] = ()  # relative POSIX paths
