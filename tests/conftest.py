"""Shared test fixtures for nugget-press."""

import shutil
import sys
from datetime import date
from pathlib import Path
from typing import Callable, Optional

import pytest

# Ensure the package is importable without installation
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from nuggetpress.content_loader.models import Post


SAMPLE_SITE_DIR = PROJECT_ROOT / "fixtures" / "sample_site"

BASE_CONFIG = """\
title: Test Blog
description: Posts for testing.
url: "https://example.com"
baseurl: ""
plugins:
  - jekyll-seo-tag
  - jekyll-feed
  - jekyll-paginate-v2
permalink: /:title/:year-:month-:day
pagination:
  enabled: true
  per_page: 5
  permalink: '/page/:num/'
  title: ' - page :num'
  limit: 0
  sort_field: 'date'
  sort_reverse: true
"""


def post_text(
    title: str = "A post",
    post_date: Optional[str] = None,
    categories: Optional[str] = None,
    body: str = "First paragraph.\n\nSecond paragraph.\n",
    extra: str = "",
) -> str:
    """Return the text of a post file with front matter."""
    lines = ["---", f'title: "{title}"']
    if post_date:
        lines.append(f"date: {post_date}")
    if categories:
        lines.append(f"categories: {categories}")
    if extra:
        lines.append(extra.rstrip("\n"))
    lines.append("---")
    return "\n".join(lines) + "\n\n" + body


@pytest.fixture(autouse=True)
def clean_site_env(monkeypatch):
    """Keep environment overrides from leaking into configuration tests."""
    monkeypatch.delenv("SITE_URL", raising=False)
    monkeypatch.delenv("SITE_ENV", raising=False)


@pytest.fixture
def make_site(tmp_path) -> Callable[..., Path]:
    """Factory writing a site source tree under tmp_path/site."""

    def _make(
        posts: Optional[dict[str, str]] = None,
        files: Optional[dict[str, str]] = None,
        config: str = BASE_CONFIG,
    ) -> Path:
        root = tmp_path / "site"
        root.mkdir(exist_ok=True)
        (root / "_config.yml").write_text(config, encoding="utf-8")
        (root / "_posts").mkdir(exist_ok=True)
        for name, text in (posts or {}).items():
            path = root / "_posts" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        for name, text in (files or {}).items():
            path = root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def many_posts() -> dict[str, str]:
    """Twelve posts on consecutive days of September 2024."""
    return {
        f"2024-09-{day:02d}-post-{day:02d}.md": post_text(title=f"Post {day}")
        for day in range(1, 13)
    }


@pytest.fixture
def sample_site(tmp_path) -> Path:
    """Copy of fixtures/sample_site (original Monday Nugget configuration)."""
    target = tmp_path / "sample_site"
    shutil.copytree(SAMPLE_SITE_DIR, target)
    return target


def make_post(
    slug: str,
    post_date: date,
    categories: tuple[str, ...] = (),
    title: Optional[str] = None,
    **extra,
) -> Post:
    """Build a Post directly, bypassing the loader."""
    return Post(
        title=title or slug.replace("-", " ").title(),
        date=post_date,
        slug=slug,
        url=f"/{slug}/{post_date.isoformat()}",
        body=f"Body of {slug}.\n",
        categories=categories,
        source_path=Path(f"_posts/{post_date.isoformat()}-{slug}.md"),
        rel_path=f"_posts/{post_date.isoformat()}-{slug}.md",
        extra=extra,
    )
