"""Paginator/Indexer — date-ordered pages, category archives, feed selection.

Every function here is pure: the same posts and settings always give the
same result, and the input posts are never modified.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import date
from typing import Any

from nuggetpress.common.config import PaginationSettings
from nuggetpress.common.logging import setup_logging
from nuggetpress.content_loader.models import Post
from nuggetpress.content_loader.permalinks import category_slug, normalize_url, page_number_url

from .models import CategoryArchive, Page

logger = setup_logging(module_name="paginator.paginator")

CATEGORY_PERMALINK = "/categories/:name/"


def _sort_value(value: Any) -> tuple:
    if value is None:
        return (1, "")
    if isinstance(value, str):
        return (0, value.lower())
    if isinstance(value, (int, float, date)):
        return (0, value)
    return (0, str(value))


def sort_posts(
    posts: Iterable[Post],
    sort_field: str = "date",
    sort_reverse: bool = True,
) -> list[Post]:
    """Order posts by ``sort_field``; ties keep slug order.

    Args:
        posts: Posts to order.
        sort_field: Post attribute or front-matter key to sort by.
        sort_reverse: True for descending (newest first for dates).

    Returns:
        New sorted list.
    """
    by_slug = sorted(posts, key=lambda p: p.slug)
    if sort_field == "date":
        return sorted(by_slug, key=lambda p: p.date, reverse=sort_reverse)
    try:
        return sorted(
            by_slug,
            key=lambda p: _sort_value(p.field_value(sort_field)),
            reverse=sort_reverse,
        )
    except TypeError:
        logger.warning("Mixed value types for sort field %r, comparing as text", sort_field)
        return sorted(
            by_slug,
            key=lambda p: str(p.field_value(sort_field) or ""),
            reverse=sort_reverse,
        )


def page_title(site_title: str, pattern: str, number: int) -> str:
    if number <= 1:
        return site_title
    return f"{site_title}{pattern.replace(':num', str(number))}"


def paginate(
    posts: Iterable[Post],
    settings: PaginationSettings,
    site_title: str = "",
) -> list[Page]:
    """Split posts into index pages of at most ``settings.per_page`` posts.

    Zero posts yield zero pages. With pagination disabled every post
    lands on a single page. ``settings.limit`` caps the number of pages;
    0 means no cap.

    Example:
        12 posts with per_page=5 give pages of sizes [5, 5, 2].
    """
    ordered = sort_posts(posts, settings.sort_field, settings.sort_reverse)
    if not ordered:
        return []

    per_page = settings.per_page if settings.enabled else len(ordered)
    total_pages = math.ceil(len(ordered) / per_page)
    if settings.enabled and settings.limit:
        total_pages = min(total_pages, settings.limit)

    pages: list[Page] = []
    for number in range(1, total_pages + 1):
        start = (number - 1) * per_page
        pages.append(
            Page(
                number=number,
                total_pages=total_pages,
                total_posts=len(ordered),
                per_page=per_page,
                posts=tuple(ordered[start:start + per_page]),
                url=page_number_url(settings.permalink, number),
                title=page_title(site_title, settings.title, number),
                previous_url=(
                    page_number_url(settings.permalink, number - 1) if number > 1 else None
                ),
                next_url=(
                    page_number_url(settings.permalink, number + 1)
                    if number < total_pages else None
                ),
            )
        )

    logger.debug(
        "Paginated %d posts into %d pages of %d", len(ordered), len(pages), per_page
    )
    return pages


def category_url(name: str) -> str:
    return normalize_url(CATEGORY_PERMALINK.replace(":name", category_slug(name)))


def group_by_category(posts: Iterable[Post]) -> list[CategoryArchive]:
    """Build one archive per category, sorted by category slug.

    Categories that share a slug (for example differing only in case)
    share an archive named after the first spelling seen.
    """
    grouped: dict[str, tuple[str, list[Post]]] = {}
    for post in sort_posts(posts, "date", True):
        for name in post.categories:
            slug = category_slug(name)
            entry = grouped.setdefault(slug, (name, []))
            if post not in entry[1]:
                entry[1].append(post)

    return [
        CategoryArchive(name=name, slug=slug, url=category_url(name), posts=tuple(items))
        for slug, (name, items) in sorted(grouped.items())
    ]


def select_feed_posts(posts: Iterable[Post], limit: int | None = 0) -> list[Post]:
    """Newest-first posts for the feed; a limit of 0 or None keeps all posts."""
    ordered = sort_posts(posts, "date", True)
    if limit:
        return ordered[:limit]
    return ordered
