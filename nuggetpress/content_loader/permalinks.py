"""Permalink templates and URL → output path mapping."""

from __future__ import annotations

import re
import unicodedata
from datetime import date
from pathlib import PurePosixPath

# Built-in permalink styles
PERMALINK_PRESETS = {
    "date": "/:categories/:year/:month/:day/:title:output_ext",
    "pretty": "/:categories/:year/:month/:day/:title/",
    "ordinal": "/:categories/:year/:y_day/:title:output_ext",
    "none": "/:categories/:title:output_ext",
}

_PLACEHOLDER = re.compile(r":([a-z_]+)")


def slugify(text: str, allow_unicode: bool = False) -> str:
    """Lower-case and hyphenate ``text`` for use in URLs.

    ASCII-folds by default; with ``allow_unicode`` non-Latin word
    characters are kept.
    """
    if allow_unicode:
        cleaned = re.sub(r"[^\w\s-]", "", unicodedata.normalize("NFKC", text or ""))
    else:
        normalized = unicodedata.normalize("NFKD", text or "")
        ascii_text = normalized.encode("ascii", "ignore").decode("ascii")
        cleaned = re.sub(r"[^a-zA-Z0-9\s-]", "", ascii_text)
    cleaned = re.sub(r"[\s-]+", "-", cleaned.strip())
    return cleaned.lower().strip("-")


def category_slug(name: str) -> str:
    """URL segment for a category; distinct names never share an empty slug.

    Names without any word characters fall back to their code points.
    """
    slug = slugify(name, allow_unicode=True)
    if slug:
        return slug
    stripped = (name or "").strip()
    if not stripped:
        return "uncategorized"
    return "-".join(f"{ord(char):x}" for char in stripped)


def normalize_url(url: str) -> str:
    url = "/" + url.lstrip("/")
    return re.sub(r"/{2,}", "/", url)


def resolve_template(template: str) -> str:
    return PERMALINK_PRESETS.get(template, template)


def post_permalink(
    template: str,
    *,
    slug: str,
    post_date: date,
    categories: tuple[str, ...] = (),
) -> str:
    """Expand a post permalink template into a URL.

    Unknown placeholders are left untouched.

    Example:
        >>> post_permalink("/:title/:year-:month-:day", slug="hello",
        ...                post_date=date(2024, 9, 9))
        '/hello/2024-09-09'
    """
    values = {
        "title": slug,
        "slug": slug,
        "year": f"{post_date.year:04d}",
        "short_year": f"{post_date.year % 100:02d}",
        "month": f"{post_date.month:02d}",
        "i_month": str(post_date.month),
        "day": f"{post_date.day:02d}",
        "i_day": str(post_date.day),
        "y_day": f"{post_date.timetuple().tm_yday:03d}",
        "categories": "/".join(category_slug(c) for c in categories),
        "output_ext": ".html",
    }

    def substitute(match: re.Match) -> str:
        return values.get(match.group(1), match.group(0))

    return normalize_url(_PLACEHOLDER.sub(substitute, resolve_template(template)))


def page_number_url(template: str, number: int) -> str:
    """URL of pagination page ``number``; page 1 is always the site root."""
    if number <= 1:
        return "/"
    return normalize_url(template.replace(":num", str(number)))


def output_path_for_url(url: str) -> str:
    """Map a site URL to the relative file path it is written to.

    A trailing slash maps to ``index.html``; an extensionless URL gets
    ``.html`` appended so it can be served without the extension.
    """
    path = url.lstrip("/")
    if not path or path.endswith("/"):
        return f"{path}index.html"
    if PurePosixPath(path).suffix:
        return path
    return f"{path}.html"


def relative_url(baseurl: str, path: str) -> str:
    """Prefix ``path`` with the site's ``baseurl``; full URLs pass through."""
    path = str(path or "")
    if path.startswith(("http://", "https://")):
        return path
    return f"{(baseurl or '').rstrip('/')}/{path.lstrip('/')}"


def absolute_url(site_url: str, baseurl: str, path: str) -> str:
    path = str(path or "")
    if path.startswith(("http://", "https://")):
        return path
    return f"{(site_url or '').rstrip('/')}{relative_url(baseurl, path)}"
