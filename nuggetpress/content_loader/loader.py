"""Content loader — reads configuration, posts, pages and static files.

A site source follows the Jekyll layout:

    _config.yml
    _posts/YYYY-MM-DD-slug.md
    _layouts/*.html          (optional, overrides the built-in theme)
    about.md                 (standalone page with front matter)
    assets/...               (copied verbatim)

Usage:
    site = load_site(Path("my-blog"))
    for post in site.posts:
        print(post.date, post.title)
"""

from __future__ import annotations

import fnmatch
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

import yaml

from nuggetpress.common.config import CONFIG_FILENAME, SiteConfig, load_config
from nuggetpress.common.errors import DuplicateSlugError, FrontMatterError
from nuggetpress.common.logging import setup_logging

from .models import Post, Site, SitePage
from .permalinks import normalize_url, post_permalink

logger = setup_logging(module_name="content_loader.loader")

POSTS_DIR = "_posts"
POST_EXTENSIONS = {".md", ".markdown", ".html"}
PAGE_EXTENSIONS = {".md", ".markdown", ".html"}
MARKDOWN_EXTENSIONS = {".md", ".markdown"}

# Never copied to the output, in addition to the configured ``exclude`` list
DEFAULT_EXCLUDES = (
    "Gemfile",
    "Gemfile.lock",
    "node_modules",
    "vendor",
    "pyproject.toml",
)

FILENAME_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

# Keys consumed by the loader; everything else ends up in ``extra``
_RESERVED_KEYS = {
    "title", "date", "layout", "categories", "category", "permalink",
    "slug", "render_with_liquid",
}


# === Front matter ===

def parse_front_matter(text: str, path: Path | str) -> tuple[dict[str, Any], str]:
    """Split a content file into its front-matter mapping and body.

    Args:
        text: Full file contents.
        path: File path, used in error messages.

    Returns:
        Tuple of (metadata, body).

    Raises:
        FrontMatterError: No opening or closing delimiter, invalid YAML,
            or a block that is not a mapping.
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != "---":
        raise FrontMatterError("missing front matter (file must start with '---')", path)

    for end, line in enumerate(lines[1:], start=1):
        if line.rstrip() in ("---", "..."):
            break
    else:
        raise FrontMatterError("unterminated front matter (no closing '---')", path)

    block = "".join(lines[1:end])
    body = "".join(lines[end + 1:])

    try:
        metadata = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid YAML in front matter: {exc}", path) from exc

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontMatterError(
            f"front matter must be a mapping, got {type(metadata).__name__}", path
        )
    return {str(k): v for k, v in metadata.items()}, body


def has_front_matter(path: Path) -> bool:
    try:
        with open(path, encoding="utf-8") as f:
            first = f.readline()
    except (OSError, UnicodeDecodeError):
        return False
    return first.lstrip("\ufeff").rstrip() == "---"


def coerce_date(value: Any, path: Path | str) -> date:
    """Interpret a front-matter date (YAML date, datetime or string)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise FrontMatterError(f"invalid date {value!r}", path)


def parse_filename(path: Path) -> tuple[date | None, str]:
    """Extract (date, slug) from a ``YYYY-MM-DD-slug.ext`` filename.

    Filenames without the date prefix yield ``(None, stem)``.
    """
    stem = path.stem
    match = FILENAME_PATTERN.match(stem)
    if not match:
        return None, stem
    year, month, day, slug = match.groups()
    try:
        return date(int(year), int(month), int(day)), slug
    except ValueError as exc:
        raise FrontMatterError(f"invalid date in filename: {exc}", path) from exc


def normalize_categories(metadata: dict[str, Any]) -> tuple[str, ...]:
    """Merge ``category`` and ``categories`` into an ordered, unique tuple.

    Strings are split on whitespace, as Jekyll does.
    """
    raw: list[str] = []
    for key in ("category", "categories"):
        value = metadata.get(key)
        if value is None:
            continue
        if isinstance(value, str):
            raw.extend(value.split())
        elif isinstance(value, (list, tuple)):
            raw.extend(str(v).strip() for v in value if v is not None)
        else:
            raw.append(str(value))

    seen: dict[str, None] = {}
    for category in raw:
        if category:
            seen.setdefault(category, None)
    return tuple(seen)


def _title_from_slug(slug: str) -> str:
    return " ".join(word.capitalize() for word in re.split(r"[-_]+", slug) if word)


def _layout(metadata: dict[str, Any], defaults: dict[str, Any]) -> str | None:
    layout = metadata["layout"] if "layout" in metadata else defaults.get("layout")
    if layout in (None, "none", "null", False):
        return None
    return str(layout)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise FrontMatterError(f"file is not valid UTF-8: {exc}", path) from exc
    except OSError as exc:
        raise FrontMatterError(f"cannot read file: {exc.strerror or exc}", path) from exc


# === Posts ===

def load_post(path: Path, config: SiteConfig, rel_path: str | None = None) -> Post:
    """Parse one post file.

    The front-matter ``date`` is authoritative; the filename date is
    used only when the front matter has none.
    """
    rel_path = rel_path or path.name
    metadata, body = parse_front_matter(_read_text(path), path)
    defaults = config.front_matter_defaults("posts", rel_path)
    merged = {**defaults, **metadata}

    filename_date, slug = parse_filename(path)
    slug = str(merged.get("slug") or slug)

    if "date" in metadata and metadata["date"] is not None:
        post_date = coerce_date(metadata["date"], path)
        if filename_date and filename_date != post_date:
            logger.warning(
                "%s: front matter date %s overrides filename date %s",
                rel_path, post_date.isoformat(), filename_date.isoformat(),
            )
    elif filename_date is not None:
        post_date = filename_date
    elif merged.get("date") is not None:
        post_date = coerce_date(merged["date"], path)
    else:
        raise FrontMatterError(
            "no date in front matter or filename (expected YYYY-MM-DD-slug)", path
        )

    title = merged.get("title")
    if title is None or str(title).strip() == "":
        title = _title_from_slug(slug)
        logger.debug("%s: no title, using %r", rel_path, title)

    categories = normalize_categories(merged)
    if merged.get("permalink"):
        url = normalize_url(str(merged["permalink"]))
    else:
        url = post_permalink(
            config.permalink, slug=slug, post_date=post_date, categories=categories
        )

    return Post(
        title=str(title),
        date=post_date,
        slug=slug,
        url=url,
        body=body,
        layout=_layout(metadata, defaults),
        categories=categories,
        source_path=path,
        rel_path=rel_path,
        render_with_liquid=bool(merged.get("render_with_liquid", False)),
        extra={k: v for k, v in merged.items() if k not in _RESERVED_KEYS},
    )


def load_posts(source_dir: Path, config: SiteConfig) -> list[Post]:
    """Load every post under ``<source>/_posts`` in path order.

    Raises:
        FrontMatterError: A post file is malformed.
        DuplicateSlugError: Two posts share a slug.
    """
    posts_dir = source_dir / POSTS_DIR
    if not posts_dir.is_dir():
        logger.info("No %s directory in %s", POSTS_DIR, source_dir)
        return []

    paths = sorted(
        p for p in posts_dir.rglob("*")
        if p.is_file()
        and p.suffix.lower() in POST_EXTENSIONS
        and not any(part.startswith(".") for part in p.relative_to(posts_dir).parts)
    )

    posts: list[Post] = []
    seen_slugs: dict[str, Path] = {}
    for path in paths:
        post = load_post(path, config, rel_path=path.relative_to(source_dir).as_posix())
        if post.slug in seen_slugs:
            raise DuplicateSlugError(
                f"slug {post.slug!r} already used by {seen_slugs[post.slug]}", path
            )
        seen_slugs[post.slug] = path
        posts.append(post)

    logger.info("Loaded %d posts from %s", len(posts), posts_dir)
    return posts


# === Pages and static files ===

def _matches(rel_path: str, pattern: str) -> bool:
    """True when ``pattern`` names the file itself or any directory above it."""
    pattern = pattern.rstrip("/")
    if not pattern:
        return False
    if fnmatch.fnmatch(rel_path, pattern) or rel_path.startswith(pattern + "/"):
        return True
    parts = rel_path.split("/")
    return any(
        fnmatch.fnmatch("/".join(parts[:depth]), pattern) for depth in range(1, len(parts))
    )


def _is_excluded(rel_path: str, config: SiteConfig) -> bool:
    if any(_matches(rel_path, pattern) for pattern in config.include):
        return False

    parts = rel_path.split("/")
    if any(part.startswith(("_", ".")) for part in parts):
        return True
    if rel_path == CONFIG_FILENAME:
        return True
    return any(
        _matches(rel_path, pattern)
        for pattern in (*DEFAULT_EXCLUDES, *config.exclude, config.destination)
    )


def _walk_source(source_dir: Path, config: SiteConfig) -> Iterator[tuple[Path, str]]:
    for path in sorted(source_dir.rglob("*")):
        if not path.is_file():
            continue
        rel_path = path.relative_to(source_dir).as_posix()
        if not _is_excluded(rel_path, config):
            yield path, rel_path


def _page_url(rel_path: str, config: SiteConfig) -> str:
    path = Path(rel_path)
    parent = "" if str(path.parent) == "." else path.parent.as_posix()
    if path.stem == "index":
        return normalize_url(f"/{parent}/")
    if config.permalink == "pretty" or config.permalink.endswith("/"):
        return normalize_url(f"/{parent}/{path.stem}/")
    return normalize_url(f"/{parent}/{path.stem}.html")


def load_page(path: Path, config: SiteConfig, rel_path: str) -> SitePage:
    metadata, body = parse_front_matter(_read_text(path), path)
    defaults = config.front_matter_defaults("pages", rel_path)
    merged = {**defaults, **metadata}
    is_markdown = path.suffix.lower() in MARKDOWN_EXTENSIONS

    if merged.get("permalink"):
        url = normalize_url(str(merged["permalink"]))
    else:
        url = _page_url(rel_path, config)

    title = merged.get("title")
    if title is None:
        title = "" if Path(rel_path).stem == "index" else _title_from_slug(Path(rel_path).stem)

    return SitePage(
        title=str(title),
        url=url,
        body=body,
        layout=_layout(metadata, defaults),
        source_path=path,
        rel_path=rel_path,
        is_markdown=is_markdown,
        render_with_liquid=bool(merged.get("render_with_liquid", not is_markdown)),
        extra={k: v for k, v in merged.items() if k not in _RESERVED_KEYS},
    )


def load_pages_and_static(
    source_dir: Path, config: SiteConfig
) -> tuple[list[SitePage], list[str]]:
    """Split the non-underscore source tree into pages and static files.

    A Markdown or HTML file starting with ``---`` is a page; everything
    else is copied as-is.
    """
    pages: list[SitePage] = []
    static: list[str] = []
    for path, rel_path in _walk_source(source_dir, config):
        if path.suffix.lower() in PAGE_EXTENSIONS and has_front_matter(path):
            pages.append(load_page(path, config, rel_path))
        else:
            static.append(rel_path)
    return pages, static


def load_pages(source_dir: Path, config: SiteConfig) -> list[SitePage]:
    return load_pages_and_static(source_dir, config)[0]


def collect_static_files(source_dir: Path, config: SiteConfig) -> list[str]:
    return load_pages_and_static(source_dir, config)[1]


def load_site(source_dir: Path, destination: Path | None = None) -> Site:
    """Load configuration and all content for one build.

    Args:
        source_dir: Site source directory containing ``_config.yml``.
        destination: Output directory, when it differs from the configured
            one; kept out of the static files if it lies inside the source.

    Returns:
        Site bundle with config, posts, pages and static file list.
    """
    source_dir = Path(source_dir).resolve()
    config = load_config(source_dir / CONFIG_FILENAME)
    if destination is not None:
        destination = Path(destination).resolve()
        if destination.is_relative_to(source_dir):
            rel = destination.relative_to(source_dir).as_posix()
            config = config.model_copy(update={"destination": rel})
    posts = load_posts(source_dir, config)
    pages, static = load_pages_and_static(source_dir, config)
    logger.info(
        "Loaded site %r: %d posts, %d pages, %d static files",
        config.title, len(posts), len(pages), len(static),
    )
    return Site(
        source_dir=source_dir,
        config=config,
        posts=tuple(posts),
        pages=tuple(pages),
        static_files=tuple(static),
    )
