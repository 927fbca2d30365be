"""
Template Renderer for site documents.
Handles Jinja2 layout loading and rendering of posts, pages, index
pages, category archives and the feed.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup
from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
    select_autoescape,
)
from markupsafe import Markup, escape

from nuggetpress.common.config import SiteConfig
from nuggetpress.common.errors import TemplateRenderError
from nuggetpress.common.logging import setup_logging
from nuggetpress.content_loader.models import Post, SitePage
from nuggetpress.content_loader.permalinks import absolute_url, relative_url
from nuggetpress.paginator.models import CategoryArchive, Page
from nuggetpress.paginator.paginator import category_url

from .markdown_converter import MarkdownConverter

logger = setup_logging(module_name="template_engine.renderer")

BUILTIN_TEMPLATES_DIR = Path(__file__).parent / "templates"
LAYOUTS_DIR = "_layouts"

HOME_LAYOUT = "home"
CATEGORY_LAYOUT = "category"
FEED_TEMPLATE = "feed.xml"


# --- Jekyll-compatible filters ---

def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def date_to_xmlschema(value: date | datetime) -> str:
    return _as_datetime(value).isoformat()


def date_to_string(value: date | datetime) -> str:
    return _as_datetime(value).strftime("%d %b %Y")


def date_to_long_string(value: date | datetime) -> str:
    return _as_datetime(value).strftime("%d %B %Y")


def format_date(value: date | datetime, fmt: str = "%b %-d, %Y") -> str:
    return _as_datetime(value).strftime(fmt)


def strip_html(value: Any) -> str:
    """Text content of an HTML fragment, tags and entities removed."""
    return BeautifulSoup(str(value), "lxml").get_text()


class TemplateRenderer:
    """
    Renders site documents through Jinja2 layouts.

    User layouts in ``<source>/_layouts`` take precedence over the
    built-in theme. Any reference to a missing variable is an error.

    Usage:
        renderer = TemplateRenderer(config, source_dir=site.source_dir)
        html = renderer.render_post(post, site_context, post_context)
    """

    def __init__(
        self,
        config: SiteConfig,
        source_dir: Optional[Path] = None,
        templates_dir: Optional[Path] = None,
        converter: Optional[MarkdownConverter] = None,
    ):
        """
        Initialize the template renderer.

        Args:
            config: Site configuration (read-only)
            source_dir: Site source; its ``_layouts`` directory is searched first
            templates_dir: Built-in theme directory.
                          Defaults to ./templates relative to this file.
        """
        if templates_dir is None:
            templates_dir = BUILTIN_TEMPLATES_DIR

        self.config = config
        self.templates_dir = templates_dir
        self.converter = converter or MarkdownConverter()

        loaders = []
        if source_dir is not None and (source_dir / LAYOUTS_DIR).is_dir():
            loaders.append(FileSystemLoader(str(source_dir / LAYOUTS_DIR)))
        loaders.append(FileSystemLoader(str(templates_dir)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(["html", "xml"], default_for_string=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self.env.filters.update(
            date_to_xmlschema=date_to_xmlschema,
            date_to_string=date_to_string,
            date_to_long_string=date_to_long_string,
            date=format_date,
            absolute_url=self.absolute_url,
            relative_url=self.relative_url,
            xml_escape=escape,
            strip_html=strip_html,
        )

    # --- URL helpers ---

    def relative_url(self, path: str) -> str:
        return relative_url(self.config.baseurl, path)

    def absolute_url(self, path: str) -> str:
        return absolute_url(self.config.url, self.config.baseurl, path)

    # --- Content ---

    def render_content(
        self,
        document: Post | SitePage,
        site_context: dict[str, Any],
    ) -> Markup:
        """Render a document body to HTML (templating first, if enabled)."""
        body = document.body
        if document.render_with_liquid:
            body = self._render_string(
                body,
                {"site": site_context, "page": document.to_template_context()},
                document.source_path,
            )
        if isinstance(document, SitePage) and not document.is_markdown:
            return Markup(body)
        return self.converter.convert(body, source=document.source_path)

    def render_excerpt(self, post: Post) -> Markup:
        if "excerpt" in post.extra:
            return self.converter.convert(str(post.extra["excerpt"]), source=post.source_path)
        separator = str(post.extra.get("excerpt_separator", "\n\n"))
        excerpt = self.converter.excerpt(post.body, separator)
        if not excerpt:
            return Markup("")
        return self.converter.convert(excerpt, source=post.source_path, check=False)

    def post_context(
        self,
        post: Post,
        content: Markup,
        excerpt: Markup,
    ) -> dict[str, Any]:
        context = post.to_template_context()
        context.update(
            content=content,
            excerpt=excerpt,
            category_links=[
                {"name": name, "url": category_url(name)} for name in post.categories
            ],
        )
        return context

    # --- Documents ---

    def render_post(
        self,
        post: Post,
        site_context: dict[str, Any],
        post_context: dict[str, Any],
        previous_post: Optional[dict[str, Any]] = None,
        next_post: Optional[dict[str, Any]] = None,
        seo_tags: Markup = Markup(""),
    ) -> str:
        """
        Render a post through its layout.

        Args:
            post: Post being rendered
            site_context: ``site`` mapping
            post_context: Post mapping including ``content`` and ``excerpt``
            previous_post: Older neighbouring post, if any
            next_post: Newer neighbouring post, if any
            seo_tags: Metadata tags for the document head

        Returns:
            Final HTML
        """
        page = dict(post_context, previous=previous_post, next=next_post)
        return self._render_layout(
            post.layout,
            {
                "site": site_context,
                "page": page,
                "post": page,
                "content": post_context["content"],
                "seo_tags": seo_tags,
            },
            post.source_path,
        )

    def render_page(
        self,
        page: SitePage,
        site_context: dict[str, Any],
        content: Markup,
        seo_tags: Markup = Markup(""),
    ) -> str:
        page_context = dict(page.to_template_context(), content=content)
        return self._render_layout(
            page.layout,
            {
                "site": site_context,
                "page": page_context,
                "content": content,
                "seo_tags": seo_tags,
            },
            page.source_path,
        )

    def render_index(
        self,
        index: Page,
        site_context: dict[str, Any],
        post_contexts: list[dict[str, Any]],
        content: Markup = Markup(""),
        seo_tags: Markup = Markup(""),
        source: Optional[Path] = None,
    ) -> str:
        """Render one paginated index page with the ``home`` layout."""
        return self._render_layout(
            HOME_LAYOUT,
            {
                "site": site_context,
                "page": {"title": index.title, "url": index.url, "content": content},
                "paginator": index.to_template_context(post_contexts),
                "content": content,
                "seo_tags": seo_tags,
            },
            source,
        )

    def render_category(
        self,
        archive: CategoryArchive,
        site_context: dict[str, Any],
        post_contexts: list[dict[str, Any]],
        seo_tags: Markup = Markup(""),
    ) -> str:
        return self._render_layout(
            CATEGORY_LAYOUT,
            {
                "site": site_context,
                "page": {"title": archive.name, "url": archive.url},
                "category": archive.to_template_context(post_contexts),
                "seo_tags": seo_tags,
            },
            None,
        )

    def render_template(
        self,
        name: str,
        context: dict[str, Any],
        source: Optional[Path] = None,
    ) -> str:
        """Render a named template (e.g. ``feed.xml``) with a raw context."""
        return self._render(name, context, source)

    # --- Internal ---

    def _render_layout(
        self,
        layout: Optional[str],
        context: dict[str, Any],
        source: Optional[Path],
    ) -> str:
        if layout is None:
            return str(context.get("content", ""))
        return self._render(f"{layout}.html", context, source)

    def _render(self, name: str, context: dict[str, Any], source: Optional[Path]) -> str:
        try:
            template = self.env.get_template(name)
            return template.render(**context)
        except TemplateNotFound as exc:
            raise TemplateRenderError(f"layout {exc.name!r} not found", source) from exc
        except UndefinedError as exc:
            raise TemplateRenderError(
                f"undefined variable in layout {name!r}: {exc.message}", source
            ) from exc
        except TemplateSyntaxError as exc:
            raise TemplateRenderError(
                f"syntax error in {exc.name or name!r} line {exc.lineno}: {exc.message}",
                source,
            ) from exc
        except TemplateError as exc:
            raise TemplateRenderError(f"cannot render {name!r}: {exc}", source) from exc

    def _render_string(self, text: str, context: dict[str, Any], source: Optional[Path]) -> str:
        try:
            return self.env.from_string(text).render(**context)
        except UndefinedError as exc:
            raise TemplateRenderError(f"undefined variable in content: {exc.message}", source) from exc
        except TemplateSyntaxError as exc:
            raise TemplateRenderError(
                f"syntax error in content line {exc.lineno}: {exc.message}", source
            ) from exc
        except TemplateError as exc:
            raise TemplateRenderError(f"cannot render content: {exc}", source) from exc


def build_site_context(
    config: SiteConfig,
    post_contexts: list[dict[str, Any]],
    page_contexts: list[dict[str, Any]],
    categories: dict[str, list[dict[str, Any]]],
    enabled_plugins: Iterable[str] = (),
) -> dict[str, Any]:
    """Assemble the ``site`` mapping shared by every layout.

    ``site.time`` is the newest post date rather than the wall clock so
    that rebuilding identical sources gives identical output.
    ``site.enabled_plugins`` lists the canonical hook names (``feed``,
    ``paginate``, ``seo``) whatever spelling ``plugins:`` used.
    """
    context = config.to_template_context()
    context.update(
        posts=post_contexts,
        pages=page_contexts,
        categories=categories,
        enabled_plugins=sorted(enabled_plugins),
        time=post_contexts[0]["date"] if post_contexts else None,
    )
    return context
