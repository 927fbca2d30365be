"""Full build pipeline — site source to published output tree.

Orchestrates the complete flow:
Load → Render posts/pages → Paginate → Archive → Feed → Write

Usage:
    builder = SiteBuilder(Path("my-blog"))
    result = builder.build()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from markupsafe import Markup
from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from nuggetpress.common.config import SiteConfig
from nuggetpress.common.errors import ConfigError, DuplicateSlugError
from nuggetpress.common.logging import setup_logging
from nuggetpress.content_loader import load_site
from nuggetpress.content_loader.models import Post, Site, SitePage
from nuggetpress.content_loader.permalinks import output_path_for_url
from nuggetpress.paginator import group_by_category, select_feed_posts, sort_posts
from nuggetpress.template_engine import TemplateRenderer, build_site_context

from .models import BuildResult, RenderedOutput
from .plugins import PluginSet
from .writer import write_site

logger = setup_logging(module_name="publisher.pipeline")

SYNTAX_CSS_PATH = "assets/css/syntax.css"


class OutputCollector:
    """Ordered rendered outputs with output-path collision detection."""

    def __init__(self, static_files: tuple[str, ...] = ()):
        self.outputs: list[RenderedOutput] = []
        self._claimed: dict[str, str] = {path: path for path in static_files}

    def add(self, output: RenderedOutput) -> None:
        owner = str(output.source) if output.source else output.path
        if output.path in self._claimed:
            raise DuplicateSlugError(
                f"output path {output.path!r} already produced by {self._claimed[output.path]}",
                output.source,
            )
        self._claimed[output.path] = owner
        self.outputs.append(output)

    def has(self, path: str) -> bool:
        return path in self._claimed

    @property
    def paths(self) -> list[str]:
        return [output.path for output in self.outputs]


class SiteBuilder:
    """End-to-end build from a site source directory.

    Steps:
    1. Load configuration, posts, pages and static files (content_loader)
    2. Render post and page bodies to HTML (template_engine)
    3. Render posts and pages through their layouts, with SEO tags
    4. Paginate the index and build category archives (paginator)
    5. Generate the feed
    6. Write everything atomically (writer)
    """

    def __init__(
        self,
        source_dir: Path,
        destination: Optional[Path] = None,
        templates_dir: Optional[Path] = None,
    ):
        self.source_dir = Path(source_dir).resolve()
        self.destination = Path(destination).resolve() if destination else None
        self.templates_dir = templates_dir

    def load(self) -> Site:
        site = load_site(self.source_dir, destination=self.destination)
        if self.destination is None:
            self.destination = (self.source_dir / site.config.destination).resolve()
        if self.source_dir.is_relative_to(self.destination):
            raise ConfigError(
                f"destination {self.destination} would overwrite the site source"
            )
        return site

    def build(self) -> BuildResult:
        """Run the full pipeline and publish the output tree.

        Returns:
            BuildResult summary

        Raises:
            BuildError: Any fatal load or render error; nothing is written.
        """
        site = self.load()
        result = BuildResult(destination=self.destination)
        outputs = self.render(site, result)

        write_site(
            outputs,
            self.destination,
            source_dir=site.source_dir,
            static_files=site.static_files,
        )
        result.static_count = len(site.static_files)
        logger.info(
            "Build complete: %d posts, %d index pages, %d categories, %d files -> %s",
            result.post_count, result.index_page_count, result.category_count,
            result.file_count, self.destination,
        )
        return result

    def render(self, site: Site, result: Optional[BuildResult] = None) -> list[RenderedOutput]:
        """Render every document of ``site`` into memory.

        Pure with respect to the filesystem: nothing is written.
        """
        config = site.config
        result = result or BuildResult(destination=self.destination or site.source_dir)
        renderer = TemplateRenderer(
            config, source_dir=site.source_dir, templates_dir=self.templates_dir
        )
        plugins = PluginSet.from_config(config)
        collector = OutputCollector(site.static_files)

        ordered = sort_posts(site.posts, "date", True)
        home = next((page for page in site.pages if page.is_home), None)
        archives = group_by_category(site.posts)

        # Bodies first: they may reference site metadata, but not rendered content
        meta_site = build_site_context(
            config,
            [post.to_template_context() for post in ordered],
            [page.to_template_context() for page in site.pages],
            {a.name: [p.to_template_context() for p in a.posts] for a in archives},
            plugins.names,
        )
        post_contexts: dict[str, dict[str, Any]] = {}
        for post in ordered:
            content = renderer.render_content(post, meta_site)
            excerpt = renderer.render_excerpt(post)
            post_contexts[post.slug] = renderer.post_context(post, content, excerpt)

        page_contents: dict[str, Markup] = {
            page.rel_path: renderer.render_content(page, meta_site) for page in site.pages
        }

        site_context = build_site_context(
            config,
            [post_contexts[post.slug] for post in ordered],
            [
                dict(page.to_template_context(), content=page_contents[page.rel_path])
                for page in site.pages
            ],
            {a.name: [post_contexts[p.slug] for p in a.posts] for a in archives},
            plugins.names,
        )

        self._render_posts(ordered, post_contexts, site_context, config, renderer, plugins, collector)
        self._render_pages(site, home, page_contents, site_context, config, renderer, plugins, collector)

        index_pages = plugins.paginate(site.posts, config)
        home_content = page_contents[home.rel_path] if home else Markup("")
        for index in index_pages:
            html = renderer.render_index(
                index,
                site_context,
                [post_contexts[post.slug] for post in index.posts],
                content=home_content if index.number == 1 else Markup(""),
                seo_tags=plugins.inject_metadata(
                    config,
                    title=index.title if index.number > 1 else "",
                    url=index.url,
                    description=str(home.extra.get("description", "")) if home else "",
                ),
                source=home.source_path if home else None,
            )
            collector.add(RenderedOutput.from_text(output_path_for_url(index.url), html))

        for archive in archives:
            html = renderer.render_category(
                archive,
                site_context,
                [post_contexts[post.slug] for post in archive.posts],
                seo_tags=plugins.inject_metadata(config, title=archive.name, url=archive.url),
            )
            collector.add(RenderedOutput.from_text(output_path_for_url(archive.url), html))

        feed = plugins.generate_feed(config, renderer, list(site.posts), post_contexts, site_context)
        if feed is not None:
            collector.add(feed)
            result.feed_entries = len(select_feed_posts(site.posts, config.feed.limit))

        if not collector.has(SYNTAX_CSS_PATH):
            collector.add(RenderedOutput.from_text(SYNTAX_CSS_PATH, syntax_stylesheet(config)))

        result.post_count = len(ordered)
        result.page_count = len(site.pages)
        result.index_page_count = len(index_pages)
        result.category_count = len(archives)
        result.outputs = collector.paths
        return collector.outputs

    # --- Internal ---

    def _render_posts(
        self,
        ordered: list[Post],
        post_contexts: dict[str, dict[str, Any]],
        site_context: dict[str, Any],
        config: SiteConfig,
        renderer: TemplateRenderer,
        plugins: PluginSet,
        collector: OutputCollector,
    ) -> None:
        for i, post in enumerate(ordered):
            context = post_contexts[post.slug]
            older = ordered[i + 1] if i + 1 < len(ordered) else None
            newer = ordered[i - 1] if i > 0 else None
            html = renderer.render_post(
                post,
                site_context,
                context,
                previous_post=_neighbour(older),
                next_post=_neighbour(newer),
                seo_tags=plugins.inject_metadata(
                    config,
                    title=post.title,
                    url=post.url,
                    description=str(post.extra.get("description", "")),
                    excerpt_html=context["excerpt"],
                    published=post.date,
                    image=str(post.extra.get("image", "")),
                ),
            )
            collector.add(
                RenderedOutput.from_text(output_path_for_url(post.url), html, post.source_path)
            )

    def _render_pages(
        self,
        site: Site,
        home: Optional[SitePage],
        page_contents: dict[str, Markup],
        site_context: dict[str, Any],
        config: SiteConfig,
        renderer: TemplateRenderer,
        plugins: PluginSet,
        collector: OutputCollector,
    ) -> None:
        has_index = bool(site.posts)
        for page in site.pages:
            if page is home and has_index:
                continue  # merged into the first index page
            render_as = page
            if page is home and page.layout == "home":
                render_as = page.model_copy(update={"layout": "page"})
            html = renderer.render_page(
                render_as,
                site_context,
                page_contents[page.rel_path],
                seo_tags=plugins.inject_metadata(
                    config,
                    title=page.title,
                    url=page.url,
                    description=str(page.extra.get("description", "")),
                    excerpt_html=page_contents[page.rel_path],
                ),
            )
            collector.add(
                RenderedOutput.from_text(output_path_for_url(page.url), html, page.source_path)
            )


def _neighbour(post: Optional[Post]) -> Optional[dict[str, Any]]:
    if post is None:
        return None
    return {"title": post.title, "url": post.url, "date": post.date}


def syntax_stylesheet(config: SiteConfig) -> str:
    """Pygments CSS for ``.highlight`` code blocks in the configured style."""
    try:
        formatter = HtmlFormatter(style=config.highlight_style)
    except ClassNotFound as exc:
        raise ConfigError(f"unknown highlight_style {config.highlight_style!r}") from exc
    return formatter.get_style_defs(".highlight") + "\n"


def build_site(source_dir: Path, destination: Optional[Path] = None) -> BuildResult:
    """Convenience function to build a site."""
    return SiteBuilder(source_dir, destination).build()
