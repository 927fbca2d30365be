"""Built-in plugin hooks.

The ``plugins:`` list in ``_config.yml`` selects which capabilities run.
Jekyll gem names are accepted as aliases so an existing configuration
works unchanged:

    jekyll-feed         -> generate_feed
    jekyll-seo-tag      -> inject_metadata
    jekyll-paginate-v2  -> paginate
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from markupsafe import Markup

from nuggetpress.common.config import SiteConfig
from nuggetpress.common.logging import setup_logging
from nuggetpress.content_loader.models import Post
from nuggetpress.paginator import Page, paginate as paginate_posts
from nuggetpress.template_engine.renderer import TemplateRenderer

from .feed import generate_feed as render_feed
from .models import PluginName, RenderedOutput
from .seo import inject_metadata as build_metadata

logger = setup_logging(module_name="publisher.plugins")

PLUGIN_ALIASES: dict[str, PluginName] = {
    "jekyll-feed": PluginName.FEED,
    "feed": PluginName.FEED,
    "jekyll-seo-tag": PluginName.SEO,
    "seo": PluginName.SEO,
    "jekyll-paginate-v2": PluginName.PAGINATE,
    "jekyll-paginate": PluginName.PAGINATE,
    "paginate": PluginName.PAGINATE,
}


def resolve_plugins(names: Iterable[str]) -> frozenset[PluginName]:
    """Map configured plugin names to built-in hooks; unknown names are skipped."""
    enabled = set()
    for name in names:
        plugin = PLUGIN_ALIASES.get(name.strip().lower())
        if plugin is None:
            logger.warning("Unknown plugin %r ignored", name)
            continue
        enabled.add(plugin)
    return frozenset(enabled)


@dataclass(frozen=True)
class PluginSet:
    """The hooks enabled for one build."""
    enabled: frozenset[PluginName]

    @classmethod
    def from_config(cls, config: SiteConfig) -> PluginSet:
        return cls(enabled=resolve_plugins(config.plugins))

    def __contains__(self, plugin: PluginName) -> bool:
        return plugin in self.enabled

    @property
    def names(self) -> list[str]:
        """Canonical names of the enabled hooks, sorted; exposed as ``site.enabled_plugins``."""
        return sorted(plugin.value for plugin in self.enabled)

    def paginate(self, posts: Iterable[Post], config: SiteConfig) -> list[Page]:
        """Index pages; without the paginate plugin all posts share one page."""
        settings = config.pagination
        if PluginName.PAGINATE not in self.enabled and settings.enabled:
            logger.info("Pagination configured but no pagination plugin enabled")
            settings = settings.model_copy(update={"enabled": False})
        return paginate_posts(posts, settings, config.title)

    def inject_metadata(
        self,
        config: SiteConfig,
        *,
        title: str,
        url: str,
        description: str = "",
        excerpt_html: str = "",
        published: Optional[date] = None,
        image: str = "",
    ) -> Markup:
        if PluginName.SEO not in self.enabled:
            return Markup("")
        tags = build_metadata(
            config,
            title=title,
            url=url,
            description=description,
            excerpt_html=excerpt_html,
            published=published,
            image=image,
        )
        return tags.to_html_tags()

    def generate_feed(
        self,
        config: SiteConfig,
        renderer: TemplateRenderer,
        posts: list[Post],
        post_contexts: dict[str, dict[str, Any]],
        site_context: dict[str, Any],
    ) -> Optional[RenderedOutput]:
        if PluginName.FEED not in self.enabled:
            return None
        return render_feed(config, renderer, posts, post_contexts, site_context)
