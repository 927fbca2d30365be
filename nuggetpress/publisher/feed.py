"""Atom feed — the ``generate_feed`` hook."""

from __future__ import annotations

from typing import Any

from nuggetpress.common.config import SiteConfig
from nuggetpress.common.logging import setup_logging
from nuggetpress.content_loader.models import Post
from nuggetpress.content_loader.permalinks import absolute_url
from nuggetpress.paginator import select_feed_posts
from nuggetpress.template_engine.renderer import FEED_TEMPLATE, TemplateRenderer

from .models import RenderedOutput

logger = setup_logging(module_name="publisher.feed")


def generate_feed(
    config: SiteConfig,
    renderer: TemplateRenderer,
    posts: list[Post],
    post_contexts: dict[str, dict[str, Any]],
    site_context: dict[str, Any],
) -> RenderedOutput:
    """Render the Atom feed of the newest posts.

    ``feed.limit`` caps the number of entries; 0 keeps every post.

    Args:
        config: Site configuration
        renderer: Template renderer holding the ``feed.xml`` template
        posts: All loaded posts, in any order
        post_contexts: Rendered post mappings keyed by slug
        site_context: ``site`` mapping

    Returns:
        RenderedOutput at ``feed.path``
    """
    entries = select_feed_posts(posts, config.feed.limit)
    contexts = [post_contexts[post.slug] for post in entries]
    feed_path = config.feed.path.lstrip("/")

    xml = renderer.render_template(
        FEED_TEMPLATE,
        {
            "site": site_context,
            "posts": contexts,
            "feed_url": absolute_url(config.url, config.baseurl, feed_path),
            "updated": entries[0].date if entries else None,
        },
    )
    logger.info("Feed %s: %d entries", feed_path, len(entries))
    return RenderedOutput.from_text(feed_path, xml)
