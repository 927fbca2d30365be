"""SEO metadata — the ``inject_metadata`` hook.

Builds title, description, canonical URL, Open Graph, Twitter card and
JSON-LD tags for a generated page, following jekyll-seo-tag conventions:

- title: "<page title> | <site title>", or the site title alone
- description: page ``description``, else the excerpt, else the site's
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from nuggetpress.common.config import SiteConfig
from nuggetpress.content_loader.permalinks import absolute_url
from nuggetpress.template_engine.renderer import strip_html

from .models import SEOMetaTags

DESCRIPTION_LIMIT = 160


def _collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def seo_title(page_title: str, site_title: str) -> str:
    if page_title and site_title and not page_title.startswith(site_title):
        return f"{page_title} | {site_title}"
    return page_title or site_title


def inject_metadata(
    config: SiteConfig,
    *,
    title: str,
    url: str,
    description: str = "",
    excerpt_html: str = "",
    published: Optional[date] = None,
    image: str = "",
) -> SEOMetaTags:
    """Build metadata tags for one page.

    Args:
        config: Site configuration
        title: Page title (empty for the home page)
        url: Site-relative page URL
        description: Explicit description from front matter
        excerpt_html: Rendered excerpt, used when no description is given
        published: Publication date; marks the page as an article
        image: Share image path or URL

    Returns:
        SEOMetaTags ready to render with ``to_html_tags()``
    """
    text = (
        _collapse_whitespace(description)
        or _collapse_whitespace(strip_html(excerpt_html))
        or _collapse_whitespace(config.description)
    )[:DESCRIPTION_LIMIT]
    canonical = absolute_url(config.url, config.baseurl, url)
    full_title = seo_title(title, config.title)

    json_ld: dict = {
        "@context": "https://schema.org",
        "@type": "BlogPosting" if published else "WebSite",
        "url": canonical,
        "headline": title or config.title,
    }
    if text:
        json_ld["description"] = text
    if published:
        json_ld["datePublished"] = published.isoformat()
        json_ld["dateModified"] = published.isoformat()
    if config.author:
        json_ld["author"] = {"@type": "Person", "name": config.author}

    return SEOMetaTags(
        title=full_title,
        description=text,
        canonical_url=canonical,
        site_name=config.title,
        og_type="article" if published else "website",
        og_image=absolute_url(config.url, config.baseurl, image) if image else "",
        published_time=published.isoformat() if published else "",
        twitter_card="summary_large_image" if image else "summary",
        json_ld=json_ld,
    )
