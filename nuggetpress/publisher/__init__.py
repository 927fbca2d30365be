# Publisher — plugin hooks, build pipeline and atomic output writing
"""
Publisher module for turning loaded site content into an output tree.

Handles the built-in plugin hooks (feed generation, SEO metadata,
pagination), the end-to-end build pipeline, and all-or-nothing
publication of the generated files.
"""

from .feed import generate_feed
from .models import BuildResult, PluginName, RenderedOutput, SEOMetaTags
from .pipeline import SiteBuilder, build_site, syntax_stylesheet
from .plugins import PluginSet, resolve_plugins
from .seo import inject_metadata
from .writer import write_site

__all__ = [
    "BuildResult",
    "PluginName",
    "PluginSet",
    "RenderedOutput",
    "SEOMetaTags",
    "SiteBuilder",
    "build_site",
    "generate_feed",
    "inject_metadata",
    "resolve_plugins",
    "syntax_stylesheet",
    "write_site",
]
