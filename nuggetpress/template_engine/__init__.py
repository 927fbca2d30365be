# Template Engine Module
# Markdown conversion and Jinja2 layouts with Jekyll-style variables

from .markdown_converter import MarkdownConverter
from .renderer import TemplateRenderer, build_site_context

__all__ = [
    "MarkdownConverter",
    "TemplateRenderer",
    "build_site_context",
]
