# Content Loader Module
# Front-matter posts, standalone pages and static files

from nuggetpress.common.config import load_config

from .loader import (
    coerce_date,
    collect_static_files,
    load_page,
    load_pages,
    load_post,
    load_posts,
    load_site,
    normalize_categories,
    parse_filename,
    parse_front_matter,
)
from .models import Post, Site, SitePage
from .permalinks import (
    category_slug,
    output_path_for_url,
    page_number_url,
    post_permalink,
    slugify,
)

__all__ = [
    "coerce_date",
    "collect_static_files",
    "load_config",
    "load_page",
    "load_pages",
    "load_post",
    "load_posts",
    "load_site",
    "normalize_categories",
    "parse_filename",
    "parse_front_matter",
    "category_slug",
    "output_path_for_url",
    "page_number_url",
    "post_permalink",
    "slugify",
    "Post",
    "Site",
    "SitePage",
]
