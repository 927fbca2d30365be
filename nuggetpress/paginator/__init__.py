# Paginator Module
# Date-ordered index pages, category archives and feed selection

from .models import CategoryArchive, Page
from .paginator import (
    category_url,
    group_by_category,
    page_title,
    paginate,
    select_feed_posts,
    sort_posts,
)

__all__ = [
    "CategoryArchive",
    "Page",
    "category_url",
    "group_by_category",
    "page_title",
    "paginate",
    "select_feed_posts",
    "sort_posts",
]
