"""nugget-press: build a paginated static blog from Jekyll-style sources."""

__version__ = "0.1.0"
