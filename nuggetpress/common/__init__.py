# Common utilities and shared modules
"""
Shared components used by every build stage:
- Site configuration (Pydantic + YAML)
- Exception hierarchy
- Logging configuration
"""

from .config import SiteConfig, load_config, CONFIG_FILENAME
from .errors import (
    BuildError,
    ConfigError,
    DuplicateSlugError,
    FrontMatterError,
    TemplateRenderError,
)
from .logging import setup_logging

__all__ = [
    "SiteConfig",
    "load_config",
    "CONFIG_FILENAME",
    "BuildError",
    "ConfigError",
    "DuplicateSlugError",
    "FrontMatterError",
    "TemplateRenderError",
    "setup_logging",
]
