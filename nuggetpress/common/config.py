"""Site configuration.

Loads settings from the site's ``_config.yml`` plus environment
overrides (``.env`` in the source directory, then the process
environment). The resulting :class:`SiteConfig` is frozen and is passed
explicitly to every build stage.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from .errors import ConfigError

CONFIG_FILENAME = "_config.yml"
DEFAULT_DESTINATION = "_site"

# Environment variables that override configuration values
ENV_URL = "SITE_URL"
ENV_ENVIRONMENT = "SITE_ENV"


class _ConfigBlock(BaseModel):
    """Frozen settings block; a key left empty in YAML (``key:``) keeps its default."""
    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _empty_keys_use_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        declared = set(cls.model_fields)
        for field in cls.model_fields.values():
            if isinstance(field.validation_alias, AliasChoices):
                declared.update(c for c in field.validation_alias.choices if isinstance(c, str))
        return {k: v for k, v in data.items() if not (v is None and k in declared)}


class PaginationSettings(_ConfigBlock):
    """Index pagination settings (the ``pagination:`` block)."""

    enabled: bool = False
    per_page: int = Field(default=10, ge=1)
    permalink: str = "/page/:num/"
    title: str = " - page :num"
    limit: int = Field(default=0, ge=0)  # max pages, 0 = unlimited
    sort_field: str = "date"
    sort_reverse: bool = True


class FeedSettings(_ConfigBlock):
    """Syndication feed settings (the ``feed:`` block)."""

    path: str = "feed.xml"
    limit: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("limit", "posts_limit"),
    )  # max entries, 0 = all posts


class DefaultScope(_ConfigBlock):
    """One entry of the ``defaults:`` list: front-matter values for a scope."""

    scope: dict[str, str] = Field(default_factory=dict)
    values: dict[str, Any] = Field(default_factory=dict)

    def matches(self, doc_type: str, rel_path: str) -> bool:
        scope_type = self.scope.get("type", "")
        scope_path = self.scope.get("path", "").strip("/")
        if scope_type and scope_type != doc_type:
            return False
        if scope_path and not (rel_path == scope_path or rel_path.startswith(scope_path + "/")):
            return False
        return True


BUILTIN_LAYOUTS = {"posts": "post", "pages": "page"}


class SiteConfig(_ConfigBlock):
    """Top-level site settings.

    Unknown keys are kept so layouts can read them as ``site.<key>``.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    title: str = ""
    email: str = ""
    description: str = ""
    baseurl: str = ""
    url: str = ""
    author: str = ""
    theme: str = "minima"
    plugins: tuple[str, ...] = ()
    permalink: str = "date"
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    exclude: tuple[str, ...] = ()
    include: tuple[str, ...] = ()
    defaults: tuple[DefaultScope, ...] = ()
    destination: str = DEFAULT_DESTINATION
    environment: str = "development"
    highlight_style: str = "default"  # Pygments style for fenced code

    @classmethod
    def from_mapping(cls, data: dict[str, Any], path: Path | None = None) -> SiteConfig:
        """Validate a raw mapping, raising :class:`ConfigError` on failure."""
        try:
            return cls(**data)
        except ValidationError as exc:
            errors = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            )
            raise ConfigError(f"invalid configuration ({errors})", path) from exc

    def front_matter_defaults(self, doc_type: str, rel_path: str) -> dict[str, Any]:
        """Merge the built-in and configured defaults that apply to a document.

        Later ``defaults`` entries override earlier ones.
        """
        merged: dict[str, Any] = {}
        if doc_type in BUILTIN_LAYOUTS:
            merged["layout"] = BUILTIN_LAYOUTS[doc_type]
        for entry in self.defaults:
            if entry.matches(doc_type, rel_path):
                merged.update(entry.values)
        return merged

    def to_template_context(self) -> dict[str, Any]:
        """Convert to the ``site`` mapping exposed to Jinja2 layouts."""
        return self.model_dump()


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read configuration: {exc.strerror or exc}", path) from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}", path) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping", path)
    return data


def _environment_overrides(source_dir: Path) -> dict[str, str]:
    """Collect overrides from ``<source>/.env`` and the process environment."""
    env: dict[str, str] = {}
    dotenv_path = source_dir / ".env"
    if dotenv_path.exists():
        env.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
    for key in (ENV_URL, ENV_ENVIRONMENT):
        if key in os.environ:
            env[key] = os.environ[key]

    overrides: dict[str, str] = {}
    if env.get(ENV_URL):
        overrides["url"] = env[ENV_URL]
    if env.get(ENV_ENVIRONMENT):
        overrides["environment"] = env[ENV_ENVIRONMENT]
    return overrides


def load_config(path: Path) -> SiteConfig:
    """Load ``_config.yml`` at ``path`` and apply environment overrides.

    Args:
        path: Path to the configuration file.

    Returns:
        Frozen site configuration.

    Raises:
        ConfigError: The file is missing, unreadable, not a YAML mapping,
            or fails validation.
    """
    path = Path(path)
    data = _read_yaml(path)
    data.update(_environment_overrides(path.parent))
    return SiteConfig.from_mapping(data, path)
