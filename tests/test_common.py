"""Tests for common modules: config, errors, logging."""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from nuggetpress.common.config import (
    FeedSettings,
    PaginationSettings,
    SiteConfig,
    load_config,
)
from nuggetpress.common.errors import (
    BuildError,
    ConfigError,
    DuplicateSlugError,
    FrontMatterError,
    TemplateRenderError,
)
from nuggetpress.common.logging import set_verbosity, setup_logging

from conftest import SAMPLE_SITE_DIR


class TestLoadConfig:
    """Tests for reading _config.yml."""

    def test_sample_config(self):
        config = load_config(SAMPLE_SITE_DIR / "_config.yml")
        assert config.title == "Monday Nugget"
        assert config.permalink == "/:title/:year-:month-:day"
        assert config.plugins == ("jekyll-seo-tag", "jekyll-feed", "jekyll-paginate-v2")
        assert config.pagination.enabled is True
        assert config.pagination.per_page == 5
        assert config.pagination.limit == 0
        assert config.pagination.sort_reverse is True

    def test_unknown_keys_are_kept(self):
        config = load_config(SAMPLE_SITE_DIR / "_config.yml")
        assert config.model_extra["sass"] == {"style": "compressed"}
        assert config.to_template_context()["sass"] == {"style": "compressed"}

    def test_defaults_for_empty_file(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("", encoding="utf-8")
        config = load_config(path)
        assert config.title == ""
        assert config.permalink == "date"
        assert config.destination == "_site"
        assert config.pagination == PaginationSettings()
        assert config.feed == FeedSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            load_config(tmp_path / "_config.yml")
        assert exc_info.value.path == tmp_path / "_config.yml"
        assert "cannot read configuration" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("title: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("- one\n- two\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(path)

    def test_invalid_per_page(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("pagination:\n  per_page: 0\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="pagination.per_page"):
            load_config(path)

    def test_feed_posts_limit_alias(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("feed:\n  posts_limit: 3\n", encoding="utf-8")
        assert load_config(path).feed.limit == 3

    def test_empty_keys_fall_back_to_defaults(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text(
            "title: T\nplugins:\nexclude:\ninclude:\ndefaults:\npagination:\nfeed:\n  limit:\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.title == "T"
        assert config.plugins == ()
        assert config.exclude == ()
        assert config.include == ()
        assert config.defaults == ()
        assert config.pagination == PaginationSettings()
        assert config.feed == FeedSettings()

    def test_empty_unknown_key_is_kept(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("title: T\ntwitter:\n", encoding="utf-8")
        assert load_config(path).to_template_context()["twitter"] is None

    def test_config_is_frozen(self):
        config = SiteConfig(title="Blog")
        with pytest.raises(ValidationError):
            config.title = "Other"


class TestEnvironmentOverrides:
    """Tests for .env and process environment overrides."""

    def test_process_environment(self, tmp_path, monkeypatch):
        path = tmp_path / "_config.yml"
        path.write_text('url: "https://example.com"\n', encoding="utf-8")
        monkeypatch.setenv("SITE_URL", "https://preview.example.com")
        assert load_config(path).url == "https://preview.example.com"

    def test_dotenv_file(self, tmp_path):
        path = tmp_path / "_config.yml"
        path.write_text("title: Blog\n", encoding="utf-8")
        (tmp_path / ".env").write_text("SITE_ENV=production\n", encoding="utf-8")
        assert load_config(path).environment == "production"

    def test_process_environment_beats_dotenv(self, tmp_path, monkeypatch):
        path = tmp_path / "_config.yml"
        path.write_text("title: Blog\n", encoding="utf-8")
        (tmp_path / ".env").write_text("SITE_ENV=staging\n", encoding="utf-8")
        monkeypatch.setenv("SITE_ENV", "production")
        assert load_config(path).environment == "production"


class TestFrontMatterDefaults:
    """Tests for the defaults: scope list."""

    def test_builtin_layouts(self):
        config = SiteConfig()
        assert config.front_matter_defaults("posts", "_posts/a.md") == {"layout": "post"}
        assert config.front_matter_defaults("pages", "about.md") == {"layout": "page"}

    def test_scoped_values(self):
        config = SiteConfig(
            defaults=[
                {"scope": {"type": "posts"}, "values": {"author": "Ada"}},
                {"scope": {"path": "_posts/news"}, "values": {"layout": "news"}},
            ]
        )
        news = config.front_matter_defaults("posts", "_posts/news/2024-01-01-a.md")
        assert news == {"layout": "news", "author": "Ada"}
        other = config.front_matter_defaults("posts", "_posts/2024-01-01-b.md")
        assert other == {"layout": "post", "author": "Ada"}
        assert "author" not in config.front_matter_defaults("pages", "about.md")


class TestErrors:
    """Tests for the build error hierarchy."""

    def test_message_includes_path(self):
        error = FrontMatterError("bad block", Path("_posts/a.md"))
        assert str(error) == "_posts/a.md: bad block"
        assert error.reason == "bad block"

    def test_message_without_path(self):
        assert str(BuildError("boom")) == "boom"

    @pytest.mark.parametrize(
        "error_class",
        [ConfigError, FrontMatterError, DuplicateSlugError, TemplateRenderError],
    )
    def test_all_errors_are_build_errors(self, error_class):
        assert issubclass(error_class, BuildError)


class TestLogging:
    """Tests for logging setup."""

    def test_names_are_namespaced(self):
        logger = setup_logging(module_name="tests.namespaced")
        assert logger.name == "nuggetpress.tests.namespaced"

    def test_idempotent(self):
        first = setup_logging(module_name="tests.idempotent")
        second = setup_logging(module_name="tests.idempotent")
        assert first is second
        assert len(second.handlers) == 1

    def test_set_verbosity(self):
        logger = setup_logging(module_name="tests.verbosity")
        set_verbosity(logging.DEBUG)
        try:
            assert logger.level == logging.DEBUG
        finally:
            set_verbosity(logging.INFO)
