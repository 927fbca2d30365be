"""Tests for the end-to-end build pipeline."""

import xml.etree.ElementTree as ET

import pytest

from nuggetpress.common.config import SiteConfig
from nuggetpress.common.errors import (
    ConfigError,
    DuplicateSlugError,
    FrontMatterError,
    TemplateRenderError,
)
from nuggetpress.publisher import SiteBuilder, build_site, syntax_stylesheet
from nuggetpress.publisher.pipeline import SYNTAX_CSS_PATH

from conftest import post_text

ATOM = "{http://www.w3.org/2005/Atom}"


def tree(root):
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestSiteBuilder:
    """Tests for SiteBuilder.build."""

    def test_pagination_output(self, make_site, many_posts, tmp_path):
        source = make_site(posts=many_posts)
        result = SiteBuilder(source, tmp_path / "out").build()

        out = tmp_path / "out"
        assert result.post_count == 12
        assert result.index_page_count == 3
        assert (out / "index.html").exists()
        assert (out / "page" / "2" / "index.html").exists()
        assert (out / "page" / "3" / "index.html").exists()
        assert not (out / "page" / "4").exists()
        assert (out / "post-12" / "2024-09-12.html").exists()

        page3 = (out / "page" / "3" / "index.html").read_text(encoding="utf-8")
        assert page3.count('class="post-link"') == 2
        assert "Post 2</a>" in page3 and "Post 1</a>" in page3

    def test_feed_includes_every_post(self, make_site, many_posts, tmp_path):
        source = make_site(posts=many_posts)
        result = SiteBuilder(source, tmp_path / "out").build()
        root = ET.parse(tmp_path / "out" / "feed.xml").getroot()
        assert len(root.findall(f"{ATOM}entry")) == 12
        assert result.feed_entries == 12

    def test_zero_posts(self, make_site, tmp_path):
        source = make_site(files={"index.md": "---\nlayout: home\n---\nNothing yet.\n"})
        result = SiteBuilder(source, tmp_path / "out").build()

        assert result.index_page_count == 0
        home = (tmp_path / "out" / "index.html").read_text(encoding="utf-8")
        assert "Nothing yet." in home
        root = ET.parse(tmp_path / "out" / "feed.xml").getroot()
        assert root.findall(f"{ATOM}entry") == []

    def test_default_destination(self, make_site):
        source = make_site(posts={"2024-01-01-a.md": post_text()})
        result = SiteBuilder(source).build()
        assert result.destination == (source / "_site").resolve()
        assert (source / "_site" / "a" / "2024-01-01.html").exists()

        # A rebuild must not pick up its own output as static files
        again = SiteBuilder(source).build()
        assert again.static_count == 0

    def test_nested_destination_rebuild(self, make_site):
        source = make_site(posts={"2024-01-01-a.md": post_text()})
        destination = source / "out" / "site"
        first = SiteBuilder(source, destination).build()
        before = tree(destination)

        again = SiteBuilder(source, destination).build()
        assert again.static_count == first.static_count == 0
        assert tree(destination) == before
        assert not any(name.startswith("out/") for name in before)

    def test_rebuild_is_byte_identical(self, sample_site, tmp_path):
        build_site(sample_site, tmp_path / "one")
        build_site(sample_site, tmp_path / "two")
        assert tree(tmp_path / "one") == tree(tmp_path / "two")

    def test_syntax_css_generated(self, make_site, tmp_path):
        source = make_site(posts={"2024-01-01-a.md": post_text()})
        SiteBuilder(source, tmp_path / "out").build()
        css = (tmp_path / "out" / SYNTAX_CSS_PATH).read_text(encoding="utf-8")
        assert ".highlight" in css

    def test_static_syntax_css_wins(self, make_site, tmp_path):
        source = make_site(
            posts={"2024-01-01-a.md": post_text()},
            files={SYNTAX_CSS_PATH: "/* mine */\n"},
        )
        SiteBuilder(source, tmp_path / "out").build()
        assert (tmp_path / "out" / SYNTAX_CSS_PATH).read_text(encoding="utf-8") == "/* mine */\n"

    def test_without_plugins(self, make_site, many_posts, tmp_path):
        config = "title: Plain\npagination:\n  enabled: true\n  per_page: 5\n"
        source = make_site(posts=many_posts, config=config)
        result = SiteBuilder(source, tmp_path / "out").build()

        assert result.index_page_count == 1
        assert not (tmp_path / "out" / "feed.xml").exists()
        home = (tmp_path / "out" / "index.html").read_text(encoding="utf-8")
        assert 'property="og:title"' not in home
        assert "<title>Plain</title>" in home
        assert "application/atom+xml" not in home

    def test_feed_link_with_mixed_case_plugin_name(self, make_site, tmp_path):
        config = 'title: Cased\nurl: "https://example.com"\nplugins:\n  - Jekyll-Feed\n'
        source = make_site(posts={"2024-01-01-a.md": post_text()}, config=config)
        SiteBuilder(source, tmp_path / "out").build()

        assert (tmp_path / "out" / "feed.xml").exists()
        home = (tmp_path / "out" / "index.html").read_text(encoding="utf-8")
        assert 'type="application/atom+xml"' in home
        assert 'href="https://example.com/feed.xml"' in home


class TestBuildFailures:
    """A failing build aborts with a file-specific error and writes nothing."""

    def test_malformed_front_matter(self, make_site, tmp_path):
        source = make_site(
            posts={
                "2024-01-01-good.md": post_text(),
                "2024-01-02-bad.md": "---\ntitle: [broken\n---\n",
            }
        )
        with pytest.raises(FrontMatterError) as exc_info:
            SiteBuilder(source, tmp_path / "out").build()
        assert exc_info.value.path.name == "2024-01-02-bad.md"
        assert not (tmp_path / "out").exists()

    def test_previous_output_survives_failed_build(self, make_site, tmp_path):
        source = make_site(posts={"2024-01-01-good.md": post_text(title="Good")})
        SiteBuilder(source, tmp_path / "out").build()
        before = tree(tmp_path / "out")

        (source / "_layouts").mkdir()
        (source / "_layouts" / "post.html").write_text("{{ page.missing }}", encoding="utf-8")
        with pytest.raises(TemplateRenderError) as exc_info:
            SiteBuilder(source, tmp_path / "out").build()

        assert exc_info.value.path.name == "2024-01-01-good.md"
        assert tree(tmp_path / "out") == before

    def test_duplicate_slug(self, make_site, tmp_path):
        source = make_site(
            posts={
                "2024-01-01-same.md": post_text(),
                "2024-03-01-same.md": post_text(),
            }
        )
        with pytest.raises(DuplicateSlugError):
            SiteBuilder(source, tmp_path / "out").build()

    def test_output_path_collision(self, make_site, tmp_path):
        source = make_site(
            posts={"2024-01-01-hello.md": post_text(extra="permalink: /hello/")},
            files={"hello.md": "---\ntitle: Hello\npermalink: /hello/\n---\nPage\n"},
        )
        with pytest.raises(DuplicateSlugError, match="hello/index.html"):
            SiteBuilder(source, tmp_path / "out").build()

    def test_destination_containing_source(self, make_site, tmp_path):
        source = make_site(posts={"2024-01-01-a.md": post_text()})
        with pytest.raises(ConfigError, match="overwrite the site source"):
            SiteBuilder(source, tmp_path).build()

    def test_unknown_highlight_style(self):
        with pytest.raises(ConfigError, match="highlight_style"):
            syntax_stylesheet(SiteConfig(highlight_style="no-such-style"))
