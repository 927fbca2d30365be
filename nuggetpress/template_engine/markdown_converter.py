"""Markdown → HTML conversion with fenced-code highlighting.

Ambiguous input never fails the build: an unknown fence language is
highlighted as plain text and an unterminated fence is left as literal
text. Both cases are logged as warnings.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

import markdown as md
from markupsafe import Markup
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from nuggetpress.common.logging import setup_logging

logger = setup_logging(module_name="template_engine.markdown")

DEFAULT_EXTENSIONS = ["fenced_code", "codehilite", "tables", "toc", "sane_lists"]

DEFAULT_EXTENSION_CONFIGS = {
    "codehilite": {
        "css_class": "highlight",
        "guess_lang": False,
    },
}

_FENCE_OPEN = re.compile(
    r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*"
    r"(?:\{[ \t]*\.?(?P<brace_lang>[\w#+.-]+)[^}]*\}|(?P<lang>[\w#+.-]+))?"
)


class MarkdownConverter:
    """Converts post bodies to HTML.

    Usage:
        converter = MarkdownConverter()
        html = converter.convert(post.body, source=post.source_path)
    """

    def __init__(
        self,
        extensions: Optional[list[str]] = None,
        extension_configs: Optional[dict] = None,
    ):
        self.extensions = extensions or list(DEFAULT_EXTENSIONS)
        self.extension_configs = extension_configs or DEFAULT_EXTENSION_CONFIGS

    def convert(
        self,
        text: str,
        source: Path | str | None = None,
        check: bool = True,
    ) -> Markup:
        """Render Markdown text to HTML.

        Args:
            text: Markdown source
            source: Originating file, used in warnings
            check: Warn about fences that degrade to plain text

        Returns:
            HTML marked safe for templates
        """
        if check:
            self.check_fences(text, source)
        converter = md.Markdown(
            extensions=self.extensions,
            extension_configs=self.extension_configs,
            output_format="html",
        )
        return Markup(converter.convert(text or ""))

    def excerpt(self, text: str, separator: str = "\n\n") -> str:
        """Return the Markdown of the first paragraph block."""
        stripped = (text or "").strip()
        if not stripped:
            return ""
        return stripped.split(separator, 1)[0].strip()

    def check_fences(self, text: str, source: Path | str | None = None) -> list[str]:
        """Warn about fences that will not highlight as written.

        Returns:
            Warning messages, one per problem found
        """
        warnings: list[str] = []
        where = source or "<string>"
        open_fence: Optional[str] = None
        open_line = 0

        for lineno, line in enumerate((text or "").splitlines(), start=1):
            if open_fence is not None:
                closing = line.strip()
                if closing.startswith(open_fence[0]) and set(closing) == {open_fence[0]} \
                        and len(closing) >= len(open_fence):
                    open_fence = None
                continue

            match = _FENCE_OPEN.match(line)
            if not match:
                continue
            open_fence = match.group("fence")
            open_line = lineno
            lang = match.group("brace_lang") or match.group("lang")
            if lang and not _known_language(lang):
                warnings.append(
                    f"{where}:{lineno}: unknown code language {lang!r}, rendering as plain text"
                )

        if open_fence is not None:
            warnings.append(
                f"{where}:{open_line}: unterminated code fence, rendering as literal text"
            )

        for message in warnings:
            logger.warning(message)
        return warnings


def _known_language(lang: str) -> bool:
    try:
        get_lexer_by_name(lang)
    except ClassNotFound:
        return False
    return True
