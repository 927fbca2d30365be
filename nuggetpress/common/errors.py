"""Exception hierarchy for site builds.

Every error that aborts a build derives from :class:`BuildError` and
carries the path of the file that caused it, when there is one.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base exception for all nugget-press build failures."""

    def __init__(self, reason: str, path: Path | str | None = None):
        self.reason = reason
        self.path = Path(path) if path is not None else None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.path is None:
            return self.reason
        return f"{self.path}: {self.reason}"


class ConfigError(BuildError):
    """Raised when the site configuration cannot be read or validated."""


class FrontMatterError(BuildError):
    """Raised when a content file has a malformed front-matter block."""


class DuplicateSlugError(BuildError):
    """Raised when two documents claim the same slug or output path."""


class TemplateRenderError(BuildError):
    """Raised when a layout references a missing field or template."""
