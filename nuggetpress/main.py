"""CLI entry point for nugget-press.

Usage:
    # Build the site in the current directory into ./_site
    nugget-press build

    # Build another source tree into a custom destination
    python -m nuggetpress.main build --source my-blog --destination public

    # Build, then preview at http://127.0.0.1:4000/
    nugget-press serve --port 4000
"""

from __future__ import annotations

import argparse
import functools
import logging
import os
import sys
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

from nuggetpress.common.errors import BuildError
from nuggetpress.common.logging import set_verbosity, setup_logging
from nuggetpress.publisher import SiteBuilder

logger = setup_logging(module_name="main")


class PreviewRequestHandler(SimpleHTTPRequestHandler):
    """Serves the built tree; ``/post/2024-09-09`` resolves to ``post/2024-09-09.html``."""

    def translate_path(self, path: str) -> str:
        translated = super().translate_path(path)
        if not os.path.exists(translated) and os.path.exists(translated + ".html"):
            return translated + ".html"
        return translated

    def log_message(self, format: str, *args) -> None:
        logger.info("%s - %s", self.address_string(), format % args)


def _build(args: argparse.Namespace):
    builder = SiteBuilder(args.source, args.destination)
    try:
        return builder.build()
    except BuildError as exc:
        logger.error("Build failed: %s", exc)
        sys.exit(1)


def _run_build(args: argparse.Namespace) -> None:
    result = _build(args)
    print(f"\nBuilt {result.post_count} posts, {result.file_count} files -> {result.destination}")


def _run_serve(args: argparse.Namespace) -> None:
    result = _build(args)
    handler = functools.partial(PreviewRequestHandler, directory=str(result.destination))
    server = ThreadingHTTPServer((args.host, args.port), handler)
    logger.info("Serving %s at http://%s:%d/", result.destination, args.host, args.port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Stopping preview server")
    finally:
        server.server_close()


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--source",
        type=Path,
        default=Path("."),
        help="Site source directory containing _config.yml (default: .)",
    )
    parser.add_argument(
        "--destination",
        type=Path,
        help="Output directory (default: <source>/_site)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="nugget-press",
        description="Build a paginated static blog from Jekyll-style sources",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser("build", help="Build the site once")
    _add_common_arguments(build_parser)
    build_parser.set_defaults(func=_run_build)

    serve_parser = subparsers.add_parser("serve", help="Build, then serve locally")
    _add_common_arguments(serve_parser)
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port to listen on (default: 4000)",
    )
    serve_parser.set_defaults(func=_run_serve)

    args = parser.parse_args(argv)
    if args.verbose:
        set_verbosity(logging.DEBUG)
    args.func(args)


if __name__ == "__main__":
    main()
