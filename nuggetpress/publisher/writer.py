"""Output writer — all-or-nothing publication of a built site.

Everything is written into a staging directory beside the destination.
Only when every file is in place is the staging tree swapped in; if
anything fails, the staging tree is removed and the previously
published destination is left exactly as it was.
"""

from __future__ import annotations

import os
import shutil
import tempfile
import uuid
from pathlib import Path, PurePosixPath
from typing import Iterable

from nuggetpress.common.errors import BuildError
from nuggetpress.common.logging import setup_logging

from .models import RenderedOutput

logger = setup_logging(module_name="publisher.writer")


def _target(root: Path, rel_path: str) -> Path:
    parts = PurePosixPath(rel_path).parts
    if not parts or rel_path.startswith("/") or ".." in parts:
        raise BuildError(f"refusing to write outside the output directory: {rel_path!r}")
    return root.joinpath(*parts)


def _swap_in(staging: Path, destination: Path) -> None:
    """Replace ``destination`` with ``staging``, restoring it on failure."""
    if not destination.exists():
        os.replace(staging, destination)
        return

    backup = destination.with_name(f".{destination.name}-previous-{uuid.uuid4().hex[:8]}")
    os.replace(destination, backup)
    try:
        os.replace(staging, destination)
    except OSError:
        os.replace(backup, destination)
        raise
    shutil.rmtree(backup, ignore_errors=True)


def write_site(
    outputs: Iterable[RenderedOutput],
    destination: Path,
    source_dir: Path | None = None,
    static_files: Iterable[str] = (),
) -> int:
    """Write rendered outputs and copy static files, then publish atomically.

    Args:
        outputs: Rendered files (relative path + bytes)
        destination: Output root to (re)place
        source_dir: Site source for static files
        static_files: Static file paths relative to ``source_dir``

    Returns:
        Number of files written
    """
    destination = Path(destination).resolve()
    destination.parent.mkdir(parents=True, exist_ok=True)
    staging = Path(
        tempfile.mkdtemp(prefix=f".{destination.name}-staging-", dir=destination.parent)
    )
    staging.chmod(0o755)

    count = 0
    try:
        for output in outputs:
            target = _target(staging, output.path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(output.content)
            count += 1

        for rel_path in static_files:
            if source_dir is None:
                raise BuildError("static files given without a source directory")
            target = _target(staging, rel_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(Path(source_dir) / rel_path, target)
            count += 1

        _swap_in(staging, destination)
    except BaseException:
        shutil.rmtree(staging, ignore_errors=True)
        logger.error("Build output discarded; %s left untouched", destination)
        raise

    logger.info("Wrote %d files to %s", count, destination)
    return count
