"""Read a repository checkout into a source map."""
from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = (".tsx", ".ts", ".jsx", ".js", ".mjs", ".cjs", ".json", ".css")

# Dependencies, VCS metadata and build output
SKIP_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        ".next",
        ".nuxt",
        ".turbo",
        ".vercel",
        "dist",
        "build",
        "out",
        "coverage",
        "storybook-static",
    }
)

MAX_FILE_BYTES = 512 * 1024


def read_source_map(root: str | Path) -> dict[str, str]:
    """
    Map repository-relative POSIX paths to file text.

    Skips SKIP_DIRS, lockfiles, files over MAX_FILE_BYTES and files that
    are not UTF-8.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Not a directory: {root}")

    source_map: dict[str, str] = {}
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        for filename in sorted(filenames):
            if not filename.endswith(SOURCE_SUFFIXES) or filename == "package-lock.json":
                continue
            path = Path(dirpath) / filename
            if path.stat().st_size > MAX_FILE_BYTES:
                logger.debug("repo: skipping large file %s", path)
                continue
            try:
                text = path.read_text(encoding="utf-8")
            except UnicodeDecodeError:
                logger.debug("repo: skipping non-UTF-8 file %s", path)
                continue
            source_map[path.relative_to(root).as_posix()] = text
    return source_map
