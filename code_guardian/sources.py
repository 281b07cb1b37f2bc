"""Collect analysable files from a local directory.

Usage:
    files = collect_sources("path/to/repo")            # list[SourceFile]
    files = collect_sources("path/to/repo", config)    # honours analysis.exclude
"""

import fnmatch
import logging
import os
from pathlib import Path

from code_guardian.config import DEFAULT_EXCLUDES, Config
from code_guardian.languages import SOURCE_EXTENSIONS
from code_guardian.metrics import MANIFEST_NAMES
from code_guardian.models import SourceFile

logger = logging.getLogger(__name__)


def collect_sources(root: str | os.PathLike, config: Config | None = None) -> list[SourceFile]:
    """Return the source and manifest files under *root*, sorted by path.

    Paths are relative to *root* with forward slashes. A file that is not
    valid UTF-8 is returned with ``content=None``.

    Raises:
        NotADirectoryError: if *root* is not a directory.
    """
    config = config or Config()
    base = Path(root)
    if not base.is_dir():
        raise NotADirectoryError(f"Not a directory: '{root}'")

    skipped_dirs = set(DEFAULT_EXCLUDES)
    max_bytes = config.max_file_size_kb * 1024
    files: list[SourceFile] = []

    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(d for d in dirnames if d not in skipped_dirs)
        for filename in filenames:
            full = Path(dirpath) / filename
            rel = full.relative_to(base).as_posix()
            if not _wanted(filename) or _excluded(rel, config.exclude):
                continue
            if full.stat().st_size > max_bytes:
                logger.info("Skipping '%s': larger than %d KB", rel, config.max_file_size_kb)
                continue
            files.append(SourceFile(path=rel, content=_read(full)))

    files.sort(key=lambda f: f.path)
    logger.debug("Collected %d files under '%s'", len(files), root)
    return files


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _wanted(filename: str) -> bool:
    return filename in MANIFEST_NAMES or Path(filename).suffix.lower() in SOURCE_EXTENSIONS


def _excluded(rel: str, patterns: list[str]) -> bool:
    return any(fnmatch.fnmatch(rel, pattern) for pattern in patterns)


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        logger.warning("'%s' is not valid UTF-8; analysing it without content", path)
        return None
