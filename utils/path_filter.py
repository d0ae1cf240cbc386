# utils/path_filter.py
import logging
from typing import Iterable, List

from wcmatch import glob

from models import FileDiff

logger = logging.getLogger(__name__)

# minimatch-like semantics: ** spans directories, {a,b} expands
GLOB_FLAGS = glob.GLOBSTAR | glob.BRACE


def parse_exclude_patterns(raw: str) -> List[str]:
    """Split a comma-separated EXCLUDE value into trimmed, non-empty globs."""
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    return any(glob.globmatch(path, pattern, flags=GLOB_FLAGS) for pattern in patterns)


def filter_files(files: List[FileDiff], patterns: List[str]) -> List[FileDiff]:
    kept = []
    for f in files:
        if f.is_deleted:
            continue
        if not f.chunks:
            # binary, rename-only or mode-only sections have no lines to anchor on
            logger.info("Skipping %s: no textual changes", f.to_path)
            continue
        if is_excluded(f.to_path, patterns):
            logger.info("Skipping excluded file %s", f.to_path)
            continue
        kept.append(f)
    return kept
