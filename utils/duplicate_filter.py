# utils/duplicate_filter.py
import logging
from typing import Iterable, List

from models import Comment, ExistingComment, ReviewThread, Side

logger = logging.getLogger(__name__)


def collect_existing_comments(threads: Iterable[ReviewThread]) -> List[ExistingComment]:
    """
    Comments on threads that still apply to the current diff.

    Outdated threads are ignored whatever their resolution state. The line is
    read from the side the thread sits on: the base line for LEFT, the head
    line for RIGHT. Comments without a line on that side are skipped.
    """
    existing = []
    for thread in threads:
        if thread.is_outdated:
            continue

        side = Side.LEFT if thread.diff_side == "LEFT" else Side.RIGHT
        for c in thread.comments:
            line = c.line_on_base if side == Side.LEFT else c.line_on_head
            if line is None:
                logger.debug("Skipping comment without a line on side %s: %s", side.value, c.path)
                continue
            existing.append(ExistingComment(path=c.path, line=line, side=side, body=c.body))
    return existing


def remove_duplicates(comments: List[Comment], existing: Iterable[Comment]) -> List[Comment]:
    existing_keys = {c.key for c in existing}
    unique = [c for c in comments if c.key not in existing_keys]
    if len(unique) != len(comments):
        logger.info("Dropped %d comments already present on the pull request", len(comments) - len(unique))
    return unique
