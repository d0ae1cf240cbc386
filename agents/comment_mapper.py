# agents/comment_mapper.py
import logging
from typing import Any, List

from pydantic import ValidationError

from models import Comment, FileDiff, ReviewCandidate, Side

logger = logging.getLogger(__name__)

_SIDES = {"+": Side.RIGHT, "-": Side.LEFT}


def map_review_candidates(file: FileDiff, raw_reviews: List[Any]) -> List[Comment]:
    """
    Turn the model's raw review items into comments anchored on `file`.

    Items that fail validation or point at a non-positive line are dropped;
    order is kept and nothing is deduplicated here.
    """
    if file.is_deleted:
        return []

    comments = []
    for raw in raw_reviews:
        try:
            candidate = ReviewCandidate.model_validate(raw)
        except ValidationError as e:
            logger.info("Discarding invalid review for %s: %s", file.to_path, e.errors())
            continue

        if candidate.line_number <= 0:
            logger.info("Invalid line number %s for %s", candidate.line_number, file.to_path)
            continue

        comments.append(Comment(
            path=file.to_path,
            line=candidate.line_number,
            side=_SIDES[candidate.change_type],
            body=candidate.review_comment,
        ))
    return comments
