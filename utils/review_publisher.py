# utils/review_publisher.py
import logging
from typing import List, Sequence, TypeVar

from models import Comment, PRContext, PublishResult

logger = logging.getLogger(__name__)

BATCH_SIZE = 50
REVIEW_EVENT = "COMMENT"

T = TypeVar("T")


def chunk_list(items: Sequence[T], size: int) -> List[List[T]]:
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class ReviewPublisher:
    """
    Posts comments as COMMENT reviews, `batch_size` comments per review.
    When a batch is rejected its comments are retried one review each, so a
    single bad anchor does not take the rest of the batch down with it.
    """

    def __init__(self, github, batch_size: int = BATCH_SIZE):
        self.github = github
        self.batch_size = batch_size

    async def publish(self, context: PRContext, comments: List[Comment]) -> PublishResult:
        result = PublishResult()
        if not comments:
            logger.info("No comments to create")
            return result

        batches = chunk_list(comments, self.batch_size)
        result.batches = len(batches)
        for i, batch in enumerate(batches, start=1):
            logger.info("Creating review comment batch %d of %d", i, len(batches))
            try:
                await self._create(context, batch)
                result.posted.extend(batch)
            except Exception as e:
                logger.warning("Batch %d failed (%s), creating its comments one by one", i, e)
                await self._publish_individually(context, batch, result)
        return result

    async def _publish_individually(self, context: PRContext, batch: List[Comment], result: PublishResult) -> None:
        for comment in batch:
            try:
                await self._create(context, [comment])
                result.posted.append(comment)
            except Exception as e:
                logger.error("Failed to create comment on %s:%d (%s): %s",
                             comment.path, comment.line, comment.side.value, e)
                result.failed.append(comment)

    async def _create(self, context: PRContext, comments: List[Comment]) -> None:
        await self.github.create_review(
            context.owner,
            context.repo,
            context.pull_number,
            comments,
            event=REVIEW_EVENT,
        )
