import logging
from typing import List, Optional, Tuple

from agents.llm_client import ReviewModelClient
from agents.review_agent import FileReviewer
from config import ReviewSettings
from diff_parser import parse_unified_diff
from errors import ConfigurationError
from models import Comment, PRContext, ReviewOutcome
from utils.duplicate_filter import collect_existing_comments, remove_duplicates
from utils.github_client import GitHubClient
from utils.path_filter import filter_files
from utils.review_publisher import ReviewPublisher
from utils.review_threads import ReviewThreadClient

logger = logging.getLogger(__name__)


class ReviewPipeline:
    """One review run: diff -> per-file model review -> dedup -> publish."""

    def __init__(self, reviewer: FileReviewer, thread_client: Optional[ReviewThreadClient] = None,
                 publisher: Optional[ReviewPublisher] = None, exclude: Optional[List[str]] = None):
        self.reviewer = reviewer
        self.thread_client = thread_client
        self.publisher = publisher
        self.exclude = exclude or []

    async def _analyze(self, context: PRContext, diff_text: str) -> Tuple[int, List[Comment]]:
        files = parse_unified_diff(diff_text)
        if not files:
            logger.info("No diff found")
            return 0, []

        files = filter_files(files, self.exclude)
        logger.info("%d files to review", len(files))
        comments = await self.reviewer.review_files(files, context)
        return len(files), comments

    async def review_diff(self, context: PRContext, diff_text: str) -> List[Comment]:
        """Parse, filter and review; nothing is read from or posted to the pull request."""
        _, comments = await self._analyze(context, diff_text)
        return comments

    async def run(self, context: PRContext, diff_text: str) -> ReviewOutcome:
        if self.thread_client is None or self.publisher is None:
            raise ConfigurationError("This pipeline was built for dry runs and cannot publish")

        files_reviewed, comments = await self._analyze(context, diff_text)
        outcome = ReviewOutcome(files_reviewed=files_reviewed, candidates=comments)
        if not comments:
            logger.info("No comments to create")
            return outcome

        threads = await self.thread_client.list_review_threads(
            context.owner, context.repo, context.pull_number
        )
        existing = collect_existing_comments(threads)
        logger.info("Existing comments: %d", len(existing))

        unique = remove_duplicates(comments, existing)
        outcome.duplicates = len(comments) - len(unique)
        outcome.publish = await self.publisher.publish(context, unique)
        return outcome


def build_pipeline(settings: ReviewSettings, github=None, thread_client=None, model_client=None,
                   dry_run: bool = False) -> ReviewPipeline:
    """Wire the pipeline from settings; any collaborator can be passed in ready-made.

    A dry-run pipeline has no GitHub collaborators at all and only needs the Gemini key.
    Its `run` refuses to publish; use `review_diff`.
    """
    model_client = model_client or ReviewModelClient(settings)
    if dry_run:
        reviewer = FileReviewer(model_client, guidelines=settings.guidelines)
        return ReviewPipeline(reviewer, exclude=settings.exclude)

    github = github or GitHubClient(settings)
    thread_client = thread_client or ReviewThreadClient(settings)
    reviewer = FileReviewer(
        model_client,
        guidelines=settings.guidelines,
        github=github,
        include_file_content=settings.include_file_content,
    )
    publisher = ReviewPublisher(github, batch_size=settings.batch_size)
    return ReviewPipeline(reviewer, thread_client, publisher, exclude=settings.exclude)
