# agents/review_agent.py
import logging
from typing import List, Optional

from agents.comment_mapper import map_review_candidates
from agents.llm_client import ReviewModelClient
from agents.prompt_builder import build_review_prompt
from models import Comment, FileDiff, PRContext

logger = logging.getLogger(__name__)


class FileReviewer:
    """Reviews files one at a time, in diff order: prompt -> model -> comments."""

    def __init__(self, model_client: ReviewModelClient, guidelines: str = "",
                 github=None, include_file_content: bool = False):
        self.model_client = model_client
        self.guidelines = guidelines
        self.github = github
        self.include_file_content = include_file_content

    async def _base_file_content(self, file: FileDiff, context: PRContext) -> str:
        if not self.include_file_content or self.github is None or file.is_new:
            return ""
        try:
            content: Optional[str] = await self.github.get_file_content_at_revision(
                context.owner, context.repo, file.from_path, context.base_revision
            )
        except Exception as e:
            logger.warning("Could not fetch %s at %s: %s", file.from_path, context.base_revision, e)
            return ""
        return content or ""

    async def review_file(self, file: FileDiff, context: PRContext) -> List[Comment]:
        if file.is_deleted or not file.chunks:
            return []

        file_content = await self._base_file_content(file, context)
        prompt = build_review_prompt(file, context, self.guidelines, file_content)
        logger.debug("Prompt for %s:\n%s", file.to_path, prompt)

        raw_reviews = await self.model_client.review(prompt)
        comments = map_review_candidates(file, raw_reviews)
        logger.info("%s: %d review comments", file.to_path, len(comments))
        return comments

    async def review_files(self, files: List[FileDiff], context: PRContext) -> List[Comment]:
        comments: List[Comment] = []
        for file in files:
            logger.info("Reviewing %s", file.to_path)
            comments.extend(await self.review_file(file, context))
        return comments
