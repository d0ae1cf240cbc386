"""
Workflow entrypoint: review the pull request named by the GitHub event payload.

    GITHUB_EVENT_PATH=event.json python action.py

Exits 0 when the run finishes (including "nothing to do") and 1 when an
error escapes the run.
"""
import asyncio
import json
import logging
import os
import sys
from typing import Optional

from pydantic import BaseModel

from config import ReviewSettings
from errors import ConfigurationError
from models import PRContext, ReviewOutcome
from pipeline import build_pipeline
from utils.github_client import GitHubClient

logger = logging.getLogger("action")

FULL_DIFF_ACTIONS = {"opened", "reopened"}
RANGE_DIFF_ACTIONS = {"synchronize"}


class RepositoryOwner(BaseModel):
    login: str


class Repository(BaseModel):
    name: str
    owner: RepositoryOwner


class PullRequestEvent(BaseModel):
    action: str
    number: int
    repository: Repository
    before: Optional[str] = None
    after: Optional[str] = None


def load_event(path: Optional[str]) -> PullRequestEvent:
    if not path:
        raise ConfigurationError("GITHUB_EVENT_PATH is not set")
    with open(path, "r", encoding="utf-8") as f:
        return PullRequestEvent.model_validate(json.load(f))


async def run_action(settings: ReviewSettings, event: PullRequestEvent,
                     github: Optional[GitHubClient] = None, pipeline=None) -> Optional[ReviewOutcome]:
    """Review the PR for a supported event; None when there is nothing to do."""
    if event.action not in FULL_DIFF_ACTIONS | RANGE_DIFF_ACTIONS:
        logger.info("Unsupported event action: %s", event.action)
        return None

    github = github or GitHubClient(settings)
    context: PRContext = await github.get_pull_request_context(
        event.repository.owner.login, event.repository.name, event.number
    )

    if event.action in RANGE_DIFF_ACTIONS:
        if not event.before or not event.after:
            raise ConfigurationError("synchronize event without before/after commits")
        context = context.model_copy(update={"base_revision": event.before, "head_revision": event.after})

    diff = await github.get_diff(context.owner, context.repo, context.base_revision, context.head_revision)
    if not diff:
        logger.info("No diff found")
        return None

    pipeline = pipeline or build_pipeline(settings, github=github)
    outcome = await pipeline.run(context, diff)
    if outcome.publish is not None:
        logger.info("Posted %d comments, %d failed",
                    len(outcome.publish.posted), len(outcome.publish.failed))
    return outcome


def main() -> int:
    settings = ReviewSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        event = load_event(os.getenv("GITHUB_EVENT_PATH"))
        asyncio.run(run_action(settings, event))
    except Exception as e:
        logger.error("Review failed: %s", e, exc_info=e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
