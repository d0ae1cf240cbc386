# utils/review_threads.py

import logging
from typing import List, Optional

import httpx

from config import ReviewSettings
from errors import GitHubAPIError
from models import ReviewThread, ThreadComment
from utils.github_client import HEADERS, TRANSPORT_RETRIES, raise_for_github_status

logger = logging.getLogger(__name__)

REVIEW_THREADS_QUERY = """
query GetPullRequestReviewThreads($owner: String!, $repo: String!, $pullNumber: Int!, $cursor: String) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $pullNumber) {
      reviewThreads(first: 100, after: $cursor) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          isOutdated
          isResolved
          diffSide
          comments(first: 100) {
            nodes {
              path
              body
              actualHeadLine: line
              originalBaseLine: originalLine
            }
          }
        }
      }
    }
  }
}
"""


def _to_thread(node: dict) -> ReviewThread:
    comments = [
        ThreadComment(
            path=c["path"],
            body=c.get("body") or "",
            line_on_head=c.get("actualHeadLine"),
            line_on_base=c.get("originalBaseLine"),
        )
        for c in ((node.get("comments") or {}).get("nodes") or [])
    ]
    return ReviewThread(
        is_outdated=bool(node.get("isOutdated")),
        is_resolved=bool(node.get("isResolved")),
        diff_side=node.get("diffSide"),
        comments=comments,
    )


class ReviewThreadClient:
    """Lists the review threads of a pull request through the GraphQL API."""

    def __init__(self, settings: ReviewSettings, timeout: float = 30.0):
        self.url = settings.github_graphql_url
        self.timeout = timeout
        self.headers = dict(HEADERS)
        self.headers["Authorization"] = f"bearer {settings.require_github_token()}"

    async def _query(self, client: httpx.AsyncClient, variables: dict) -> dict:
        try:
            resp = await client.post(self.url, json={"query": REVIEW_THREADS_QUERY, "variables": variables})
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"GraphQL request failed: {e}") from e
        raise_for_github_status(resp)

        j = resp.json()
        if j.get("errors"):
            messages = "; ".join(err.get("message", str(err)) for err in j["errors"])
            raise GitHubAPIError(f"GraphQL errors: {messages}", status_code=resp.status_code, body=resp.text)

        pull_request = ((j.get("data") or {}).get("repository") or {}).get("pullRequest")
        if pull_request is None:
            raise GitHubAPIError("GraphQL response has no pullRequest", status_code=resp.status_code, body=resp.text)
        return pull_request["reviewThreads"]

    async def list_review_threads(self, owner: str, repo: str, pull_number: int) -> List[ReviewThread]:
        threads: List[ReviewThread] = []
        cursor: Optional[str] = None

        async with httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            transport=httpx.AsyncHTTPTransport(retries=TRANSPORT_RETRIES),
        ) as client:
            while True:
                page = await self._query(client, {
                    "owner": owner,
                    "repo": repo,
                    "pullNumber": pull_number,
                    "cursor": cursor,
                })
                threads.extend(_to_thread(node) for node in page.get("nodes") or [])

                page_info = page.get("pageInfo") or {}
                if not page_info.get("hasNextPage"):
                    break
                cursor = page_info.get("endCursor")

        logger.info("Fetched %d review threads for %s/%s#%d", len(threads), owner, repo, pull_number)
        return threads
