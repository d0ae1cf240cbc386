# utils/github_client.py

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from config import ReviewSettings
from errors import GitHubAPIError
from models import Comment, PRContext

logger = logging.getLogger(__name__)

# base request headers
HEADERS = {
    "Accept": "application/vnd.github+json",
    "User-Agent": "PR-Review-Bot",
    "X-GitHub-Api-Version": "2022-11-28",
}

DIFF_MEDIA_TYPE = "application/vnd.github.v3.diff"
RAW_MEDIA_TYPE = "application/vnd.github.raw"

# connection-level retries only; HTTP error statuses are not retried
TRANSPORT_RETRIES = 2


def raise_for_github_status(resp: httpx.Response) -> None:
    """Raise GitHubAPIError with the response body attached for debugging."""
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise GitHubAPIError(
            f"GitHub returned {resp.status_code} for {e.request.method} {e.request.url}: {resp.text}",
            status_code=resp.status_code,
            body=resp.text,
        ) from e


class GitHubClient:
    """REST calls the reviewer needs: PR metadata, diffs, file content, reviews."""

    def __init__(self, settings: ReviewSettings, timeout: float = 30.0):
        self.api_base = settings.github_api_url
        self.timeout = timeout
        self.headers = dict(HEADERS)
        self.headers["Authorization"] = f"token {settings.require_github_token()}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            transport=httpx.AsyncHTTPTransport(retries=TRANSPORT_RETRIES),
        )

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        async with self._client() as client:
            try:
                resp = await client.request(method, url, **kwargs)
            except httpx.HTTPError as e:
                raise GitHubAPIError(f"GitHub request {method} {url} failed: {e}") from e
        return resp

    # -----------------------------------------------------------
    # Fetch PR metadata (title, body, base/head SHA)
    # -----------------------------------------------------------
    async def get_pull_request_context(self, owner: str, repo: str, pull_number: int) -> PRContext:
        url = f"{self.api_base}/repos/{owner}/{repo}/pulls/{pull_number}"
        resp = await self._request("GET", url)
        raise_for_github_status(resp)
        j = resp.json()
        return PRContext(
            owner=owner,
            repo=repo,
            pull_number=pull_number,
            title=j.get("title") or "",
            description=j.get("body") or "",
            base_revision=j["base"]["sha"],
            head_revision=j["head"]["sha"],
        )

    # -----------------------------------------------------------
    # Fetch the unified diff between two commits
    # -----------------------------------------------------------
    async def get_diff(self, owner: str, repo: str, base: str, head: str) -> str:
        url = f"{self.api_base}/repos/{owner}/{repo}/compare/{base}...{head}"
        resp = await self._request("GET", url, headers={"Accept": DIFF_MEDIA_TYPE})
        raise_for_github_status(resp)
        return resp.text

    # -----------------------------------------------------------
    # Fetch a file as it was at a given revision (None if absent)
    # -----------------------------------------------------------
    async def get_file_content_at_revision(
        self, owner: str, repo: str, path: str, revision: str
    ) -> Optional[str]:
        url = f"{self.api_base}/repos/{owner}/{repo}/contents/{quote(path)}"
        resp = await self._request(
            "GET", url, params={"ref": revision}, headers={"Accept": RAW_MEDIA_TYPE}
        )
        if resp.status_code == 404:
            return None
        raise_for_github_status(resp)
        return resp.text

    # -----------------------------------------------------------
    # Create a review with inline comments
    # -----------------------------------------------------------
    async def create_review(
        self,
        owner: str,
        repo: str,
        pull_number: int,
        comments: List[Comment],
        event: str = "COMMENT",
    ) -> dict:
        url = f"{self.api_base}/repos/{owner}/{repo}/pulls/{pull_number}/reviews"
        payload = {"event": event, "comments": [c.to_github() for c in comments]}
        resp = await self._request("POST", url, json=payload)
        raise_for_github_status(resp)
        return resp.json()
