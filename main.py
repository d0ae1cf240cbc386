from typing import List

from fastapi import Body, Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from agents.llm_client import ReviewModelClient
from config import ReviewSettings
from errors import ConfigurationError, DiffParseError, TransportError
from models import Comment, PRContext, ReviewOutcome
from pipeline import ReviewPipeline, build_pipeline
from utils.github_client import GitHubClient

app = FastAPI(title="PR Review Bot")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request, exc: ConfigurationError):
    return JSONResponse(status_code=503, content={"detail": str(exc)})


class PRInput(BaseModel):
    owner: str
    repo: str
    pr_number: int


class DiffReviewResponse(BaseModel):
    review_summary: str
    comments: List[Comment]


def get_settings() -> ReviewSettings:
    return ReviewSettings.from_env()


def get_github(settings: ReviewSettings = Depends(get_settings)) -> GitHubClient:
    return GitHubClient(settings)


def get_model_client(settings: ReviewSettings = Depends(get_settings)) -> ReviewModelClient:
    return ReviewModelClient(settings)


def get_pipeline(
    settings: ReviewSettings = Depends(get_settings),
    github: GitHubClient = Depends(get_github),
    model_client: ReviewModelClient = Depends(get_model_client),
) -> ReviewPipeline:
    return build_pipeline(settings, github=github, model_client=model_client)


def get_dry_run_pipeline(
    settings: ReviewSettings = Depends(get_settings),
    model_client: ReviewModelClient = Depends(get_model_client),
) -> ReviewPipeline:
    return build_pipeline(settings, model_client=model_client, dry_run=True)


@app.post("/review-diff", response_model=DiffReviewResponse, summary="Review a unified diff (plain text) without posting")
async def review_diff(
    diff_text: str = Body(..., media_type="text/plain", description="Paste the full unified diff here (plain text)."),
    title: str = "",
    description: str = "",
    pipeline: ReviewPipeline = Depends(get_dry_run_pipeline),
):
    if not diff_text.strip():
        raise HTTPException(status_code=400, detail="Empty diff")

    context = PRContext(owner="", repo="", pull_number=0, title=title, description=description,
                        base_revision="", head_revision="")
    try:
        comments = await pipeline.review_diff(context, diff_text)
    except DiffParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))

    return DiffReviewResponse(review_summary=f"{len(comments)} comments generated", comments=comments)


@app.post("/review-pr", response_model=ReviewOutcome, summary="Review a GitHub PR and post inline comments")
async def review_pr(
    inp: PRInput,
    github: GitHubClient = Depends(get_github),
    pipeline: ReviewPipeline = Depends(get_pipeline),
):
    try:
        context = await github.get_pull_request_context(inp.owner, inp.repo, inp.pr_number)
        diff = await github.get_diff(inp.owner, inp.repo, context.base_revision, context.head_revision)
    except TransportError as e:
        raise HTTPException(status_code=502, detail=f"Failed to fetch PR from GitHub: {e}")

    if not diff:
        return ReviewOutcome()

    try:
        return await pipeline.run(context, diff)
    except DiffParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))


@app.get("/")
def root(settings: ReviewSettings = Depends(get_settings)):
    return {
        "status": "PR Review Bot running",
        "git_integration": bool(settings.github_token),
        "model_configured": bool(settings.gemini_api_key),
    }
