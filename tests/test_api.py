import pytest
from fastapi.testclient import TestClient

from config import ReviewSettings
from conftest import APP_DIFF, FakeGitHub, FakeModel, FakeThreads
from errors import GitHubAPIError
from main import app, get_github, get_model_client, get_pipeline, get_settings
from pipeline import build_pipeline

RENAME_X = {"lineNumber": 42, "changeType": "+", "reviewComment": "Consider renaming x"}


@pytest.fixture
def client(settings, pr_context):
    github = FakeGitHub(context=pr_context, diff=APP_DIFF)
    model = FakeModel([RENAME_X])
    pipeline = build_pipeline(settings, github=github, thread_client=FakeThreads(), model_client=model)

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_model_client] = lambda: model
    app.dependency_overrides[get_github] = lambda: github
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    yield TestClient(app), github, model
    app.dependency_overrides.clear()


def test_root_reports_configuration(client):
    test_client, _, _ = client

    resp = test_client.get("/")

    assert resp.status_code == 200
    assert resp.json() == {"status": "PR Review Bot running", "git_integration": True, "model_configured": True}


def test_review_diff_is_a_dry_run(client):
    test_client, github, model = client

    resp = test_client.post("/review-diff?title=Add%20x", content=APP_DIFF, headers={"Content-Type": "text/plain"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["review_summary"] == "1 comments generated"
    assert body["comments"] == [{"path": "app.py", "line": 42, "side": "RIGHT", "body": "Consider renaming x"}]
    assert "Pull request title: Add x" in model.prompts[0]
    assert github.review_calls == []


def test_review_diff_only_needs_the_gemini_key():
    model = FakeModel([RENAME_X])
    app.dependency_overrides[get_settings] = lambda: ReviewSettings(gemini_api_key="k", include_file_content=True)
    app.dependency_overrides[get_model_client] = lambda: model
    try:
        resp = TestClient(app).post("/review-diff", content=APP_DIFF, headers={"Content-Type": "text/plain"})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json()["comments"] == [{"path": "app.py", "line": 42, "side": "RIGHT", "body": "Consider renaming x"}]
    assert "Full content of the file" not in model.prompts[0]


def test_review_diff_rejects_empty_and_malformed_input(client):
    test_client, _, _ = client

    assert test_client.post("/review-diff", content="  ", headers={"Content-Type": "text/plain"}).status_code == 400
    assert test_client.post("/review-diff", content="nope", headers={"Content-Type": "text/plain"}).status_code == 422


def test_review_pr_posts_comments(client):
    test_client, github, _ = client

    resp = test_client.post("/review-pr", json={"owner": "octo", "repo": "widgets", "pr_number": 7})

    assert resp.status_code == 200
    assert resp.json()["publish"]["posted"][0]["line"] == 42
    assert len(github.review_calls) == 1


def test_review_pr_maps_github_failures_to_502(client):
    test_client, github, _ = client

    async def broken(*args, **kwargs):
        raise GitHubAPIError("GitHub returned 404", status_code=404)

    github.get_pull_request_context = broken

    resp = test_client.post("/review-pr", json={"owner": "octo", "repo": "widgets", "pr_number": 7})

    assert resp.status_code == 502


def test_missing_token_is_a_service_error():
    app.dependency_overrides[get_settings] = lambda: ReviewSettings()
    try:
        resp = TestClient(app).post("/review-pr", json={"owner": "o", "repo": "r", "pr_number": 1})
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 503
