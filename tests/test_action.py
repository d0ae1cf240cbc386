import json
from unittest.mock import AsyncMock

import pytest

import action
from action import PullRequestEvent, load_event, run_action
from conftest import APP_DIFF, FakeGitHub, FakeModel, FakeThreads
from errors import ModelCallError
from pipeline import build_pipeline


def _event(action_name, **extra):
    payload = {
        "action": action_name,
        "number": 7,
        "repository": {"name": "widgets", "owner": {"login": "octo"}},
    }
    payload.update(extra)
    return PullRequestEvent.model_validate(payload)


def _wired(settings, github, model):
    return build_pipeline(settings, github=github, thread_client=FakeThreads(), model_client=model)


@pytest.mark.asyncio
async def test_opened_reviews_the_whole_pull_request(settings, pr_context):
    github = FakeGitHub(context=pr_context, diff=APP_DIFF)
    model = FakeModel([{"lineNumber": 42, "changeType": "+", "reviewComment": "Consider renaming x"}])

    outcome = await run_action(settings, _event("opened"), github=github, pipeline=_wired(settings, github, model))

    assert github.diff_calls == [("base-sha", "head-sha")]
    assert len(outcome.publish.posted) == 1


@pytest.mark.asyncio
async def test_synchronize_reviews_the_pushed_range(settings, pr_context):
    github = FakeGitHub(context=pr_context, diff=APP_DIFF)
    model = FakeModel([])

    await run_action(settings, _event("synchronize", before="old-head", after="new-head"),
                     github=github, pipeline=_wired(settings, github, model))

    assert github.diff_calls == [("old-head", "new-head")]


@pytest.mark.asyncio
async def test_unsupported_action_does_nothing(settings, pr_context):
    github = FakeGitHub(context=pr_context, diff=APP_DIFF)

    assert await run_action(settings, _event("closed"), github=github) is None
    assert github.diff_calls == []


@pytest.mark.asyncio
async def test_empty_diff_stops_before_review(settings, pr_context):
    github = FakeGitHub(context=pr_context, diff="")
    model = FakeModel()

    result = await run_action(settings, _event("opened"), github=github, pipeline=_wired(settings, github, model))

    assert result is None
    assert model.prompts == []


def test_load_event(tmp_path):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "action": "synchronize",
        "number": 3,
        "before": "a",
        "after": "b",
        "repository": {"name": "widgets", "owner": {"login": "octo"}},
        "pull_request": {"title": "ignored"},
    }))

    event = load_event(str(path))

    assert (event.action, event.number, event.before, event.after) == ("synchronize", 3, "a", "b")
    assert event.repository.owner.login == "octo"


@pytest.fixture
def event_file(tmp_path, monkeypatch):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "action": "opened",
        "number": 7,
        "repository": {"name": "widgets", "owner": {"login": "octo"}},
    }))
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(path))
    monkeypatch.setenv("GITHUB_TOKEN", "t")
    monkeypatch.setenv("GEMINI_API_KEY", "k")
    return path


def test_main_exits_zero_on_success(event_file, monkeypatch):
    run = AsyncMock(return_value=None)
    monkeypatch.setattr(action, "run_action", run)

    assert action.main() == 0
    assert run.await_args.args[1].action == "opened"


def test_main_exits_non_zero_when_the_run_fails(event_file, monkeypatch):
    monkeypatch.setattr(action, "run_action", AsyncMock(side_effect=ModelCallError("gave up", attempts=3)))

    assert action.main() == 1


def test_main_fails_without_event_path(monkeypatch):
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)

    assert action.main() == 1
