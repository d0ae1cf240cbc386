from typing import Dict, List, Optional

import pytest

from config import ReviewSettings
from errors import GitHubAPIError
from models import PRContext, ReviewThread

APP_DIFF = """\
diff --git a/app.py b/app.py
index 1111111..2222222 100644
--- a/app.py
+++ b/app.py
@@ -40,3 +40,4 @@ def main():
     a = 0
     b = 0
+    x = 1
     return a
"""

README_DIFF = """\
diff --git a/README.md b/README.md
index 5555555..6666666 100644
--- a/README.md
+++ b/README.md
@@ -1,2 +1,2 @@
 # Project
-Old text
+New text
"""

DELETED_DIFF = """\
diff --git a/old.py b/old.py
deleted file mode 100644
index 3333333..0000000
--- a/old.py
+++ /dev/null
@@ -1,2 +0,0 @@
-import os
-print(os.name)
"""

NEW_FILE_DIFF = """\
diff --git a/new.py b/new.py
new file mode 100644
index 0000000..4444444
--- /dev/null
+++ b/new.py
@@ -0,0 +1,2 @@
+def hello():
+    return "hi"
"""

BINARY_DIFF = """\
diff --git a/logo.png b/logo.png
index 9999999..aaaaaaa 100644
Binary files a/logo.png and b/logo.png differ
"""

MODIFIED_DIFF = """\
diff --git a/src/util.py b/src/util.py
index 7777777..8888888 100644
--- a/src/util.py
+++ b/src/util.py
@@ -10,4 +10,4 @@ def helper():
     one = 1
-    two = 2
+    two = 3
     three = 3
     four = 4
@@ -30,2 +30,3 @@ def other():
     pass
+    return None
 # end
"""


@pytest.fixture
def settings() -> ReviewSettings:
    return ReviewSettings(github_token="ghp_test", gemini_api_key="gemini_test", exclude=["*.md"])


@pytest.fixture
def pr_context() -> PRContext:
    return PRContext(
        owner="octo",
        repo="widgets",
        pull_number=7,
        title="Add x",
        description="Introduces x",
        base_revision="base-sha",
        head_revision="head-sha",
    )


class FakeModel:
    """Returns queued responses in order; an Exception entry is raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts: List[str] = []

    async def review(self, prompt: str):
        self.prompts.append(prompt)
        response = self.responses.pop(0) if self.responses else []
        if isinstance(response, Exception):
            raise response
        return response


class FakeGitHub:
    def __init__(self, context: Optional[PRContext] = None, diff: str = "",
                 files: Optional[Dict[str, str]] = None, fail_batches: bool = False,
                 bad_lines=()):
        self.context = context
        self.diff = diff
        self.files = files or {}
        self.fail_batches = fail_batches
        self.bad_lines = set(bad_lines)
        self.diff_calls = []
        self.file_requests = []
        self.review_calls = []
        self.reviews = []

    async def get_pull_request_context(self, owner, repo, pull_number):
        return self.context

    async def get_diff(self, owner, repo, base, head):
        self.diff_calls.append((base, head))
        return self.diff

    async def get_file_content_at_revision(self, owner, repo, path, revision):
        self.file_requests.append((path, revision))
        return self.files.get(path)

    async def create_review(self, owner, repo, pull_number, comments, event="COMMENT"):
        self.review_calls.append((list(comments), event))
        if self.fail_batches and len(comments) > 1:
            raise GitHubAPIError("Unprocessable Entity", status_code=422)
        if any(c.line in self.bad_lines for c in comments):
            raise GitHubAPIError("Line could not be resolved", status_code=422)
        self.reviews.append(list(comments))
        return {"id": len(self.reviews)}


class FakeThreads:
    def __init__(self, threads: Optional[List[ReviewThread]] = None, error: Optional[Exception] = None):
        self.threads = threads or []
        self.error = error
        self.calls = []

    async def list_review_threads(self, owner, repo, pull_number):
        self.calls.append((owner, repo, pull_number))
        if self.error:
            raise self.error
        return self.threads
