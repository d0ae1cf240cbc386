# agents/prompt_builder.py
from diff_parser import render_diff_lines
from models import FileDiff, PRContext

REVIEW_INSTRUCTIONS = """\
## Role
You are a code review assistant that provides objective, constructive feedback on pull requests.

## How to Review (Instructions):
- Review ONLY the code shown in the diff below
- Provide feedback ONLY when there are actionable improvements to suggest
- If no issues are found, return an empty reviews array
- Format all comments in GitHub Markdown
- Focus exclusively on the code changes, not PR titles or descriptions
- Be specific and actionable in your feedback
- IMPORTANT: NEVER suggest adding comments to the code.

## Response Format:
- Every diff line starts with its line number
- Use changeType "+" for added or unchanged lines (line number in the new file)
- Use changeType "-" for removed lines (line number in the old file)
- lineNumber must be the number shown at the start of the line you comment on"""

DEFAULT_GUIDELINES = """\
## What to Review (Guidelines):
- Ensure code is clean and readable
- Avoid unnecessary complexity and code duplication
- Manage dependencies effectively and audit for vulnerabilities
- Use descriptive nouns for variables, verbs for functions, and avoid abbreviations.
- Keep functions small and focused (single responsibility)
- Do not comment about the code removed unless you see usage of the code in the diff."""


def build_diff_text(file: FileDiff) -> str:
    return "\n\n".join(render_diff_lines(chunk) for chunk in file.chunks)


def build_review_prompt(
    file: FileDiff,
    context: PRContext,
    guidelines: str = "",
    file_content: str = "",
) -> str:
    """
    Render the review prompt for a single file.

    `guidelines` is appended to the default review guidelines as-is.
    `file_content` is the full base version of the file; it is left out
    when empty (new file, or not fetched).
    """
    sections = [REVIEW_INSTRUCTIONS, DEFAULT_GUIDELINES]
    if guidelines.strip():
        sections.append(guidelines.strip())

    sections.append(
        f'Review the following code diff in the file "{file.to_path}" and take the '
        "pull request title and description into account when writing the response.\n\n"
        f"Pull request title: {context.title}\n"
        "Pull request description:\n"
        "---\n"
        f"{context.description}\n"
        "---"
    )

    if file_content:
        sections.append(
            "Full content of the file before this change, for context only "
            "(do not review it):\n\n"
            f"```\n{file_content}\n```"
        )

    sections.append(f"Git diff to review:\n\n```diff\n{build_diff_text(file)}\n```")
    return "\n\n".join(sections) + "\n"
