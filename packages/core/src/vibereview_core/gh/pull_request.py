"""GitHub pull-request access through PyGithub."""

from __future__ import annotations

import json
import logging
import os

from github import Github, GithubException

from vibereview_core.models import Annotation, ChangedFile
from vibereview_core.summary import format_comment

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_diff(pr):
    return pr.get_files()


def resolve_repo_name(repo_name: str | None = None) -> str:
    """Return owner/name from the argument or GITHUB_REPOSITORY."""
    name = repo_name or os.environ.get("GITHUB_REPOSITORY")
    if not name:
        raise ValueError("Could not determine the repository. Pass --repo or set GITHUB_REPOSITORY.")
    return name


def resolve_pull_number(pr_number: int | None = None, event_path: str | None = None) -> int:
    """Return the PR number from the argument or the Actions event payload.

    Raises ValueError when neither source names a pull request, e.g. when the
    workflow was triggered by a push instead of a pull_request event.
    """
    if pr_number is not None:
        return pr_number
    event_path = event_path or os.environ.get("GITHUB_EVENT_PATH")
    if event_path:
        try:
            with open(event_path, encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Could not read the GitHub event payload at {event_path}: {e}")
        number = (payload.get("pull_request") or {}).get("number")
        if number:
            return int(number)
    raise ValueError("This command can only be run on a pull request. Pass --pr or run on a pull_request event.")


def to_changed_file(file) -> ChangedFile:
    return ChangedFile(
        path=file.filename,
        status=file.status,
        additions=file.additions,
        deletions=file.deletions,
        patch=file.patch,
    )


class GitHubPullRequest:
    """The pull request under review: its changed files and where reviews go."""

    def __init__(self, repo, pr_number: int):
        self.repo = repo
        try:
            self.pr = get_pull(repo, pr_number)
        except GithubException:
            raise ValueError(f"PR #{pr_number} not found in {repo.full_name}.")
        self.number = pr_number

    @property
    def head_sha(self) -> str:
        return self.pr.head.sha

    def list_changed_files(self) -> list[ChangedFile]:
        return [to_changed_file(f) for f in get_diff(self.pr)]

    def post_review(self, annotations: list[Annotation], body: str, fallback_body: str) -> None:
        """Post one COMMENT review carrying every annotation inline.

        If GitHub rejects the review (typically 422 for a line outside the
        current diff view) everything is posted as a single plain comment
        instead, so no finding is lost.
        """
        comments = [
            {"path": a.path, "line": a.line, "side": a.side, "body": format_comment(a.severity, a.body)}
            for a in annotations
        ]
        try:
            self.pr.create_review(
                commit=self.repo.get_commit(self.head_sha),
                body=body,
                event="COMMENT",
                comments=comments,
            )
            logger.info("Posted review with %d inline comment(s)", len(comments))
        except GithubException as e:
            logger.warning("Could not post inline comments, posting summary instead: %s", e)
            self.post_plain_comment(fallback_body)

    def post_plain_comment(self, body: str) -> None:
        self.pr.create_issue_comment(body)
