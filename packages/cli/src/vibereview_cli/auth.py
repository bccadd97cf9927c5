"""GitHub credentials for a review run.

Inside a GitHub Actions job the token must come from the workflow
(``GITHUB_TOKEN``, already read into the config by ``load_config``). A local
run may instead borrow the session of the GitHub CLI.
"""

from __future__ import annotations

import logging
import os
import subprocess

logger = logging.getLogger(__name__)

GH_CLI_TIMEOUT = 5


def running_in_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def gh_cli_token() -> str | None:
    """Return the token of the current ``gh auth login`` session, if any."""
    try:
        completed = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=GH_CLI_TIMEOUT,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as e:
        logger.debug("gh CLI unavailable: %s", e)
        return None

    if completed.returncode != 0:
        logger.debug("gh auth token exited with %d: %s", completed.returncode, completed.stderr.strip())
        return None
    return completed.stdout.strip() or None


def resolve_github_token(config: dict) -> str | None:
    """Fill ``config["github_token"]`` and return it, or None when nothing is available.

    The configured token always wins. The gh CLI is only consulted outside
    GitHub Actions, where a missing workflow token is a configuration error.
    """
    token = config.get("github_token")
    if not token and not running_in_actions():
        token = gh_cli_token()
        if token:
            logger.debug("Using GitHub token from the gh CLI session.")
    config["github_token"] = token
    return token


def missing_token_message() -> str:
    if running_in_actions():
        return "No GitHub token found. Pass `GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}` in the workflow env."
    return (
        "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
        "Create a token at https://github.com/settings/tokens"
    )
