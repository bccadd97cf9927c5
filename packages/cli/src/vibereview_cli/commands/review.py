"""review command — run AI review on a pull request."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from vibereview_core.config import ConfigError, api_key_env_var, api_key_for, load_config, validate_config
from vibereview_core.gh.pull_request import GitHubPullRequest, get_repo, resolve_pull_number, resolve_repo_name
from vibereview_core.providers.base import REVIEW_DEPTHS
from vibereview_core.providers.registry import PROVIDERS, create_review_model
from vibereview_core.reviewer import run_review
from vibereview_cli.outputs import to_json, write_github_outputs

console = Console()


@click.command("review")
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to GITHUB_REPOSITORY.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the pull_request event payload.",
)
@click.option(
    "--provider",
    type=click.Choice(sorted(PROVIDERS)),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--model", default=None, help="Model identifier. Defaults to the provider's default model.")
@click.option(
    "--review-depth",
    type=click.Choice(REVIEW_DEPTHS),
    default=None,
    help="How exhaustive the review should be. Overrides config file.",
)
@click.option("--include", default=None, help="Comma-separated glob patterns of files to review.")
@click.option("--exclude", default=None, help="Comma-separated glob patterns of files to skip.")
@click.option("--max-files", type=int, default=None, help="Maximum number of files to review.")
@click.option("--language", default=None, help="Language the feedback is written in.")
@click.option("--custom-instruction", default=None, help="Extra instructions appended to the review prompt.")
@click.option(
    "--fail-on-critical/--no-fail-on-critical",
    default=None,
    help="Exit non-zero when a critical issue is found.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print review comments without posting to GitHub.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the run outputs as JSON.")
@click.option(
    "--github-output",
    "github_output",
    default=None,
    envvar="GITHUB_OUTPUT",
    help="File to append step outputs to. Defaults to GITHUB_OUTPUT.",
)
@click.pass_context
def review_cmd(
    ctx,
    repo: str | None,
    pr_number: int | None,
    provider: str | None,
    model: str | None,
    review_depth: str | None,
    include: str | None,
    exclude: str | None,
    max_files: int | None,
    language: str | None,
    custom_instruction: str | None,
    fail_on_critical: bool | None,
    shadow: bool,
    as_json: bool,
    github_output: str | None,
):
    """Review the changed files of a pull request and post inline comments.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use gh CLI)
      ANTHROPIC_API_KEY    Required when using --provider anthropic
      OPENAI_API_KEY       Required when using --provider openai
      VIBEREVIEW_API_KEY   Optional; used for whichever provider is selected
    """
    from vibereview_cli.auth import missing_token_message, resolve_github_token

    config_path = (ctx.obj or {}).get("config_path", ".vibereview.yml")
    config = load_config(
        config_path,
        cli_overrides={
            "provider": provider,
            "model": model,
            "review_depth": review_depth,
            "include": include,
            "exclude": exclude,
            "max_files": max_files,
            "language": language,
            "custom_instruction": custom_instruction,
            "fail_on_critical": fail_on_critical,
        },
    )

    try:
        validate_config(config)
    except ConfigError as e:
        raise click.UsageError(str(e))

    token = resolve_github_token(config)
    if not token:
        raise click.UsageError(missing_token_message())

    api_key = api_key_for(config)
    if not api_key:
        raise click.UsageError(f"{api_key_env_var(config['provider'])} environment variable is not set.")

    try:
        repo_name = resolve_repo_name(repo)
        number = resolve_pull_number(pr_number)
        pull_request = GitHubPullRequest(get_repo(repo_name, token=token), number)
    except ValueError as e:
        raise click.ClickException(str(e))

    review_model = create_review_model(config["provider"], api_key, config.get("model"))
    console.print(
        f"Starting code review of {repo_name}#{number} with {config['provider']} "
        f"({review_model.model}), review depth: {config['review_depth']}"
    )

    result = run_review(pull_request, review_model, config, shadow=shadow)

    outputs = result.to_outputs()
    if github_output:
        write_github_outputs(Path(github_output), outputs)
    if as_json:
        click.echo(to_json(outputs))

    console.print(f"Review complete: {result.issues_found} issue(s) found in {result.files_reviewed} file(s).")

    if config["fail_on_critical"] and result.critical_count:
        console.print(f"[red]Found {result.critical_count} critical issue(s).[/red]")
        ctx.exit(1)
